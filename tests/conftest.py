"""
Pytest configuration and shared fixtures for budplate tests.

This module provides common test fixtures, configuration, and utilities
used across the test suite.
"""

import pytest

from budplate import Configuration, HtmlEncoding, NoEncoding, Template
from budplate.encoding import EncodeFunction
from budplate.runtime import Bud
from budplate.utils.config import set_config


BUDPLATE_ENV_VARS = (
    "BUDPLATE_CONFIG",
    "BUDPLATE_DEBUG",
    "BUDPLATE_DEBUG_DIR",
    "BUDPLATE_ENCODER",
    "BUDPLATE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Run every test against default configuration and a clean environment."""
    for name in BUDPLATE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    yield
    set_config(None)


# Configuration fixtures
@pytest.fixture
def default_config():
    """Render configuration without output encoding."""
    return Configuration()


@pytest.fixture
def html_config():
    """Render configuration with HTML escaping."""
    return Configuration.for_html()


# Evaluator fixtures
@pytest.fixture
def bud():
    """A fresh evaluator with a pass-through `encode` native."""
    return Bud().with_native_function("encode", EncodeFunction(NoEncoding()))


@pytest.fixture
def html_bud():
    """A fresh evaluator with an HTML-escaping `encode` native."""
    return Bud().with_native_function("encode", EncodeFunction(HtmlEncoding()))


# Template fixtures
@pytest.fixture
def greeting_template():
    """The canonical named-argument template."""
    return Template("Hello, {{= name }}!")


@pytest.fixture
def sample_templates():
    """Templates covering each command kind."""
    return {
        'literal': "Plain text with no commands.\n",
        'expression': "Total: {{= 1 + 2 }}",
        'raw_expression': "{{:= \"<b>\" }}",
        'statement': "{{ loop for i := 1 to 3 inclusive }}[{{= i }}]{{ end }}",
        'trimmed': "<ul>\n  {{- loop for i := 1 to 2 inclusive -}}\n  <li>{{= i }}</li>\n  {{- end -}}\n</ul>",
    }


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for complete render workflows"
    )
