"""
Unit tests for the configuration system.

Tests defaults, JSON and YAML loading, environment overrides and the
global configuration instance.
"""

import json
import logging

import yaml

from budplate.utils.config import (
    BudplateConfig,
    get_config,
    load_config,
    set_config,
)
from budplate.utils.logging import setup_logging


class TestDefaults:
    """Test configuration without a file."""

    def test_default_values(self, tmp_path):
        """Test the built-in defaults."""
        config = BudplateConfig(str(tmp_path / "missing.json"))

        assert config.debug.enabled is False
        assert config.debug.debug_dir == "debug_dir"
        assert config.render.default_encoder == "none"
        assert config.render.auto_trim is False
        assert config.render.function_name == "render"
        assert config.runtime.max_call_depth == 64
        assert config.logging.level == "WARNING"
        assert config.is_debug_enabled() is False

    def test_to_dict_sections(self, tmp_path):
        """Test the plain-data form."""
        data = BudplateConfig(str(tmp_path / "missing.json")).to_dict()
        assert set(data) == {"version", "description", "debug", "render", "runtime", "logging"}
        assert data["render"]["default_encoder"] == "none"


class TestFileLoading:
    """Test loading configuration files."""

    def test_load_json(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "budplate.json"
        path.write_text(json.dumps({
            "render": {"default_encoder": "html", "function_name": "page"},
            "runtime": {"max_call_depth": 8},
        }))

        config = load_config(str(path))

        assert config.render.default_encoder == "html"
        assert config.render.function_name == "page"
        assert config.runtime.max_call_depth == 8
        assert config.debug.enabled is False

    def test_load_yaml(self, tmp_path):
        """Test loading a YAML file."""
        path = tmp_path / "budplate.yaml"
        path.write_text("debug:\n  enabled: true\n  debug_dir: out\n")

        config = load_config(str(path))

        assert config.debug.enabled is True
        assert config.debug.debug_dir == "out"

    def test_malformed_file_uses_defaults(self, tmp_path):
        """Test that an unreadable file falls back to defaults."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        config = load_config(str(path))

        assert config.render.default_encoder == "none"

    def test_non_mapping_file_uses_defaults(self, tmp_path):
        """Test that a file without a top-level mapping is ignored."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        assert load_config(str(path)).runtime.max_call_depth == 64

    def test_non_mapping_section_is_ignored(self, tmp_path):
        """Test that a malformed section falls back to its defaults."""
        path = tmp_path / "section.json"
        path.write_text(json.dumps({"render": "html", "runtime": {"max_call_depth": 5}}))

        config = load_config(str(path))

        assert config.render.default_encoder == "none"
        assert config.runtime.max_call_depth == 5

    def test_config_file_from_environment(self, tmp_path, monkeypatch):
        """Test BUDPLATE_CONFIG."""
        path = tmp_path / "env.json"
        path.write_text(json.dumps({"runtime": {"max_call_depth": 3}}))
        monkeypatch.setenv("BUDPLATE_CONFIG", str(path))

        assert BudplateConfig().runtime.max_call_depth == 3


class TestEnvironmentOverrides:
    """Test environment variables that override file settings."""

    def test_debug_override(self, tmp_path, monkeypatch):
        """Test BUDPLATE_DEBUG and BUDPLATE_DEBUG_DIR."""
        monkeypatch.setenv("BUDPLATE_DEBUG", "true")
        monkeypatch.setenv("BUDPLATE_DEBUG_DIR", str(tmp_path))

        config = BudplateConfig(str(tmp_path / "missing.json"))

        assert config.is_debug_enabled() is True
        assert config.debug.debug_dir == str(tmp_path)

    def test_debug_override_false_values(self, tmp_path, monkeypatch):
        """Test that other values do not enable debugging."""
        monkeypatch.setenv("BUDPLATE_DEBUG", "0")
        assert BudplateConfig(str(tmp_path / "missing.json")).is_debug_enabled() is False

    def test_encoder_override(self, tmp_path, monkeypatch):
        """Test that BUDPLATE_ENCODER wins over the file."""
        path = tmp_path / "budplate.json"
        path.write_text(json.dumps({"render": {"default_encoder": "none"}}))
        monkeypatch.setenv("BUDPLATE_ENCODER", "html")

        assert load_config(str(path)).render.default_encoder == "html"


class TestSaveConfig:
    """Test writing configuration files."""

    def test_save_json(self, tmp_path):
        """Test saving and reloading JSON."""
        path = tmp_path / "saved.json"
        config = BudplateConfig(str(path))
        config.runtime.max_call_depth = 12
        config.save_config()

        assert json.loads(path.read_text())["runtime"]["max_call_depth"] == 12
        assert load_config(str(path)).runtime.max_call_depth == 12

    def test_save_yaml(self, tmp_path):
        """Test saving YAML."""
        path = tmp_path / "saved.yaml"
        config = BudplateConfig(str(path))
        config.render.default_encoder = "html"
        config.save_config()

        assert yaml.safe_load(path.read_text())["render"]["default_encoder"] == "html"


class TestConfigureLogging:
    """Test applying the logging section."""

    def teardown_method(self):
        """Restore the default logging setup."""
        setup_logging()

    def test_level_from_file(self, tmp_path):
        """Test that the configured level is applied."""
        path = tmp_path / "logging.json"
        path.write_text(json.dumps({"logging": {"level": "DEBUG"}}))

        load_config(str(path)).configure_logging()

        assert logging.getLogger("budplate").level == logging.DEBUG

    def test_file_logging(self, tmp_path):
        """Test that file logging adds a file handler."""
        path = tmp_path / "logging.yaml"
        log_file = tmp_path / "out.log"
        path.write_text(yaml.safe_dump({
            "logging": {"level": "INFO", "enable_file_logging": True, "log_file": str(log_file)},
        }))

        load_config(str(path)).configure_logging()

        logger = logging.getLogger("budplate")
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        for handler in logger.handlers:
            handler.close()


class TestGlobalConfig:
    """Test the global configuration instance."""

    def test_get_config_is_cached(self):
        """Test that get_config returns one instance."""
        assert get_config() is get_config()

    def test_set_config(self, tmp_path):
        """Test replacing and resetting the global instance."""
        custom = BudplateConfig(str(tmp_path / "missing.json"))
        set_config(custom)
        assert get_config() is custom

        set_config(None)
        assert get_config() is not custom
