"""
Unit tests for the package information utility.
"""

import platform
import sys
from unittest.mock import patch

import pytest
import yaml

from budplate.utils.info import get_budplate_info, get_system_info, main, print_info


class TestSystemInfo:
    """Test system information collection."""

    def test_get_system_info_basic(self):
        """Test getting basic system information."""
        info = get_system_info()

        assert info['python_version'] == sys.version
        assert info['platform'] == platform.platform()
        assert info['architecture'] == platform.architecture()
        assert info['yaml_version'] == yaml.__version__


class TestBudplateInfo:
    """Test budplate-specific information collection."""

    @patch('budplate.__version__', '1.0.0')
    @patch('budplate.__author__', 'Test Author')
    def test_get_budplate_info_basic(self):
        """Test getting basic budplate information."""
        info = get_budplate_info()

        assert info['version'] == '1.0.0'
        assert info['author'] == 'Test Author'
        assert 'html' in info['encoders']
        assert info['config']['runtime']['max_call_depth'] == 64

    def test_get_budplate_info_reflects_environment(self, monkeypatch):
        """Test that environment overrides show up in the reported config."""
        monkeypatch.setenv('BUDPLATE_ENCODER', 'html')
        info = get_budplate_info()
        assert info['config']['render']['default_encoder'] == 'html'


class TestPrintInfo:
    """Test the console output."""

    def test_print_info(self, capsys):
        """Test that the report includes the main sections."""
        print_info()
        output = capsys.readouterr().out

        assert 'budplate template compiler' in output
        assert 'budplate Version:' in output
        assert 'Encoders: html, none' in output
        assert 'Max Call Depth: 64' in output
        assert 'PyYAML Version:' in output

    def test_main_success(self, capsys):
        """Test the console entry point."""
        main()
        assert 'budplate Version:' in capsys.readouterr().out

    @patch('budplate.utils.info.print_info', side_effect=RuntimeError('boom'))
    def test_main_error(self, mock_print_info, capsys):
        """Test that failures exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert 'Error getting system information: boom' in capsys.readouterr().out
