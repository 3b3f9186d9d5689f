"""
Unit tests for logging utilities.

Tests logger setup, naming and the render pipeline log messages.
"""

import logging
import os
import tempfile
from unittest.mock import Mock, patch

from budplate.utils.exceptions import FaultKind, MissingEndBraces, RuntimeFault
from budplate.utils.logging import RenderLogger, get_logger, setup_logging


class TestLoggingSetup:
    """Test logging setup and configuration."""

    def teardown_method(self):
        """Restore the default configuration."""
        setup_logging()

    def test_setup_logging_default(self):
        """Test default logging setup."""
        setup_logging()

        logger = logging.getLogger('budplate')
        assert logger.level == logging.WARNING
        assert len(logger.handlers) > 0
        assert logger.propagate is False

    def test_setup_logging_debug_level(self):
        """Test logging setup with debug level."""
        setup_logging(level='DEBUG')

        logger = logging.getLogger('budplate')
        assert logger.level == logging.DEBUG

    def test_setup_logging_invalid_level(self):
        """Test logging setup with invalid level defaults to WARNING."""
        setup_logging(level='INVALID')

        logger = logging.getLogger('budplate')
        assert logger.level == logging.WARNING

    def test_setup_logging_with_file(self):
        """Test logging setup with file output."""
        with tempfile.NamedTemporaryFile(suffix='.log', delete=False) as f:
            log_file = f.name

        try:
            setup_logging(level='INFO', log_file=log_file)

            logger = logging.getLogger('budplate')
            handler_types = [type(h).__name__ for h in logger.handlers]
            assert 'StreamHandler' in handler_types
            assert 'FileHandler' in handler_types

            logger.info("Test message")
            for handler in logger.handlers:
                handler.flush()

            with open(log_file, 'r') as f:
                assert "Test message" in f.read()
        finally:
            for handler in logging.getLogger('budplate').handlers:
                handler.close()
            if os.path.exists(log_file):
                os.unlink(log_file)

    def test_setup_logging_environment_variable(self):
        """Test logging setup with environment variable."""
        with patch.dict('os.environ', {'BUDPLATE_LOG_LEVEL': 'DEBUG'}):
            setup_logging()

            logger = logging.getLogger('budplate')
            assert logger.level == logging.DEBUG

    def test_setup_logging_removes_existing_handlers(self):
        """Test that setup_logging removes existing handlers."""
        logger = logging.getLogger('budplate')
        dummy_handler = logging.StreamHandler()
        logger.addHandler(dummy_handler)

        setup_logging()

        assert dummy_handler not in logger.handlers
        assert len(logger.handlers) > 0

    def test_get_logger(self):
        """Test getting logger instances."""
        logger1 = get_logger('test_module')
        logger2 = get_logger('test_module')

        assert logger1 is logger2
        assert logger1.name == 'budplate.test_module'

    def test_get_logger_package_module(self):
        """Test that package module names are not prefixed twice."""
        assert get_logger('budplate.template').name == 'budplate.template'
        assert get_logger('budplate').name == 'budplate'


class TestRenderLogger:
    """Test RenderLogger messages."""

    def test_render_logger_creation(self):
        """Test RenderLogger creation."""
        render_logger = RenderLogger('test_component')
        assert render_logger.logger.name == 'budplate.test_component'

    @patch('budplate.utils.logging.get_logger')
    def test_log_render_start(self, mock_get_logger):
        """Test logging the start of a render."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        RenderLogger('test').log_render_start(42, ['name', 'count'])

        mock_logger.debug.assert_called_once()
        message = mock_logger.debug.call_args[0][0]
        assert '42 chars' in message
        assert "['name', 'count']" in message

    @patch('budplate.utils.logging.get_logger')
    def test_log_generated_source(self, mock_get_logger):
        """Test logging the generated program."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        RenderLogger('test').log_generated_source('render', 'function render()\nend')

        message = mock_logger.debug.call_args[0][0]
        assert "'render'" in message
        assert 'function render()' in message

    @patch('budplate.utils.logging.get_logger')
    def test_log_template_error(self, mock_get_logger):
        """Test that template errors are warnings."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        RenderLogger('test').log_template_error(MissingEndBraces(3))

        mock_logger.warning.assert_called_once()
        assert 'offset=3' in mock_logger.warning.call_args[0][0]

    @patch('budplate.utils.logging.get_logger')
    def test_log_fault(self, mock_get_logger):
        """Test that runtime faults are errors."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        RenderLogger('test').log_fault(RuntimeFault(FaultKind.DIVIDE_BY_ZERO, "Division by zero"))

        mock_logger.error.assert_called_once()
        assert 'DivideByZero' in mock_logger.error.call_args[0][0]
