"""
Logging configuration and utilities.

This module provides centralized logging configuration for the
budplate package with appropriate formatting and levels.
"""

import logging
import os
from typing import Optional

ROOT_LOGGER_NAME = "budplate"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the budplate package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    # Library default is quiet; applications opt in to more detail
    if level is None:
        level = os.environ.get("BUDPLATE_LOG_LEVEL", "WARNING")

    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class RenderLogger:
    """
    Logging helpers for the render pipeline.

    Each render call goes through parse, generate, compile and invoke;
    these methods keep the messages for those stages consistent.
    """

    def __init__(self, name: str):
        """
        Initialize logger for specific component.

        Args:
            name: Component name for logging context
        """
        self.logger = get_logger(name)

    def log_render_start(self, template_length: int, parameters: list) -> None:
        """
        Log the beginning of a render call.

        Args:
            template_length: Length of the template source in characters
            parameters: Argument names passed to the render function
        """
        self.logger.debug(
            f"Rendering template ({template_length} chars) with parameters {list(parameters)}"
        )

    def log_parse_result(self, segment_count: int) -> None:
        """
        Log the outcome of template segmentation.

        Args:
            segment_count: Number of segments produced by the parser
        """
        self.logger.debug(f"Parsed template into {segment_count} segments")

    def log_generated_source(self, function_name: str, source: str) -> None:
        """
        Log the generated Bud program.

        Args:
            function_name: Name of the generated function
            source: Generated Bud source text
        """
        self.logger.debug(f"Generated Bud source for '{function_name}':\n{source}")

    def log_template_error(self, error: Exception) -> None:
        """
        Log a template or compile error before it propagates.

        Args:
            error: The error raised by the parser or the evaluator compiler
        """
        self.logger.warning(f"Template could not be compiled: {error}")

    def log_fault(self, error: Exception) -> None:
        """
        Log an evaluator runtime fault before it propagates.

        Args:
            error: The fault raised while executing the generated program
        """
        self.logger.error(f"Template execution faulted: {error}")


# Initialize logging on module import
setup_logging()
