"""
Utils package for budplate.

This module provides the ambient pieces shared by the render pipeline:
the exception hierarchy, configuration, logging and debug artifacts.
"""

# Core exceptions
from .exceptions import (
    BudplateError,
    TemplateError,
    MissingEndBraces,
    UnexpectedEndBraces,
    CompileError,
    RuntimeFault,
    FaultKind,
    ArgumentError,
    UnknownEncoderError,
)

# Configuration
from .config import (
    BudplateConfig,
    DebugConfig,
    RenderConfig,
    RuntimeConfig,
    LoggingConfig,
    get_config,
    set_config,
    load_config,
)

from .debug_artifacts import DebugArtifactManager, get_debug_manager
from .logging import get_logger, setup_logging

__all__ = [
    # Core exceptions
    "BudplateError",
    "TemplateError",
    "MissingEndBraces",
    "UnexpectedEndBraces",
    "CompileError",
    "RuntimeFault",
    "FaultKind",
    "ArgumentError",
    "UnknownEncoderError",

    # Configuration
    "BudplateConfig",
    "DebugConfig",
    "RenderConfig",
    "RuntimeConfig",
    "LoggingConfig",
    "get_config",
    "set_config",
    "load_config",

    # Debug artifacts
    "DebugArtifactManager",
    "get_debug_manager",

    # Logging
    "get_logger",
    "setup_logging",
]
