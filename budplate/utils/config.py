"""
Configuration System for budplate.

This module provides a single configuration object loaded from a JSON or
YAML file, with a small set of environment variable overrides. It covers
the ambient settings around rendering (default encoder, debug artifacts,
evaluator limits and logging); per-call choices live on
`budplate.renderer.Configuration`.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .logging import get_logger, setup_logging

logger = get_logger(__name__)

_TRUTHY = ("1", "true", "yes")


@dataclass
class DebugConfig:
    """Debug artifact configuration."""

    enabled: bool = False
    debug_dir: str = "debug_dir"


@dataclass
class RenderConfig:
    """Defaults for render calls."""

    default_encoder: str = "none"
    auto_trim: bool = False
    function_name: str = "render"


@dataclass
class RuntimeConfig:
    """Bud evaluator limits."""

    max_call_depth: int = 64


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    enable_file_logging: bool = False
    log_file: str = "budplate.log"


class BudplateConfig:
    """
    Unified configuration manager for budplate.

    Loads a JSON or YAML file when one is given or found next to this
    module, falling back to defaults for anything missing.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, uses default location.
        """
        self.config_file = self._get_config_file_path(config_file)
        self._config_data = self._load_config()

        self.debug = self._create_debug_config()
        self.render = self._create_render_config()
        self.runtime = self._create_runtime_config()
        self.logging = self._create_logging_config()

    def _get_config_file_path(self, config_file: Optional[str]) -> Path:
        """Get the configuration file path."""
        if config_file:
            return Path(config_file)

        env_file = os.getenv("BUDPLATE_CONFIG")
        if env_file:
            return Path(env_file)

        config_dir = Path(__file__).parent
        yaml_config = config_dir / "budplate_config.yaml"
        json_config = config_dir / "budplate_config.json"

        if yaml_config.exists():
            return yaml_config
        return json_config

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not self.config_file.exists():
            logger.debug(f"Configuration file {self.config_file} not found, using defaults")
            return {}

        try:
            with open(self.config_file, "r") as f:
                if self.config_file.suffix.lower() in (".yaml", ".yml"):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Failed to load configuration from {self.config_file}: {e}")
            return {}

        if not isinstance(config_data, dict):
            logger.error(f"Configuration in {self.config_file} must be a mapping, using defaults")
            return {}

        logger.info(f"Loaded configuration from {self.config_file}")
        return config_data

    def _section(self, name: str) -> Dict[str, Any]:
        data = self._config_data.get(name) or {}
        if not isinstance(data, dict):
            logger.warning(f"Configuration section '{name}' is not a mapping, ignoring it")
            return {}
        return data

    def _create_debug_config(self) -> DebugConfig:
        """Create debug configuration from loaded data."""
        debug_data = self._section("debug")

        env_enabled = os.getenv("BUDPLATE_DEBUG", "").lower() in _TRUTHY
        enabled = env_enabled or bool(debug_data.get("enabled", False))

        return DebugConfig(
            enabled=enabled,
            debug_dir=os.getenv("BUDPLATE_DEBUG_DIR") or debug_data.get("debug_dir", "debug_dir"),
        )

    def _create_render_config(self) -> RenderConfig:
        """Create render configuration from loaded data."""
        render_data = self._section("render")

        return RenderConfig(
            default_encoder=os.getenv("BUDPLATE_ENCODER") or render_data.get("default_encoder", "none"),
            auto_trim=bool(render_data.get("auto_trim", False)),
            function_name=render_data.get("function_name", "render"),
        )

    def _create_runtime_config(self) -> RuntimeConfig:
        """Create runtime configuration from loaded data."""
        runtime_data = self._section("runtime")

        return RuntimeConfig(
            max_call_depth=int(runtime_data.get("max_call_depth", 64)),
        )

    def _create_logging_config(self) -> LoggingConfig:
        """Create logging configuration from loaded data."""
        log_data = self._section("logging")

        return LoggingConfig(
            level=log_data.get("level", "WARNING"),
            enable_file_logging=bool(log_data.get("enable_file_logging", False)),
            log_file=log_data.get("log_file", "budplate.log"),
        )

    def is_debug_enabled(self) -> bool:
        """Check if debug artifacts are enabled."""
        return self.debug.enabled

    def configure_logging(self) -> None:
        """Apply the logging section to the package logger."""
        log_file = self.logging.log_file if self.logging.enable_file_logging else None
        setup_logging(self.logging.level, log_file)

    def to_dict(self) -> Dict[str, Any]:
        """Return the effective configuration as plain data."""
        return {
            "version": "1.0",
            "description": "budplate configuration",
            "debug": {
                "enabled": self.debug.enabled,
                "debug_dir": self.debug.debug_dir,
            },
            "render": {
                "default_encoder": self.render.default_encoder,
                "auto_trim": self.render.auto_trim,
                "function_name": self.render.function_name,
            },
            "runtime": {
                "max_call_depth": self.runtime.max_call_depth,
            },
            "logging": {
                "level": self.logging.level,
                "enable_file_logging": self.logging.enable_file_logging,
                "log_file": self.logging.log_file,
            },
        }

    def save_config(self) -> None:
        """Save current configuration to file."""
        config_data = self.to_dict()

        try:
            with open(self.config_file, "w") as f:
                if self.config_file.suffix.lower() in (".yaml", ".yml"):
                    yaml.safe_dump(config_data, f, sort_keys=False)
                else:
                    json.dump(config_data, f, indent=2)
            logger.info(f"Configuration saved to {self.config_file}")
        except OSError as e:
            logger.error(f"Failed to save configuration: {e}")


# Global configuration instance
_global_config: Optional[BudplateConfig] = None


def get_config() -> BudplateConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = BudplateConfig()
    return _global_config


def set_config(config: Optional[BudplateConfig]) -> None:
    """Set the global configuration instance (None resets to lazy defaults)."""
    global _global_config
    _global_config = config


def load_config(config_file: str) -> BudplateConfig:
    """Load configuration from a specific file."""
    return BudplateConfig(config_file)
