"""
Debug Artifacts Management for the render pipeline.

Generated Bud programs are normally discarded after each render call.
When debugging is enabled they are written to a debug directory so the
exact source handed to the evaluator can be inspected.
"""

from pathlib import Path
from typing import Optional

from .config import get_config
from .logging import get_logger

logger = get_logger(__name__)


class DebugArtifactManager:
    """Manages debugging artifacts for generated Bud programs."""

    def __init__(self, debug_dir: Optional[str] = None):
        """
        Initialize debug artifact manager.

        Args:
            debug_dir: Directory for artifacts (from configuration if None)
        """
        if debug_dir is None:
            debug_dir = get_config().debug.debug_dir
        self.debug_dir = Path(debug_dir)

    def get_bud_source_path(self, function_name: str) -> Path:
        """Get path for a generated Bud source file."""
        return self.debug_dir / f"{function_name}.bud"

    def save_bud_source(self, function_name: str, source: str) -> Path:
        """
        Save generated Bud source to the debug directory.

        Args:
            function_name: Name of the generated function
            source: Bud source text

        Returns:
            Path to saved file
        """
        self.debug_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.get_bud_source_path(function_name)

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(source)

        logger.info(f"Saved generated Bud source: {file_path}")
        return file_path

    def list_artifacts(self) -> list:
        """List saved Bud sources, oldest first."""
        if not self.debug_dir.exists():
            return []
        return sorted(self.debug_dir.glob("*.bud"), key=lambda p: p.stat().st_mtime)

    def cleanup(self) -> int:
        """
        Remove all saved Bud sources.

        Returns:
            Number of files removed
        """
        removed = 0
        for path in self.list_artifacts():
            path.unlink()
            removed += 1
        if removed:
            logger.info(f"Removed {removed} debug artifacts from {self.debug_dir}")
        return removed


def get_debug_manager() -> DebugArtifactManager:
    """Get a debug artifact manager for the configured directory."""
    return DebugArtifactManager()
