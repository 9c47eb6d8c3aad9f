"""PluginHost — promote a validated artifact into the plugin directory."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from paasctl.exceptions import InstallIOError
from paasctl.types import InstallResult

logger = logging.getLogger(__name__)

_EXECUTABLE_MODE = 0o755


class PluginHost:
    """Owns ``<home>/plugins``. Registration consumes the install's staging directory."""

    def __init__(self, plugins_dir: Path) -> None:
        self._plugins_dir = Path(plugins_dir)

    @property
    def plugins_dir(self) -> Path:
        return self._plugins_dir

    def register(self, result: InstallResult) -> Path:
        """Move the staged artifact into the plugin directory and mark it executable.

        The staging directory is removed whether or not the move succeeds.

        Returns:
            Final path of the plugin binary.

        Raises:
            InstallIOError: Directory creation, move or chmod failed.
        """
        source = result.artifact.path
        target = self._plugins_dir / source.name
        try:
            self._plugins_dir.mkdir(parents=True, exist_ok=True)
            # shutil.move falls back to copy when staging is on another filesystem
            shutil.move(str(source), str(target))
            os.chmod(target, _EXECUTABLE_MODE)
        except OSError as exc:
            raise InstallIOError(
                f"Could not copy plugin binary to {target}: {exc}", path=str(target)
            ) from exc
        finally:
            shutil.rmtree(result.staging_dir, ignore_errors=True)

        logger.info("Registered plugin '%s' at %s", result.plugin_name or source.name, target)
        return target

    def installed(self) -> list[Path]:
        """Plugin binaries currently in the plugin directory, sorted by name."""
        if not self._plugins_dir.is_dir():
            return []
        return sorted(p for p in self._plugins_dir.iterdir() if p.is_file())
