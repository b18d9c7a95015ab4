"""Filesystem helpers for macdevsetup."""

import logging
import os
from pathlib import Path
from typing import Iterable, List

from rich.console import Console

from macdevsetup.errors import SetupError


class FileSystemService:
    """Encapsulates directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def missing_dirs(self, paths: Iterable[Path]) -> List[Path]:
        return [Path(path) for path in paths if not Path(path).is_dir()]

    def ensure_dir(self, path: Path, mode: int = 0o755):
        try:
            Path(path).mkdir(parents=True, exist_ok=True, mode=mode)
            self.logger.debug("Ensured directory: %s", path)
        except OSError as exc:
            raise SetupError(f"Could not create directory {path}: {exc}") from exc

    def set_permissions(self, path: Path, mode: int):
        try:
            os.chmod(path, mode)
        except OSError as exc:
            message = f"Warning: Could not set permissions on {path}: {exc}"
            self.console.print(f"[yellow]{message}[/yellow]")
            self.logger.warning(message)
