"""Filesystem side of a run: the library tree and its shared config header."""

from __future__ import annotations

import contextlib
import dataclasses as dc
import logging
import shutil
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

CONFIG_HEADER = Path("include/mbedtls/config.h")
CONFIGS_DIR = Path("configs")
SEEDFILE = Path("tests/seedfile")
SEEDFILE_SIZE = 64

_REQUIRED_DIRS = ("library", "include", "tests")


class SetupError(RuntimeError):
    """Raised when the tree cannot be prepared for a run."""


class ActivationError(RuntimeError):
    """Raised when a candidate configuration cannot be copied into place."""


@dc.dataclass(frozen=True, slots=True)
class LibraryTree:
    """Paths inside the library source tree under test."""

    root: Path

    @property
    def config_header(self) -> Path:
        """Return the shared configuration header path."""
        return self.root / CONFIG_HEADER

    @property
    def backup(self) -> Path:
        """Return the path holding the original header during a run."""
        header = self.config_header
        return header.with_name(f"{header.name}.bak")

    @property
    def configs_dir(self) -> Path:
        """Return the directory holding candidate configuration headers."""
        return self.root / CONFIGS_DIR

    @property
    def seedfile(self) -> Path:
        """Return the entropy seed file path."""
        return self.root / SEEDFILE

    def check_layout(self) -> None:
        """Ensure ``root`` looks like the top of the library tree."""
        if not all((self.root / name).is_dir() for name in _REQUIRED_DIRS):
            msg = f"Must be run from root: {self.root}"
            raise SetupError(msg)

    def backup_config(self) -> None:
        """Copy the shared header aside so it can be restored later."""
        try:
            shutil.copyfile(self.config_header, self.backup)
        except OSError as exc:
            msg = f"Cannot back up {CONFIG_HEADER}: {exc}"
            raise SetupError(msg) from exc

    def restore_baseline(self) -> None:
        """Reset the shared header to the backed-up original, keeping the backup."""
        try:
            shutil.copyfile(self.backup, self.config_header)
        except OSError as exc:
            msg = f"Cannot reset {CONFIG_HEADER} from its backup: {exc}"
            raise SetupError(msg) from exc

    def activate(self, name: str) -> None:
        """Copy ``configs/<name>`` over the shared header."""
        try:
            shutil.copyfile(self.configs_dir / name, self.config_header)
        except OSError as exc:
            msg = f"Failed to activate {name}"
            raise ActivationError(msg) from exc

    def restore_backup(self) -> bool:
        """Move the backup back over the header.

        Returns ``False`` and logs a warning when that fails; a failed restore
        must not mask the outcome of the run.
        """
        try:
            self.backup.replace(self.config_header)
        except OSError as exc:
            logger.warning("%s not restored: %s", CONFIG_HEADER, exc)
            return False
        return True

    @contextlib.contextmanager
    def preserved_config(self) -> cabc.Iterator[LibraryTree]:
        """Back up the shared header and restore it on every exit path."""
        self.backup_config()
        try:
            yield self
        finally:
            self.restore_backup()

    def ensure_seedfile(self) -> bool:
        """Write a placeholder seed file when absent or too small.

        The content need not be random; it only lets configurations that read
        a non-volatile seed start up. Returns ``True`` when the file was
        written.
        """
        seedfile = self.seedfile
        if seedfile.is_file() and seedfile.stat().st_size >= SEEDFILE_SIZE:
            return False
        seedfile.write_bytes(b"*" * SEEDFILE_SIZE)
        logger.debug("wrote placeholder seed file %s", seedfile)
        return True


__all__ = [
    "CONFIG_HEADER",
    "SEEDFILE_SIZE",
    "ActivationError",
    "LibraryTree",
    "SetupError",
]
