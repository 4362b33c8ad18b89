"""Run settings and their environment overrides.

Build flags default to a strict, size-optimised set. ``REFCONFIG_CFLAGS``
replaces them for every build of the run unless the command line supplies
``--cflags``.
"""

from __future__ import annotations

import dataclasses as dc
import os
import shlex
import typing as typ

if typ.TYPE_CHECKING:
    from refconfig.workspace import LibraryTree

_ENV_VAR = "REFCONFIG_CFLAGS"
DEFAULT_CFLAGS = "-Os -Werror -Wall -Wextra"


def _validate_cflags(value: str, *, source: str) -> str:
    try:
        shlex.split(value)
    except ValueError as exc:
        msg = f"invalid {source} value {value!r}: {exc}"
        raise ValueError(msg) from None
    return value


def resolve_cflags(explicit: str | None = None) -> str:
    """Resolve the build flags from the command line, environment, or default.

    Raises
    ------
    ValueError
        If the chosen value does not split into shell words.
    """
    if explicit is not None:
        return _validate_cflags(explicit, source="--cflags")
    raw = os.environ.get(_ENV_VAR, "").strip()
    if not raw:
        return DEFAULT_CFLAGS
    return _validate_cflags(raw, source=_ENV_VAR)


@dc.dataclass(frozen=True, slots=True)
class RunSettings:
    """Settings shared by every configuration of a run.

    Attributes
    ----------
    tree:
        Library tree under test; commands run from its root.
    cflags:
        Compiler flags exported as ``CFLAGS`` to every build.
    stdout:
        Sink for banners and echoed command output; ``None`` means
        ``sys.stdout``.
    stderr:
        Sink for echoed command diagnostics; ``None`` means ``sys.stderr``.

    """

    tree: LibraryTree
    cflags: str = DEFAULT_CFLAGS
    stdout: typ.IO[str] | None = None
    stderr: typ.IO[str] | None = None


__all__ = ["DEFAULT_CFLAGS", "RunSettings", "resolve_cflags"]
