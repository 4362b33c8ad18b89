"""Make command builders for the library tree."""

from __future__ import annotations

import typing as typ

from refconfig import sh
from refconfig.catalogue import MAKE

if typ.TYPE_CHECKING:
    from refconfig.sh import SafeCmd


def make_clean() -> SafeCmd:
    """Build a `make clean` command."""
    return sh.make(MAKE)("clean")


def make_build() -> SafeCmd:
    """Build a bare `make` command; flags travel through ``CFLAGS``."""
    return sh.make(MAKE)()


def make_test() -> SafeCmd:
    """Build a `make test` command."""
    return sh.make(MAKE)("test")


__all__ = ["make_build", "make_clean", "make_test"]
