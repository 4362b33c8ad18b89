"""Builders for the library's ``scripts/config.py`` option editor."""

from __future__ import annotations

import typing as typ

from refconfig import sh
from refconfig.builders.args import config_symbol
from refconfig.catalogue import CONFIG_SCRIPT

if typ.TYPE_CHECKING:
    from refconfig.sh import SafeCmd


def config_set(symbol: str) -> SafeCmd:
    """Build a `scripts/config.py set SYMBOL` command with a validated symbol."""
    return sh.make(CONFIG_SCRIPT)("set", str(config_symbol(symbol)))


__all__ = ["config_set"]
