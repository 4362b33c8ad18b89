"""Builders for the interoperability test harness scripts."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from refconfig import sh
from refconfig.builders.args import harness_args
from refconfig.catalogue import COMPAT_SCRIPT, SSL_OPT_SCRIPT

if typ.TYPE_CHECKING:
    from refconfig.sh import SafeCmd


def compat(args: cabc.Iterable[str] = ()) -> SafeCmd:
    """Build a `tests/compat.sh` command."""
    return sh.make(COMPAT_SCRIPT)(*harness_args(args))


def ssl_opt(args: cabc.Iterable[str] = ()) -> SafeCmd:
    """Build a `tests/ssl-opt.sh` command."""
    return sh.make(SSL_OPT_SCRIPT)(*harness_args(args))


__all__ = ["compat", "ssl_opt"]
