"""Typed argument helpers for the build and harness builders."""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

ConfigSymbol = typ.NewType("ConfigSymbol", str)

_CONFIG_SYMBOL_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


def config_symbol(value: str) -> ConfigSymbol:
    """Validate a compile-time option name such as ``MBEDTLS_DEBUG_C``.

    Parameters
    ----------
    value:
        Macro name to validate.

    Returns
    -------
    ConfigSymbol
        Validated macro name.
    """
    if not isinstance(value, str):
        msg = f"ConfigSymbol expects str, got {type(value).__name__}"
        raise TypeError(msg)
    if _CONFIG_SYMBOL_PATTERN.fullmatch(value) is None:
        msg = f"ConfigSymbol must be an upper-case C identifier, got {value!r}"
        raise ValueError(msg)
    return ConfigSymbol(value)


def _validate_harness_arg(value: str) -> None:
    if not isinstance(value, str):
        msg = f"harness arguments must be strings, got {type(value).__name__}"
        raise TypeError(msg)
    checks = (
        (value == "", "harness arguments cannot be empty"),
        ("\x00" in value, "harness arguments cannot contain NUL characters"),
    )
    for condition, message in checks:
        if condition:
            msg = message
            raise ValueError(msg)


def harness_args(values: cabc.Iterable[str]) -> tuple[str, ...]:
    """Validate an argv tuple destined for a test harness script.

    Arguments are passed to the harness verbatim; no shell is involved, so
    filter patterns need no quoting.
    """
    if isinstance(values, str):
        msg = "harness_args expects an iterable of arguments, not a single string"
        raise TypeError(msg)
    args = tuple(values)
    for value in args:
        _validate_harness_arg(value)
    return args


__all__ = ["ConfigSymbol", "config_symbol", "harness_args"]
