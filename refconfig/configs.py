"""Reference configuration table.

Each entry names a header under ``configs/`` and the extra checks to run once
it is built: the ``compat.sh`` interoperability filter, the ``ssl-opt.sh``
arguments, whether those need a debug rebuild, and whether the configuration
is tested a second time with the PSA crypto layer enabled.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import types
import typing as typ


class UnknownConfigurationError(LookupError):
    """Raised when a requested configuration is not in the reference table."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown configuration: {name}")
        self.name = name


@dc.dataclass(frozen=True, slots=True)
class ConfigSpec:
    """Per-configuration test flags.

    Attributes
    ----------
    compat:
        Arguments for ``tests/compat.sh``; ``None`` skips the harness.
    opt:
        Arguments for ``tests/ssl-opt.sh``; an empty tuple runs it without
        arguments, ``None`` skips it.
    opt_needs_debug:
        Rebuild with debug and error strings before running ``ssl-opt.sh``.
    test_again_with_use_psa:
        Run the whole configuration a second time with PSA enabled.

    """

    compat: tuple[str, ...] | None = None
    opt: tuple[str, ...] | None = None
    opt_needs_debug: bool = False
    test_again_with_use_psa: bool = False


REFERENCE_CONFIGS: typ.Mapping[str, ConfigSpec] = types.MappingProxyType(
    {
        "config-ccm-psk-tls1_2.h": ConfigSpec(
            compat=("-m", "tls12", "-f", "^TLS-PSK-WITH-AES-...-CCM-8"),
            test_again_with_use_psa=True,
        ),
        "config-ccm-psk-dtls1_2.h": ConfigSpec(
            compat=("-m", "dtls12", "-f", "^TLS-PSK-WITH-AES-...-CCM-8"),
            opt=(),
            opt_needs_debug=True,
            test_again_with_use_psa=True,
        ),
        # ssl-opt.sh lacks the requires_* guards for this one, so it is skipped.
        "config-mini-tls1_1.h": ConfigSpec(
            compat=(
                "-m",
                "tls1_1",
                "-f",
                r"^DES-CBC3-SHA$\|^TLS-RSA-WITH-3DES-EDE-CBC-SHA$",
            ),
            test_again_with_use_psa=True,
        ),
        "config-no-entropy.h": ConfigSpec(),
        "config-suite-b.h": ConfigSpec(
            compat=("-m", "tls12", "-f", "ECDHE-ECDSA.*AES.*GCM", "-p", "mbedTLS"),
            opt=(),
            opt_needs_debug=True,
            test_again_with_use_psa=True,
        ),
        # Uses PSA by default.
        "config-symmetric-only.h": ConfigSpec(),
        "config-thread.h": ConfigSpec(
            opt=("-f", "ECJPAKE.*nolog"),
            test_again_with_use_psa=True,
        ),
    },
)


def known_configs() -> tuple[str, ...]:
    """Return every reference configuration name in sorted order."""
    return tuple(sorted(REFERENCE_CONFIGS))


def lookup(name: str) -> ConfigSpec:
    """Return the flags for ``name`` or raise ``UnknownConfigurationError``."""
    try:
        return REFERENCE_CONFIGS[name]
    except KeyError:
        raise UnknownConfigurationError(name) from None


def select_configs(names: cabc.Sequence[str] = ()) -> tuple[str, ...]:
    """Resolve the configurations to test.

    With no names every known configuration is returned in sorted order.
    Otherwise all names are validated before anything is returned, and the
    caller's order is kept.
    """
    if not names:
        return known_configs()
    for name in names:
        lookup(name)
    return tuple(names)


__all__ = [
    "REFERENCE_CONFIGS",
    "ConfigSpec",
    "UnknownConfigurationError",
    "known_configs",
    "lookup",
    "select_configs",
]
