"""refconfig package.

Builds and tests a TLS library against each of its reference configuration
headers. Commands run through a curated program catalogue and an
allowlist-scoped execution context.

Example:
>>> from refconfig import known_configs
>>> known_configs()[0]
'config-ccm-psk-dtls1_2.h'

"""

from __future__ import annotations

from refconfig.catalogue import (
    COMPAT_SCRIPT,
    CONFIG_SCRIPT,
    DEFAULT_CATALOGUE,
    MAKE,
    SSL_OPT_SCRIPT,
    ProgramCatalogue,
    ProgramEntry,
    ProjectSettings,
    UnknownProgramError,
)
from refconfig.configs import (
    REFERENCE_CONFIGS,
    ConfigSpec,
    UnknownConfigurationError,
    known_configs,
    select_configs,
)
from refconfig.program import Program
from refconfig.runner import ConfigurationFailure, run_reference_configs
from refconfig.settings import RunSettings
from refconfig.workspace import LibraryTree, SetupError

PACKAGE_NAME = "refconfig"

__all__ = [
    "COMPAT_SCRIPT",
    "CONFIG_SCRIPT",
    "DEFAULT_CATALOGUE",
    "MAKE",
    "PACKAGE_NAME",
    "REFERENCE_CONFIGS",
    "SSL_OPT_SCRIPT",
    "ConfigSpec",
    "ConfigurationFailure",
    "LibraryTree",
    "Program",
    "ProgramCatalogue",
    "ProgramEntry",
    "ProjectSettings",
    "RunSettings",
    "SetupError",
    "UnknownConfigurationError",
    "UnknownProgramError",
    "known_configs",
    "run_reference_configs",
    "select_configs",
]
