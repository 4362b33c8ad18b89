"""Curated catalogue of the programs a reference-configuration run may execute.

The catalogue is the allowlist gate for ``sh.make``: only programs listed by a
project can be turned into ``SafeCmd`` values. Programs living inside the
library tree are stored as tree-relative paths and resolved against the
working directory passed to the command at execution time.

Example:
>>> from refconfig.catalogue import DEFAULT_CATALOGUE, MAKE
>>> DEFAULT_CATALOGUE.lookup(MAKE).project_name
'build-tools'

"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from refconfig.program import Program

MAKE = Program("make")
CONFIG_SCRIPT = Program("scripts/config.py")
COMPAT_SCRIPT = Program("tests/compat.sh")
SSL_OPT_SCRIPT = Program("tests/ssl-opt.sh")

BUILD_TOOLS_PROJECT = "build-tools"
INTEROP_PROJECT = "interop-harnesses"


class UnknownProgramError(LookupError):
    """Raised when a program is not present in the catalogue."""


@dc.dataclass(frozen=True, slots=True)
class ProjectSettings:
    """Metadata for a group of curated programs.

    Attributes
    ----------
    name:
        Project identifier exposed to downstream services.
    programs:
        Programs owned by the project.

    """

    name: str
    programs: tuple[Program, ...]


@dc.dataclass(frozen=True, slots=True)
class ProgramEntry:
    """A curated program together with the project that owns it."""

    program: Program
    project: ProjectSettings

    @property
    def project_name(self) -> str:
        """Return the owning project's name."""
        return self.project.name


class ProgramCatalogue:
    """Allowlist of curated programs grouped by project."""

    def __init__(self, *, projects: cabc.Iterable[ProjectSettings]) -> None:
        self._projects: dict[str, ProjectSettings] = {}
        self._entries: dict[Program, ProgramEntry] = {}
        for project in projects:
            if project.name in self._projects:
                msg = f"Duplicate project name: {project.name}"
                raise ValueError(msg)
            self._projects[project.name] = project
            for program in project.programs:
                if program in self._entries:
                    msg = f"Program '{program}' is listed by more than one project"
                    raise ValueError(msg)
                self._entries[program] = ProgramEntry(program=program, project=project)

    @property
    def allowlist(self) -> frozenset[Program]:
        """Return every program the catalogue permits."""
        return frozenset(self._entries)

    def is_allowed(self, program: str) -> bool:
        """Return True when ``program`` is curated by this catalogue."""
        return Program(program) in self._entries

    def lookup(self, program: str) -> ProgramEntry:
        """Return the entry for ``program`` or raise ``UnknownProgramError``."""
        try:
            return self._entries[Program(program)]
        except KeyError:
            msg = f"Program '{program}' is not in the catalogue"
            raise UnknownProgramError(msg) from None

    def visible_settings(self) -> typ.Mapping[str, ProjectSettings]:
        """Expose project metadata keyed by project name."""
        return dict(self._projects)


DEFAULT_PROJECTS: tuple[ProjectSettings, ...] = (
    ProjectSettings(
        name=BUILD_TOOLS_PROJECT,
        programs=(MAKE, CONFIG_SCRIPT),
    ),
    ProjectSettings(
        name=INTEROP_PROJECT,
        programs=(COMPAT_SCRIPT, SSL_OPT_SCRIPT),
    ),
)

DEFAULT_CATALOGUE = ProgramCatalogue(projects=DEFAULT_PROJECTS)

__all__ = [
    "BUILD_TOOLS_PROJECT",
    "COMPAT_SCRIPT",
    "CONFIG_SCRIPT",
    "DEFAULT_CATALOGUE",
    "DEFAULT_PROJECTS",
    "INTEROP_PROJECT",
    "MAKE",
    "SSL_OPT_SCRIPT",
    "ProgramCatalogue",
    "ProgramEntry",
    "ProjectSettings",
    "UnknownProgramError",
]
