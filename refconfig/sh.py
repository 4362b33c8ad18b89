"""Curated commands and how they run.

``make`` turns a catalogued ``Program`` into a builder of ``SafeCmd`` values.
A ``SafeCmd`` runs without a shell, only inside a scope that grants its
program, and fires the scope's hooks around the child process. Output can be
echoed to text sinks as it arrives, captured, or both.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses as dc
import sys
import typing as typ
from pathlib import Path

from refconfig._process import _merge_env, _terminate_process
from refconfig._streams import _relay_stream
from refconfig.catalogue import (
    DEFAULT_CATALOGUE,
    ProgramCatalogue,
    ProjectSettings,
)
from refconfig.catalogue import UnknownProgramError as UnknownProgramError
from refconfig.context import current_context

if typ.TYPE_CHECKING:
    from refconfig.program import Program

_ArgValue: typ.TypeAlias = "str | int | Path"
SafeCmdBuilder: typ.TypeAlias = "cabc.Callable[..., SafeCmd]"


def _stringify_arg(value: _ArgValue) -> str:
    if value is None:
        msg = "None is not a valid argv element for sh.make"
        raise TypeError(msg)
    if isinstance(value, Path):
        return value.as_posix()
    return str(value)


@dc.dataclass(frozen=True, slots=True)
class CommandResult:
    """What a finished command reported.

    ``stdout`` and ``stderr`` hold the decoded output when it was captured and
    are ``None`` otherwise; ``pid`` is ``-1`` when the platform did not
    report one.
    """

    program: Program
    argv: tuple[str, ...]
    exit_code: int
    pid: int
    stdout: str | None
    stderr: str | None

    @property
    def ok(self) -> bool:
        """Return True when the command exited with status 0."""
        return self.exit_code == 0


@dc.dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Per-run process settings.

    Attributes
    ----------
    env:
        Variables overlaid on this process's environment for the child only.
    cwd:
        Working directory; programs given as tree-relative paths resolve
        against it.
    cancel_grace:
        Seconds between SIGTERM and SIGKILL when a run is cancelled.
    stdout_sink, stderr_sink:
        Where echoed output goes; ``None`` means the ``sys`` stream active
        when the command starts.
    encoding, errors:
        How child output is decoded.

    """

    env: cabc.Mapping[str, str] | None = None
    cwd: str | Path | None = None
    cancel_grace: float = 0.5
    stdout_sink: typ.IO[str] | None = None
    stderr_sink: typ.IO[str] | None = None
    encoding: str = "utf-8"
    errors: str = "replace"


@dc.dataclass(frozen=True, slots=True)
class SafeCmd:
    """A catalogued program with its arguments, ready to run."""

    program: Program
    argv: tuple[str, ...]
    project: ProjectSettings

    @property
    def argv_with_program(self) -> tuple[str, ...]:
        """Return the full argument vector, program first."""
        return (str(self.program), *self.argv)

    async def run(
        self,
        *,
        capture: bool = True,
        echo: bool = False,
        context: ExecutionContext | None = None,
    ) -> CommandResult:
        """Start the program and wait for it to exit.

        Parameters
        ----------
        capture:
            Keep the decoded output on the result.
        echo:
            Write output to the context's sinks as it arrives.
        context:
            Environment overlay, working directory and sinks.

        Raises
        ------
        ForbiddenProgramError
            If the current scope does not grant the program.
        OSError
            If the program cannot be started, for example because it is
            missing or not executable. Before hooks have fired by then; after
            hooks do not.

        """
        scope = current_context()
        scope.check_allowed(self.program)
        for hook in scope.before_hooks:
            hook(self)

        settings = context or ExecutionContext()
        piped = capture or echo
        stream = asyncio.subprocess.PIPE if piped else asyncio.subprocess.DEVNULL
        process = await asyncio.create_subprocess_exec(
            *self.argv_with_program,
            stdout=stream,
            stderr=stream,
            env=_merge_env(settings.env),
            cwd=settings.cwd,
        )

        readers: list[asyncio.Task[str | None]] = []
        if piped:
            sinks = (
                settings.stdout_sink or sys.stdout,
                settings.stderr_sink or sys.stderr,
            )
            for pipe, sink in zip((process.stdout, process.stderr), sinks, strict=True):
                relay = _relay_stream(
                    typ.cast("asyncio.StreamReader", pipe),
                    sink=sink if echo else None,
                    keep=capture,
                    encoding=settings.encoding,
                    errors=settings.errors,
                )
                readers.append(asyncio.create_task(relay))

        try:
            exit_code = await process.wait()
        except asyncio.CancelledError:
            await _terminate_process(process, settings.cancel_grace)
            await asyncio.gather(*readers, return_exceptions=True)
            raise

        stdout, stderr = await asyncio.gather(*readers) if readers else (None, None)
        result = CommandResult(
            program=self.program,
            argv=self.argv,
            exit_code=exit_code,
            pid=-1 if process.pid is None else process.pid,
            stdout=stdout,
            stderr=stderr,
        )
        for hook in scope.after_hooks:
            hook(self, result)
        return result

    def run_sync(
        self,
        *,
        capture: bool = True,
        echo: bool = False,
        context: ExecutionContext | None = None,
    ) -> CommandResult:
        """Block on ``run`` using a private event loop."""
        return asyncio.run(self.run(capture=capture, echo=echo, context=context))


def make(
    program: Program,
    *,
    catalogue: ProgramCatalogue = DEFAULT_CATALOGUE,
) -> SafeCmdBuilder:
    """Return a builder of ``SafeCmd`` values for a catalogued program.

    Raises ``UnknownProgramError`` straight away when ``program`` is not in
    ``catalogue``. The builder stringifies its positional arguments; paths
    are rendered in POSIX form and ``None`` is rejected.
    """
    entry = catalogue.lookup(program)

    def builder(*args: _ArgValue) -> SafeCmd:
        argv = tuple(_stringify_arg(arg) for arg in args)
        return SafeCmd(program=entry.program, argv=argv, project=entry.project)

    return builder


__all__ = [
    "CommandResult",
    "ExecutionContext",
    "SafeCmd",
    "SafeCmdBuilder",
    "UnknownProgramError",
    "make",
]
