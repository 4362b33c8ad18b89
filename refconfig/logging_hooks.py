"""Logging hook emitting start and exit records for every command.

Example:
>>> import logging
>>> from refconfig.logging_hooks import logging_hook
>>> with logging_hook(logger=logging.getLogger("refconfig.exec")):
...     pass  # commands run here are logged

"""

from __future__ import annotations

import logging
import time
import typing as typ

from refconfig.context import after, before

if typ.TYPE_CHECKING:
    from refconfig.context import HookRegistration
    from refconfig.sh import CommandResult, SafeCmd

_DEFAULT_LOGGER_NAME = "refconfig.exec"


class LoggingHookRegistration:
    """Paired before/after registration that detaches both hooks together."""

    __slots__ = ("_after", "_before")

    def __init__(
        self,
        before_reg: HookRegistration,
        after_reg: HookRegistration,
    ) -> None:
        self._before = before_reg
        self._after = after_reg

    def detach(self) -> None:
        """Remove both hooks from the current context."""
        self._after.detach()
        self._before.detach()

    def __enter__(self) -> LoggingHookRegistration:
        """Enter context manager; hooks are already registered."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit context manager; detach both hooks."""
        self.detach()


def _output_len(text: str | None) -> int:
    return 0 if text is None else len(text)


def logging_hook(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.INFO,
) -> LoggingHookRegistration:
    """Register hooks that log command start and exit.

    Parameters
    ----------
    logger:
        Logger receiving the records; defaults to ``refconfig.exec``.
    level:
        Level used for both records.

    Returns
    -------
    LoggingHookRegistration
        Handle detaching both hooks, usable as a context manager.

    """
    log = logger if logger is not None else logging.getLogger(_DEFAULT_LOGGER_NAME)
    started: dict[int, list[float]] = {}

    def _on_start(cmd: SafeCmd) -> None:
        started.setdefault(id(cmd), []).append(time.perf_counter())
        log.log(
            level,
            "refconfig.start program=%s argv=%r project=%s",
            cmd.program,
            cmd.argv_with_program,
            cmd.project.name,
        )

    def _on_exit(cmd: SafeCmd, result: CommandResult) -> None:
        stack = started.get(id(cmd))
        duration = 0.0
        if stack:
            duration = time.perf_counter() - stack.pop()
            if not stack:
                del started[id(cmd)]
        log.log(
            level,
            "refconfig.exit program=%s exit_code=%d pid=%d duration_s=%.3f "
            "stdout_len=%d stderr_len=%d",
            result.program,
            result.exit_code,
            result.pid,
            duration,
            _output_len(result.stdout),
            _output_len(result.stderr),
        )

    return LoggingHookRegistration(before(_on_start), after(_on_exit))


__all__ = ["LoggingHookRegistration", "logging_hook"]
