"""Allowlist scope and command hooks for the current run.

Nothing may execute until :func:`scoped` grants programs for the duration of a
``with`` block; ``run_reference_configs`` grants exactly the catalogue around
a whole run. Hooks attached with :func:`before` and :func:`after` observe
every command started while they are attached.

Example:
>>> from refconfig.catalogue import MAKE, SSL_OPT_SCRIPT
>>> from refconfig.context import current_context, scoped
>>> with scoped(allowlist=frozenset([MAKE])):
...     current_context().is_allowed(SSL_OPT_SCRIPT)
False

"""

from __future__ import annotations

import collections.abc as cabc
import contextlib
import dataclasses as dc
import typing as typ
from contextvars import ContextVar

if typ.TYPE_CHECKING:
    from refconfig.program import Program
    from refconfig.sh import CommandResult, SafeCmd


BeforeHook: typ.TypeAlias = "cabc.Callable[[SafeCmd], None]"
AfterHook: typ.TypeAlias = "cabc.Callable[[SafeCmd, CommandResult], None]"
_HookField: typ.TypeAlias = 'typ.Literal["before_hooks", "after_hooks"]'


class ForbiddenProgramError(PermissionError):
    """Raised when a command runs outside a scope that grants its program."""


@dc.dataclass(frozen=True, slots=True)
class RunnerContext:
    """Programs granted to the current block and the hooks attached to it.

    ``before_hooks`` fire in attachment order; ``after_hooks`` are stored
    newest first, so an inner hook sees a result before an outer one.
    """

    allowlist: frozenset[Program] = frozenset()
    before_hooks: tuple[BeforeHook, ...] = ()
    after_hooks: tuple[AfterHook, ...] = ()

    def is_allowed(self, program: Program) -> bool:
        """Return True when ``program`` is granted."""
        return program in self.allowlist

    def check_allowed(self, program: Program) -> None:
        """Raise ``ForbiddenProgramError`` unless ``program`` is granted."""
        if program not in self.allowlist:
            msg = f"Program '{program}' is not allowed in the current context"
            raise ForbiddenProgramError(msg)

    def narrow(
        self,
        *,
        allowlist: frozenset[Program] | None = None,
        before_hooks: tuple[BeforeHook, ...] = (),
        after_hooks: tuple[AfterHook, ...] = (),
    ) -> RunnerContext:
        """Derive the context for a nested block.

        An empty grant (the state before any scope) is replaced outright;
        otherwise a nested block only keeps the programs both grants share.
        """
        granted = self.allowlist
        if allowlist is not None:
            granted = granted & allowlist if granted else allowlist
        return RunnerContext(
            allowlist=granted,
            before_hooks=(*self.before_hooks, *before_hooks),
            after_hooks=(*after_hooks, *self.after_hooks),
        )


_active: ContextVar[RunnerContext] = ContextVar(
    "refconfig_context",
    default=RunnerContext(),
)


def current_context() -> RunnerContext:
    """Return the context commands started now would run under."""
    return _active.get()


@contextlib.contextmanager
def scoped(
    *,
    allowlist: frozenset[Program] | None = None,
    before_hooks: tuple[BeforeHook, ...] = (),
    after_hooks: tuple[AfterHook, ...] = (),
) -> cabc.Iterator[RunnerContext]:
    """Grant programs and hooks until the ``with`` block ends.

    Leaving the block reinstates the enclosing context, including any hooks
    attached inside it.
    """
    ctx = current_context().narrow(
        allowlist=allowlist,
        before_hooks=before_hooks,
        after_hooks=after_hooks,
    )
    token = _active.set(ctx)
    try:
        yield ctx
    finally:
        _active.reset(token)


class HookRegistration:
    """An attached hook; ``detach`` or leaving its ``with`` block removes it."""

    __slots__ = ("_field", "_hook")

    def __init__(self, field: _HookField, hook: BeforeHook | AfterHook) -> None:
        self._field = field
        self._hook = hook
        ctx = current_context()
        hooks = getattr(ctx, field)
        hooks = (*hooks, hook) if field == "before_hooks" else (hook, *hooks)
        _active.set(dc.replace(ctx, **{field: hooks}))

    def detach(self) -> None:
        """Remove the hook; detaching twice is harmless."""
        ctx = current_context()
        kept = tuple(h for h in getattr(ctx, self._field) if h is not self._hook)
        _active.set(dc.replace(ctx, **{self._field: kept}))

    def __enter__(self) -> HookRegistration:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.detach()


def before(hook: BeforeHook) -> HookRegistration:
    """Call ``hook(cmd)`` before each command starts."""
    return HookRegistration("before_hooks", hook)


def after(hook: AfterHook) -> HookRegistration:
    """Call ``hook(cmd, result)`` after each command exits."""
    return HookRegistration("after_hooks", hook)


__all__ = [
    "AfterHook",
    "BeforeHook",
    "ForbiddenProgramError",
    "HookRegistration",
    "RunnerContext",
    "after",
    "before",
    "current_context",
    "scoped",
]
