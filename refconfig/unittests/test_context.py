"""Unit tests for scoped execution contexts and hooks."""

from __future__ import annotations

import pytest

from refconfig.catalogue import COMPAT_SCRIPT, MAKE, SSL_OPT_SCRIPT
from refconfig.context import (
    ForbiddenProgramError,
    RunnerContext,
    after,
    before,
    current_context,
    scoped,
)


def test_default_context_allows_nothing() -> None:
    """Commands are forbidden until a scope grants them."""
    with pytest.raises(ForbiddenProgramError, match="make"):
        current_context().check_allowed(MAKE)


def test_scoped_sets_and_restores_allowlist() -> None:
    """Entering a scope installs its allowlist; leaving restores the parent."""
    parent = current_context()
    with scoped(allowlist=frozenset([MAKE])) as ctx:
        assert current_context() is ctx
        assert ctx.is_allowed(MAKE)
    assert current_context() is parent


def test_nested_scope_can_only_narrow() -> None:
    """A nested scope intersects with a non-empty parent allowlist."""
    with (
        scoped(allowlist=frozenset([MAKE, COMPAT_SCRIPT])),
        scoped(allowlist=frozenset([COMPAT_SCRIPT, SSL_OPT_SCRIPT])) as inner,
    ):
        assert inner.allowlist == frozenset([COMPAT_SCRIPT])


def test_narrow_orders_hooks() -> None:
    """Before hooks run outer-first; after hooks run inner-first."""

    def outer_before(_cmd: object) -> None: ...
    def inner_before(_cmd: object) -> None: ...
    def outer_after(_cmd: object, _res: object) -> None: ...
    def inner_after(_cmd: object, _res: object) -> None: ...

    outer = RunnerContext(before_hooks=(outer_before,), after_hooks=(outer_after,))
    inner = outer.narrow(before_hooks=(inner_before,), after_hooks=(inner_after,))

    assert inner.before_hooks == (outer_before, inner_before)
    assert inner.after_hooks == (inner_after, outer_after)


def test_hook_registrations_detach() -> None:
    """before() and after() registrations remove their hooks on exit."""

    def on_start(_cmd: object) -> None: ...
    def on_exit(_cmd: object, _res: object) -> None: ...

    with scoped(allowlist=frozenset([MAKE])):
        with before(on_start), after(on_exit):
            assert on_start in current_context().before_hooks
            assert on_exit in current_context().after_hooks
        assert on_start not in current_context().before_hooks
        assert on_exit not in current_context().after_hooks


def test_detach_is_idempotent() -> None:
    """Detaching twice leaves the context unchanged."""

    def on_start(_cmd: object) -> None: ...

    with scoped(allowlist=frozenset([MAKE])):
        registration = before(on_start)
        registration.detach()
        snapshot = current_context()
        registration.detach()
        assert current_context() == snapshot
