"""Shared pytest fixtures for the unit and behavioural suites.

Example
-------
def test_runs_make(fake_library):
    ...
    assert fake_library.keys()[0] == "make clean"
"""

from __future__ import annotations

import io
import typing as typ

import pytest

from refconfig.settings import RunSettings
from refconfig.workspace import LibraryTree
from tests.helpers.library_tree import build_fake_library

if typ.TYPE_CHECKING:
    from pathlib import Path

    from tests.helpers.library_tree import FakeLibrary


@pytest.fixture(name="fake_library")
def fixture_fake_library(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> FakeLibrary:
    """Provide a fake library tree whose tools record their invocations.

    Parameters
    ----------
    tmp_path : Path
        Per-test temporary directory holding the tree and the tool log.
    monkeypatch : pytest.MonkeyPatch
        Used to put the fake ``make`` first on ``PATH``.

    Returns
    -------
    FakeLibrary
        Handle exposing the tree root and the recorded invocations.
    """
    return build_fake_library(tmp_path, monkeypatch)


@pytest.fixture(name="run_settings")
def fixture_run_settings(fake_library: FakeLibrary) -> RunSettings:
    """Provide run settings pointing at the fake tree with in-memory sinks."""
    return RunSettings(
        tree=LibraryTree(fake_library.root),
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )
