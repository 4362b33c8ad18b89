"""Unit tests for the command-line entry point."""

from __future__ import annotations

import logging
import typing as typ

import pytest

from refconfig.cli import EXIT_SETUP_ERROR, main
from refconfig.configs import known_configs
from tests.helpers.library_tree import ORIGINAL_HEADER

if typ.TYPE_CHECKING:
    from pathlib import Path

    from tests.helpers.library_tree import FakeLibrary


def test_list_prints_known_configurations(capsys: pytest.CaptureFixture[str]) -> None:
    """--list prints every configuration name and exits successfully."""
    assert main(["--list"]) == 0
    assert capsys.readouterr().out.splitlines() == list(known_configs())


def test_successful_run_exits_zero(
    fake_library: FakeLibrary,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A passing configuration exits 0 and leaves the header untouched."""
    status = main(["--root", str(fake_library.root), "config-no-entropy.h"])

    assert status == 0
    assert fake_library.config_header.read_text(encoding="utf-8") == ORIGINAL_HEADER
    assert "Testing configuration: config-no-entropy.h" in capsys.readouterr().out


def test_failure_exits_one(
    fake_library: FakeLibrary,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A failing test suite exits 1 with the diagnostic logged."""
    caplog.set_level(logging.ERROR)
    fake_library.fail("make test")

    status = main(["--root", str(fake_library.root), "config-no-entropy.h"])

    assert status == 1
    assert "Failed test suite: config-no-entropy.h" in caplog.text


def test_unknown_configuration_exits_before_building(
    fake_library: FakeLibrary,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """An unknown name exits with a setup error and runs nothing."""
    caplog.set_level(logging.ERROR)

    status = main(["--root", str(fake_library.root), "config-bogus.h"])

    assert status == EXIT_SETUP_ERROR
    assert fake_library.records() == []
    assert "Unknown configuration: config-bogus.h" in caplog.text


def test_wrong_root_is_a_setup_error(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Pointing at a directory that is not a library tree is refused."""
    caplog.set_level(logging.ERROR)

    assert main(["--root", str(tmp_path)]) == EXIT_SETUP_ERROR
    assert "Must be run from root" in caplog.text


def test_cflags_option_reaches_builds(fake_library: FakeLibrary) -> None:
    """--cflags replaces the default build flags."""
    status = main(
        ["--root", str(fake_library.root), "--cflags", "-O0 -g", "config-no-entropy.h"],
    )

    assert status == 0
    builds = [r for r in fake_library.records() if r["key"] == "make"]
    assert [r["cflags"] for r in builds] == ["-O0 -g"]


def test_invalid_cflags_environment_is_a_setup_error(
    fake_library: FakeLibrary,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Unparseable REFCONFIG_CFLAGS stops the run before it starts."""
    monkeypatch.setenv("REFCONFIG_CFLAGS", "'-O2")

    status = main(["--root", str(fake_library.root), "config-no-entropy.h"])

    assert status == EXIT_SETUP_ERROR
    assert fake_library.records() == []


def test_commands_are_logged(
    fake_library: FakeLibrary,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Every command is logged through the logging hook."""
    caplog.set_level(logging.INFO, logger="refconfig.exec")

    assert main(["-v", "--root", str(fake_library.root), "config-no-entropy.h"]) == 0

    messages = [record.getMessage() for record in caplog.records]
    starts = [msg for msg in messages if "refconfig.start" in msg]
    assert len(starts) == len(fake_library.records())
    assert "argv=('make', 'test')" in starts[2]


def test_missing_harness_exits_one(
    fake_library: FakeLibrary,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A deleted harness script is a configuration failure, not a crash."""
    caplog.set_level(logging.ERROR)
    (fake_library.root / "tests" / "compat.sh").unlink()

    status = main(["--root", str(fake_library.root), "config-suite-b.h"])

    assert status == 1
    assert "Failed compat.sh: config-suite-b.h" in caplog.text
    assert fake_library.config_header.read_text(encoding="utf-8") == ORIGINAL_HEADER
