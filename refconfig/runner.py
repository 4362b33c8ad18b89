"""Build and test each reference configuration in turn.

For every selected configuration the shared header is reset to the original,
the candidate header is copied in, the library is rebuilt with strict flags,
and the unit tests run. Configurations can additionally run the ``compat.sh``
and ``ssl-opt.sh`` harnesses, and those flagged for PSA are first tested with
the PSA crypto layer switched on.

The first build or test failure stops the run: the original header is put
back and the run reports exit status 1, which ``git bisect run`` treats as a
bad commit.
"""

from __future__ import annotations

import logging
import shlex
import sys
import typing as typ

from refconfig.builders import (
    compat,
    config_set,
    make_build,
    make_clean,
    make_test,
    ssl_opt,
)
from refconfig.catalogue import DEFAULT_CATALOGUE
from refconfig.configs import lookup, select_configs
from refconfig.context import ForbiddenProgramError, scoped
from refconfig.settings import RunSettings
from refconfig.sh import ExecutionContext
from refconfig.workspace import ActivationError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from refconfig.configs import ConfigSpec
    from refconfig.sh import CommandResult, SafeCmd

logger = logging.getLogger(__name__)

TEST_CONFIGURATION_ENV = "MBEDTLS_TEST_CONFIGURATION"
PSA_SYMBOLS = ("MBEDTLS_PSA_CRYPTO_C", "MBEDTLS_USE_PSA_CRYPTO")
DEBUG_SYMBOLS = ("MBEDTLS_DEBUG_C", "MBEDTLS_ERROR_C")

EXIT_OK = 0
# Between 1 and 124 so git bisect treats it as a bad revision.
EXIT_FAILURE = 1

_RULE = "*" * 42


class ConfigurationFailure(Exception):
    """Raised when a configuration fails to build or pass a mandatory test."""


def _stdout(settings: RunSettings) -> typ.IO[str]:
    return settings.stdout if settings.stdout is not None else sys.stdout


def _say(settings: RunSettings, text: str) -> None:
    out = _stdout(settings)
    print(text, file=out)
    out.flush()


def _run(
    settings: RunSettings,
    cmd: SafeCmd,
    env: cabc.Mapping[str, str] | None = None,
) -> CommandResult:
    """Run ``cmd`` from the tree root, echoing its output to the run's sinks."""
    context = ExecutionContext(
        env=env,
        cwd=settings.tree.root,
        stdout_sink=_stdout(settings),
        stderr_sink=settings.stderr if settings.stderr is not None else sys.stderr,
    )
    return cmd.run_sync(capture=False, echo=True, context=context)


def _require(
    settings: RunSettings,
    cmd: SafeCmd,
    env: cabc.Mapping[str, str],
    failure: str,
) -> None:
    try:
        result = _run(settings, cmd, env)
    except ForbiddenProgramError:
        raise
    except OSError as exc:
        logger.error("cannot run %s: %s", cmd.program, exc)
        raise ConfigurationFailure(failure) from exc
    if not result.ok:
        raise ConfigurationFailure(failure)


def _best_effort(
    settings: RunSettings,
    cmd: SafeCmd,
    env: cabc.Mapping[str, str] | None = None,
) -> None:
    try:
        result = _run(settings, cmd, env)
    except ForbiddenProgramError:
        raise
    except OSError as exc:
        logger.warning("cannot run %s: %s; continuing", cmd.program, exc)
        return
    if not result.ok:
        logger.warning(
            "%s exited with status %d; continuing",
            shlex.join(cmd.argv_with_program),
            result.exit_code,
        )


def _banner(settings: RunSettings, name: str, *, with_psa: bool) -> None:
    lines = ["", _RULE, f"* Testing configuration: {name}"]
    if with_psa:
        lines.append(f"* ENABLING {' and '.join(PSA_SYMBOLS)}")
    lines.append(_RULE)
    _say(settings, "\n".join(lines))


def perform_test(
    settings: RunSettings,
    name: str,
    spec: ConfigSpec,
    *,
    with_psa: bool,
) -> None:
    """Build and test a single configuration.

    Parameters
    ----------
    settings:
        Shared run settings.
    name:
        Configuration header name under ``configs/``.
    spec:
        Extra checks for this configuration.
    with_psa:
        Enable the PSA crypto layer on top of the configuration.

    Raises
    ------
    ConfigurationFailure
        If activation, a build, the unit tests, or a harness fails.

    """
    tree = settings.tree
    env = {TEST_CONFIGURATION_ENV: name}
    build_env = {**env, "CFLAGS": settings.cflags}

    tree.restore_baseline()
    _require(settings, make_clean(), env, f"Failed to clean before: {name}")

    _banner(settings, name, with_psa=with_psa)
    logger.info("testing %s (psa=%s)", name, with_psa)

    try:
        tree.activate(name)
    except ActivationError as exc:
        raise ConfigurationFailure(str(exc)) from exc

    if with_psa:
        for symbol in PSA_SYMBOLS:
            _best_effort(settings, config_set(symbol), env)

    _require(settings, make_build(), build_env, f"Failed to build: {name}")
    _require(settings, make_test(), env, f"Failed test suite: {name}")

    if spec.compat is not None:
        _say(settings, f"\nrunning compat.sh {shlex.join(spec.compat)}")
        _require(settings, compat(spec.compat), env, f"Failed compat.sh: {name}")
    else:
        _say(settings, "\nskipping compat.sh")

    if spec.opt is None:
        _say(settings, "\nskipping ssl-opt.sh")
        return

    if spec.opt_needs_debug:
        _say(settings, "\nrebuilding with debug traces for ssl-opt")
        _best_effort(settings, make_clean(), env)
        for symbol in DEBUG_SYMBOLS:
            _best_effort(settings, config_set(symbol), env)
        _require(settings, make_build(), build_env, f"Failed to build: {name} +debug")

    _say(settings, f"\nrunning ssl-opt.sh {shlex.join(spec.opt)}")
    _require(settings, ssl_opt(spec.opt), env, f"Failed ssl-opt.sh: {name}")


def run_configuration(settings: RunSettings, name: str) -> None:
    """Run a configuration with PSA first when flagged, then as shipped."""
    spec = lookup(name)
    if spec.test_again_with_use_psa:
        perform_test(settings, name, spec, with_psa=True)
    perform_test(settings, name, spec, with_psa=False)


def run_reference_configs(
    settings: RunSettings,
    names: cabc.Sequence[str] = (),
) -> int:
    """Test the named configurations, or all of them when none are named.

    Returns
    -------
    int
        ``0`` when every configuration passed, ``1`` on the first failure.

    Raises
    ------
    UnknownConfigurationError
        If any name is not a reference configuration; nothing has run yet.
    SetupError
        If the tree layout is wrong or the header cannot be backed up.

    """
    selected = select_configs(names)
    tree = settings.tree
    tree.check_layout()

    with scoped(allowlist=DEFAULT_CATALOGUE.allowlist):
        try:
            with tree.preserved_config():
                tree.ensure_seedfile()
                for name in selected:
                    run_configuration(settings, name)
        except ConfigurationFailure as exc:
            logger.error("%s", exc)
            return EXIT_FAILURE
        _best_effort(settings, make_clean())

    logger.info("tested %d configuration(s)", len(selected))
    return EXIT_OK


__all__ = [
    "DEBUG_SYMBOLS",
    "EXIT_FAILURE",
    "EXIT_OK",
    "PSA_SYMBOLS",
    "TEST_CONFIGURATION_ENV",
    "ConfigurationFailure",
    "RunSettings",
    "perform_test",
    "run_reference_configs",
    "run_configuration",
]
