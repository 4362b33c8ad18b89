"""Command-line entry point.

Usage
-----
Run from the top of the library tree, optionally naming configurations:

>>> # doctest: +SKIP
>>> raise SystemExit(main(["config-thread.h"]))
"""

from __future__ import annotations

import argparse
import logging
import pathlib as pth
import sys
import typing as typ

from refconfig.configs import UnknownConfigurationError, known_configs
from refconfig.logging_hooks import logging_hook
from refconfig.runner import run_reference_configs
from refconfig.settings import RunSettings, resolve_cflags
from refconfig.workspace import LibraryTree, SetupError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger("refconfig")

EXIT_SETUP_ERROR = 2

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _parse_args(argv: cabc.Sequence[str] | None) -> argparse.Namespace:
    """Parse command-line arguments for the reference-configuration runner."""
    parser = argparse.ArgumentParser(
        prog="refconfig",
        description=(
            "Build each reference configuration, run the test suites, and run "
            "the compat.sh and ssl-opt.sh harnesses where configured."
        ),
    )
    parser.add_argument(
        "configs",
        nargs="*",
        metavar="CONFIG",
        help="Configuration names to test (default: all, in sorted order).",
    )
    parser.add_argument(
        "--root",
        type=pth.Path,
        default=pth.Path(),
        help="Top of the library tree (default: current directory).",
    )
    parser.add_argument(
        "--cflags",
        default=None,
        help="Compiler flags for every build (default: $REFCONFIG_CFLAGS or "
        "'-Os -Werror -Wall -Wextra').",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the known configuration names and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log command start/exit (-v) and debug details (-vv).",
    )
    return parser.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)


def main(argv: cabc.Sequence[str] | None = None) -> int:
    """Run the CLI entry point.

    Returns
    -------
    int
        ``0`` when every configuration passed, ``1`` on a build or test
        failure, ``2`` when the run could not be set up.
    """
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    if args.list:
        for name in known_configs():
            print(name)
        return 0

    try:
        cflags = resolve_cflags(args.cflags)
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_SETUP_ERROR

    settings = RunSettings(tree=LibraryTree(args.root), cflags=cflags)
    try:
        with logging_hook():
            return run_reference_configs(settings, args.configs)
    except (UnknownConfigurationError, SetupError) as exc:
        logger.error("%s", exc)
        return EXIT_SETUP_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
