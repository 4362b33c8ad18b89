"""Builders for the commands a reference-configuration run executes."""

from __future__ import annotations

from refconfig.builders.args import ConfigSymbol, config_symbol, harness_args
from refconfig.builders.config_script import config_set
from refconfig.builders.harness import compat, ssl_opt
from refconfig.builders.make import make_build, make_clean, make_test

__all__ = [
    "ConfigSymbol",
    "compat",
    "config_set",
    "config_symbol",
    "harness_args",
    "make_build",
    "make_clean",
    "make_test",
    "ssl_opt",
]
