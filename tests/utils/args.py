# tests/utils/args.py

import argparse
from typing import Any

import luapack.cli as mod_cli


def make_args(*argv: str, **overrides: Any) -> argparse.Namespace:
    """Parse `argv` with the real CLI parser, then apply attribute overrides."""
    args = mod_cli._setup_parser().parse_args(list(argv))  # noqa: SLF001
    for key, value in overrides.items():
        setattr(args, key, value)
    return args
