# src/luapack/meta.py

"""Centralized program identity constants for luapack."""

from typing import NamedTuple

_BASE = "luapack"

# CLI script name (the executable or console entrypoint)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = "LuaPack"

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for LUAPACK_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Short tagline or description for help screens and metadata
DESCRIPTION = "A Lua bundler and obfuscator."


class Metadata(NamedTuple):
    version: str
    commit: str
