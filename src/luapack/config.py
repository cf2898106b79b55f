# src/luapack/config.py


import argparse
import os
from pathlib import Path
from typing import Any

from .config_validate import validate_config
from .constants import CONFIG_CANDIDATES, DEFAULT_LOG_LEVEL
from .logs import log
from .meta import PROGRAM_ENV
from .runtime import current_runtime
from .types import RootConfigInput
from .utils import load_jsonc, plural, remove_path_in_error_message
from .utils_schema import ValidationSummary
from .utils_types import cast_hint


def can_run_configless(args: argparse.Namespace) -> bool:
    """Without a config file we need at least an entry on the command line."""
    return bool(getattr(args, "entry", None))


def determine_log_level(
    args: argparse.Namespace,
    config_log_level: str | None = None,
) -> str:
    """Resolve log level from CLI → env → config → default."""
    if getattr(args, "log_level", None):
        return cast_hint(str, args.log_level)

    env_log_level = os.getenv(f"{PROGRAM_ENV}_LOG_LEVEL") or os.getenv("LOG_LEVEL")
    if env_log_level:
        return env_log_level.lower()

    if config_log_level:
        return config_log_level.lower()

    return DEFAULT_LOG_LEVEL


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "error",
) -> Path | None:
    """Locate a configuration file.

    missing_level: log-level for failing to find a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. Default candidates in the current working directory:
         luapack.config.json, .luapack.jsonc, .luapack.json

    Returns the first matching path, or None if no config was found.
    """
    # --- 1. Explicit config path ---
    if getattr(args, "config", None):
        config = Path(args.config).expanduser()
        if not config.is_absolute():
            config = cwd / config
        config = config.resolve()
        if not config.exists():
            # Explicit path → hard failure
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    # --- 2. Default candidate files ---
    candidates = [cwd / name for name in CONFIG_CANDIDATES]
    found = [p for p in candidates if p.is_file()]

    if not found:
        # expected absence, keep going
        log(missing_level, "No config file found in %s", cwd)
        return None

    # --- 3. Handle multiple matches ---
    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        log(
            "warning",
            "Multiple config files detected (%s); using %s.",
            names,
            found[0].name,
        )
    return found[0]


def load_config(config_path: Path) -> dict[str, Any] | None:
    """Load configuration data from a JSON/JSONC file.

    Returns None for an intentionally empty config (empty file or only
    comments).
    """
    try:
        return load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ValueError(xmsg) from e


def _count(items: list[str], label: str) -> str | None:
    return f"{len(items)} {label}{plural(items)}" if items else None


def _validation_summary(summary: ValidationSummary, config_path: Path) -> None:
    """Log the outcome of config validation, one section per message kind."""
    mode = "strict" if summary.strict else "lenient"
    counts = [
        c
        for c in (
            _count(summary.errors, "error"),
            _count(summary.strict_warnings, "strict warning"),
            _count(summary.warnings, "warning"),
        )
        if c
    ]
    found = f" Found {', '.join(counts)}." if counts else ""

    if not summary.valid:
        log("error", f"Invalid config {config_path.name} ({mode}).{found}")
    elif counts:
        log("warning", f"Config {config_path.name} ({mode}) has warnings.{found}")
    else:
        log("debug", f"Config {config_path.name} ({mode}) is valid.")

    sections = (
        ("error", "Errors", summary.errors),
        ("error", "Strict warnings (fatal)", summary.strict_warnings),
        ("warning", "Warnings", summary.warnings),
    )
    for level, title, messages in sections:
        if messages:
            log(level, f"{title}:\n  • " + "\n  • ".join(messages))


def load_and_validate_config(
    args: argparse.Namespace,
) -> tuple[Path, RootConfigInput] | None:
    """Find, load, and validate the user's configuration.

    Also determines the effective log level (from CLI/env/config/default)
    early, so logging can initialize as soon as possible.

    Returns:
        (config_path, raw_cfg) if a config file was found and valid,
        or None if no config was found (or it was empty).

    """
    # --- initialize logging without config ---
    current_runtime["log_level"] = determine_log_level(args)

    # --- Find config file ---
    cwd = Path.cwd().resolve()
    missing_level = "debug" if can_run_configless(args) else "error"
    config_path = find_config(args, cwd, missing_level=missing_level)
    if config_path is None:
        return None

    # --- Load the raw config ---
    raw_config = load_config(config_path)
    if raw_config is None:
        log("debug", "Config file %s is empty", config_path.name)
        return None

    # --- Early peek for log_level before validation ---
    raw_log_level = raw_config.get("log_level")
    if isinstance(raw_log_level, str) and raw_log_level:
        current_runtime["log_level"] = determine_log_level(args, raw_log_level)

    # --- Validate schema ---
    validation_result = validate_config(raw_config)
    _validation_summary(validation_result, config_path)
    if not validation_result.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        exception = ValueError(xmsg)
        exception.silent = True  # type: ignore[attr-defined]
        exception.data = validation_result  # type: ignore[attr-defined]
        raise exception

    return config_path, cast_hint(RootConfigInput, raw_config)
