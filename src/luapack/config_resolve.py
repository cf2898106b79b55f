# src/luapack/config_resolve.py


import argparse
from pathlib import Path
from typing import Any

from .config import determine_log_level
from .constants import (
    DEFAULT_OBFUSCATION_TOOL,
    DEFAULT_OUTPUT_SUFFIX,
    DEFAULT_RENAME_MAX,
    DEFAULT_RENAME_MIN,
    LUA_EXTENSION,
)
from .logs import log
from .types import (
    ExternalConfig,
    MetaPackConfig,
    ModulesConfig,
    ObfuscationConfig,
    OverrideConfig,
    PackConfig,
    RenameConfig,
    RootConfigInput,
)
from .utils_types import cast_hint

# CLI toggles; each name is both the argparse dest and the obfuscation.config key
OBFUSCATION_TOGGLES: tuple[str, ...] = ("rename_variables", "minify", "ascii")

# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def _resolve_path(raw: str | Path, base: Path) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def default_output_path(entry: Path) -> Path:
    """`src/main.lua` → `src/main_packed.lua`."""
    stem = entry.stem or entry.name
    return entry.parent / f"{stem}{DEFAULT_OUTPUT_SUFFIX}{LUA_EXTENSION}"


def clamp_int(value: Any, minimum: int, fallback: int) -> int:
    """Return `value` raised to at least `minimum`, or `fallback` if not an int."""
    if isinstance(value, int) and not isinstance(value, bool):
        return max(value, minimum)
    return fallback


def normalize_rename(value: Any) -> RenameConfig:
    """Accept `true`/`false` or `{enabled, min, max}` and clamp the lengths."""
    if isinstance(value, bool):
        return {"enabled": value, "min": DEFAULT_RENAME_MIN, "max": DEFAULT_RENAME_MAX}

    if isinstance(value, dict):
        enabled: Any = value.get("enabled")
        min_len = clamp_int(value.get("min"), 1, DEFAULT_RENAME_MIN)
        max_len = clamp_int(
            value.get("max"), min_len, max(min_len, DEFAULT_RENAME_MAX)
        )
        return {
            "enabled": enabled if isinstance(enabled, bool) else False,
            "min": min_len,
            "max": max_len,
        }

    return {"enabled": False, "min": DEFAULT_RENAME_MIN, "max": DEFAULT_RENAME_MAX}


def parse_env_arg(raw: str) -> list[str]:
    """`"LUA_PATH, MY_PATH"` → `["LUA_PATH", "MY_PATH"]`; `""` → `[]`."""
    return [name.strip() for name in raw.split(",") if name.strip()]


def _apply_cli_obfuscation(
    obfuscation: dict[str, Any], args: argparse.Namespace
) -> dict[str, Any]:
    """Merge obfuscation toggles from the CLI; any toggle forces the tool on."""
    toggles = {
        key: getattr(args, key)
        for key in OBFUSCATION_TOGGLES
        if isinstance(getattr(args, key, None), bool)
    }
    if not toggles:
        return obfuscation

    settings = dict(obfuscation.get("config") or {})
    for key, state in toggles.items():
        current = settings.get(key)
        if key == "rename_variables" and isinstance(current, dict):
            # keep configured lengths, only flip the switch
            settings[key] = {**current, "enabled": state}
        else:
            settings[key] = state

    log("trace", "[CONFIG] CLI obfuscation toggles: %s", toggles)
    return {**obfuscation, "tool": "internal", "config": settings}


# --------------------------------------------------------------------------- #
# section resolvers
# --------------------------------------------------------------------------- #


def resolve_obfuscation(
    raw: dict[str, Any], args: argparse.Namespace
) -> ObfuscationConfig:
    obfuscation = _apply_cli_obfuscation(dict(raw), args)
    settings: dict[str, Any] = obfuscation.get("config") or {}
    formatter = obfuscation.get("formatter")
    return {
        "tool": obfuscation.get("tool") or DEFAULT_OBFUSCATION_TOOL,
        "minify": bool(settings.get("minify", False)),
        "rename": normalize_rename(settings.get("rename_variables")),
        "ascii": bool(settings.get("ascii", False)),
        "formatter": list(formatter) if formatter else None,
    }


def resolve_modules(
    raw: dict[str, Any],
    args: argparse.Namespace,
    config_dir: Path,
) -> ModulesConfig:
    external_raw: dict[str, Any] = raw.get("external") or {}

    ignore_missing = bool(raw.get("ignore_missing", False))
    if getattr(args, "ignore_missing", None):
        ignore_missing = True

    env_names: list[str] | None = external_raw.get("env")
    if getattr(args, "env", None) is not None:
        env_names = parse_env_arg(args.env)

    recursive = external_raw.get("recursive")
    external: ExternalConfig = {
        "recursive": recursive if isinstance(recursive, bool) else None,
        "paths": [_resolve_path(p, config_dir) for p in external_raw.get("paths", [])],
        "env": list(env_names) if env_names is not None else None,
    }

    overrides: dict[str, OverrideConfig] = {}
    for module_id, override_raw in (raw.get("overrides") or {}).items():
        override: OverrideConfig = {"path": override_raw.get("path", "")}
        if isinstance(override_raw.get("recursive"), bool):
            override["recursive"] = override_raw["recursive"]
        overrides[module_id] = override

    return {
        "ignore": list(raw.get("ignore", [])),
        "ignore_missing": ignore_missing,
        "overrides": overrides,
        "external": external,
    }


# --------------------------------------------------------------------------- #
# main resolver
# --------------------------------------------------------------------------- #


def resolve_config(
    root_input: RootConfigInput,
    args: argparse.Namespace,
    config_dir: Path,
    cwd: Path,
    *,
    config_path: Path | None = None,
) -> PackConfig:
    """Merge CLI args into a raw config and resolve it into a PackConfig.

    CLI paths are relative to `cwd`; config-file paths are relative to
    `config_dir`. Raises ValueError when no entry is given anywhere.
    """
    raw = cast_hint(dict[str, Any], root_input)

    # --- entry ---
    if getattr(args, "entry", None):
        entry = _resolve_path(args.entry, cwd)
    elif raw.get("entry"):
        entry = _resolve_path(raw["entry"], config_dir)
    else:
        xmsg = "Configuration must specify an entry file."
        raise ValueError(xmsg)

    # --- output ---
    if getattr(args, "output", None):
        output = _resolve_path(args.output, cwd)
    elif raw.get("output"):
        output = _resolve_path(raw["output"], config_dir)
    else:
        output = default_output_path(entry)

    # --- source root ---
    if getattr(args, "sourceroot", None):
        source_root = _resolve_path(args.sourceroot, cwd)
    elif raw.get("source_root"):
        source_root = _resolve_path(raw["source_root"], config_dir)
    else:
        source_root = entry.parent

    meta: MetaPackConfig = {
        "cli_root": cwd,
        "config_root": config_dir,
        "config_path": config_path,
    }

    resolved: PackConfig = {
        "entry": entry,
        "output": output,
        "source_root": source_root,
        "modules": resolve_modules(raw.get("modules") or {}, args, config_dir),
        "obfuscation": resolve_obfuscation(raw.get("obfuscation") or {}, args),
        "log_level": determine_log_level(args, raw.get("log_level")),
        "analyze_only": bool(getattr(args, "analyze", False)),
        "__meta__": meta,
    }
    log("trace", "[CONFIG] resolved entry=%s output=%s", entry, output)
    return resolved
