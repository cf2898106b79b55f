# src/luapack/env.py
"""External search roots derived from environment variables (LUA_PATH style)."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .constants import DEFAULT_ENV_NAMES, ENV_PATH_DELIMITER, ENV_PATH_MARKER
from .logs import get_logger


@dataclass
class ExternalEnvInfo:
    has_explicit_config: bool
    env_names: list[str]
    paths_by_env: dict[str, list[Path]] = field(default_factory=dict)
    all_paths: list[Path] = field(default_factory=list)


def normalize_env_names(env_names: Sequence[str] | None) -> list[str] | None:
    if env_names is None:
        return None
    return [name.strip() for name in env_names if name and name.strip()]


def normalize_env_entry(entry: str, source_root: Path) -> Path | None:
    """Turn one path-list entry into a search root.

    `./lib/?.lua` → `<source_root>/lib`; `/usr/share/lua/?/init.lua` →
    `/usr/share/lua`. Entries that are empty once the template part is
    cut off are dropped.
    """
    trimmed = entry.strip()
    marker = trimmed.find(ENV_PATH_MARKER)
    if marker != -1:
        trimmed = trimmed[:marker]
    trimmed = trimmed.rstrip("/\\")
    if not trimmed:
        return None

    path = Path(trimmed)
    if not path.is_absolute():
        path = source_root / path
    return Path(os.path.normpath(path))


def resolve_external_env(
    env_names: Sequence[str] | None,
    source_root: Path,
    environ: Mapping[str, str] | None = None,
) -> ExternalEnvInfo:
    """Collect search roots from the configured environment variables.

    `env_names=None` means "not configured" and falls back to LUA_PATH;
    an explicit empty list disables environment roots entirely.
    """
    logger = get_logger()
    environ = os.environ if environ is None else environ
    names = normalize_env_names(env_names)
    info = ExternalEnvInfo(
        has_explicit_config=env_names is not None,
        env_names=list(DEFAULT_ENV_NAMES) if names is None else names,
    )

    seen: set[Path] = set()
    for name in info.env_names:
        resolved: list[Path] = []
        raw = environ.get(name, "")
        for entry in raw.split(ENV_PATH_DELIMITER) if raw else []:
            path = normalize_env_entry(entry, source_root)
            if path is None:
                continue
            if path not in resolved:
                resolved.append(path)
            if path not in seen:
                seen.add(path)
                info.all_paths.append(path)
        info.paths_by_env[name] = resolved
        logger.trace("[ENV] %s → %s", name, [str(p) for p in resolved])

    return info
