# src/luapack/context.py
"""Per-run context threaded through resolver → analyzer → assembler → pipeline."""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .env import ExternalEnvInfo, resolve_external_env
from .formatter import Formatter, formatter_from_config
from .types import ModulesConfig, ObfuscationConfig, PackConfig


@dataclass
class BundleContext:
    config: PackConfig
    env: ExternalEnvInfo
    rng: random.Random = field(default_factory=random.Random)
    formatter: Formatter | None = None

    @property
    def source_root(self) -> Path:
        return self.config["source_root"]

    @property
    def modules(self) -> ModulesConfig:
        return self.config["modules"]

    @property
    def obfuscation(self) -> ObfuscationConfig:
        return self.config["obfuscation"]

    @property
    def ignore_missing(self) -> bool:
        return self.config["modules"]["ignore_missing"]


def build_context(
    config: PackConfig,
    *,
    formatter: Formatter | None = None,
    rng: random.Random | None = None,
    environ: Mapping[str, str] | None = None,
) -> BundleContext:
    env = resolve_external_env(
        config["modules"]["external"]["env"],
        config["source_root"],
        environ,
    )
    if formatter is None:
        formatter = formatter_from_config(config["obfuscation"], environ)
    return BundleContext(
        config=config,
        env=env,
        rng=rng or random.Random(),
        formatter=formatter,
    )
