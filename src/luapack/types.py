# src/luapack/types.py
from __future__ import annotations

from pathlib import Path
from typing import Literal, TypedDict, Union

from typing_extensions import NotRequired

ObfuscationTool = Literal["none", "internal"]


# --------------------------------------------------------------------------- #
# raw config (as written in luapack.config.json)
# --------------------------------------------------------------------------- #


class RenameVariablesInput(TypedDict, total=False):
    enabled: bool
    min: int
    max: int


class ObfuscationSettingsInput(TypedDict, total=False):
    minify: bool
    rename_variables: Union[bool, RenameVariablesInput]
    ascii: bool


class ObfuscationInput(TypedDict, total=False):
    tool: str
    config: ObfuscationSettingsInput
    formatter: list[str]


class OverrideInput(TypedDict, total=False):
    path: str
    recursive: bool


class ExternalInput(TypedDict, total=False):
    recursive: bool
    paths: list[str]
    env: list[str]


class ModulesInput(TypedDict, total=False):
    ignore: list[str]
    ignore_missing: bool
    overrides: dict[str, OverrideInput]
    external: ExternalInput


class RootConfigInput(TypedDict, total=False):
    entry: str
    output: str
    source_root: str
    modules: ModulesInput
    obfuscation: ObfuscationInput

    # runtime behavior
    log_level: str
    strict_config: bool


# --------------------------------------------------------------------------- #
# resolved config (absolute paths, defaults applied)
# --------------------------------------------------------------------------- #


class RenameConfig(TypedDict):
    enabled: bool
    min: int
    max: int


class ObfuscationConfig(TypedDict):
    tool: ObfuscationTool
    minify: bool
    rename: RenameConfig
    ascii: bool
    formatter: list[str] | None


class OverrideConfig(TypedDict):
    path: str
    recursive: NotRequired[bool]  # absent → fall back to the global policy


class ExternalConfig(TypedDict):
    recursive: bool | None
    paths: list[Path]
    env: list[str] | None  # None → default env names


class ModulesConfig(TypedDict):
    ignore: list[str]
    ignore_missing: bool
    overrides: dict[str, OverrideConfig]
    external: ExternalConfig


class MetaPackConfig(TypedDict):
    # sources of parameters
    cli_root: Path
    config_root: Path
    config_path: Path | None


class PackConfig(TypedDict):
    entry: Path
    output: Path
    source_root: Path
    modules: ModulesConfig
    obfuscation: ObfuscationConfig

    log_level: str
    analyze_only: bool

    # provenance (optional, for audit/debug)
    __meta__: NotRequired[MetaPackConfig]
