# src/luapack/__init__.py

"""LuaPack: bundle a Lua program and its required modules into one file.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use, custom integrations, or plugins.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - run_build()         → Analyze, assemble, obfuscate and write a bundle
    - resolve_config()    → Merge CLI args with config files
    - ModuleResolver      → require id → module record
    - DependencyAnalyzer  → dependency graph + topological order
    - assemble()          → ordered modules → bundle text
"""

from .actions import get_metadata
from .analysis import (
    AnalysisContext,
    AnalysisMetrics,
    AnalysisPipeline,
    AnalysisResult,
    MissingModuleInfo,
)
from .analyzer import REQUIRE_PATTERN, DependencyAnalyzer, find_requires
from .build import BuildResult, run_build
from .bundle import assemble, collect_aliases, lua_string
from .cli import main
from .config import (
    determine_log_level,
    find_config,
    load_and_validate_config,
    load_config,
)
from .config_resolve import normalize_rename, resolve_config
from .config_validate import validate_config
from .context import BundleContext, build_context
from .env import ExternalEnvInfo, resolve_external_env
from .errors import (
    CircularDependencyError,
    FormatterError,
    GenerationExhaustedError,
    LuaModuleNotFoundError,
    LuapackError,
    ModuleNameConflictError,
    OverridePathNotFoundError,
)
from .formatter import CommandFormatter, Formatter, formatter_from_config
from .logs import LEVEL_ORDER, get_logger, log, set_log_level
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .obfuscation import (
    ObfuscationPipeline,
    ascii_encode,
    generate_name,
    obfuscate,
    rename_tagged_identifiers,
    strip_banner,
)
from .records import (
    DependencyEdge,
    DependencyGraph,
    GraphNode,
    GraphResult,
    IgnoredModule,
    MissingModule,
    MissingRecord,
    ModuleRecord,
    ResolvedModule,
)
from .report import build_payload, log_summary, write_report
from .resolver import ModuleResolver, try_path
from .runtime import Runtime, current_runtime
from .types import (
    ModulesConfig,
    ObfuscationConfig,
    PackConfig,
    RenameConfig,
    RootConfigInput,
)
from .utils import load_jsonc, should_use_color

__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",
    "main",
    #
    # --- Bundling Engine ---
    "AnalysisPipeline",
    "BuildResult",
    "BundleContext",
    "DependencyAnalyzer",
    "ModuleResolver",
    "ObfuscationPipeline",
    "REQUIRE_PATTERN",
    "ascii_encode",
    "assemble",
    "build_context",
    "collect_aliases",
    "find_requires",
    "generate_name",
    "lua_string",
    "obfuscate",
    "rename_tagged_identifiers",
    "resolve_external_env",
    "run_build",
    "strip_banner",
    "try_path",
    #
    # --- Formatter ---
    "CommandFormatter",
    "Formatter",
    "formatter_from_config",
    #
    # --- Config Handling ---
    "determine_log_level",
    "find_config",
    "load_and_validate_config",
    "load_config",
    "normalize_rename",
    "resolve_config",
    "validate_config",
    #
    # --- Reporting ---
    "build_payload",
    "log_summary",
    "write_report",
    #
    # --- Metadata / Runtime ---
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "current_runtime",
    #
    # --- utils ---
    "LEVEL_ORDER",
    "get_logger",
    "load_jsonc",
    "log",
    "set_log_level",
    "should_use_color",
    #
    # --- Errors ---
    "CircularDependencyError",
    "FormatterError",
    "GenerationExhaustedError",
    "LuaModuleNotFoundError",
    "LuapackError",
    "ModuleNameConflictError",
    "OverridePathNotFoundError",
    #
    # --- Types ---
    "AnalysisContext",
    "AnalysisMetrics",
    "AnalysisResult",
    "DependencyEdge",
    "DependencyGraph",
    "ExternalEnvInfo",
    "GraphNode",
    "GraphResult",
    "IgnoredModule",
    "MissingModule",
    "MissingModuleInfo",
    "MissingRecord",
    "ModuleRecord",
    "ModulesConfig",
    "ObfuscationConfig",
    "PackConfig",
    "RenameConfig",
    "ResolvedModule",
    "RootConfigInput",
    "Runtime",
]
