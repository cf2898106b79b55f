# src/luapack/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_FORMATTER: str = "LUAPACK_FORMATTER"
DEFAULT_ENV_NAMES: tuple[str, ...] = ("LUA_PATH",)

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_OUTPUT_SUFFIX: str = "_packed"
DEFAULT_OBFUSCATION_TOOL: str = "none"
DEFAULT_HINT_CUTOFF: float = 0.6
CONFIG_CANDIDATES: tuple[str, ...] = (
    "luapack.config.json",
    ".luapack.jsonc",
    ".luapack.json",
)

# --- lua conventions ---
LUA_EXTENSION: str = ".lua"
LUA_INIT_NAME: str = "init"
ENV_PATH_DELIMITER: str = ";"
ENV_PATH_MARKER: str = "?"

# --- obfuscation ---
ASCII_CHUNK_SIZE: int = 200
DEFAULT_RENAME_MIN: int = 5
DEFAULT_RENAME_MAX: int = 5
RENAME_MAX_ATTEMPTS: int = 10_000
