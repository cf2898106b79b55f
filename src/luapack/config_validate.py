# src/luapack/config_validate.py


from typing import Any, get_args

from .constants import DEFAULT_STRICT_CONFIG
from .logs import LEVEL_ORDER
from .types import ObfuscationTool, RootConfigInput
from .utils_schema import (
    ValidationSummary,
    check_schema_conformance,
    collect_msg,
)

OBFUSCATION_TOOLS: tuple[str, ...] = get_args(ObfuscationTool)


# ---------------------------------------------------------------------------
# main validator
# ---------------------------------------------------------------------------


def validate_config(
    raw_cfg: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Validate a raw config object.

    strict=True  →  warnings become fatal, but still listed separately
    strict=False →  warnings remain non-fatal

    When `strict` is None the `strict_config` key of the config decides.

    Returns a ValidationSummary object.
    """
    summary = ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=DEFAULT_STRICT_CONFIG,
    )

    strict_from_root: Any = raw_cfg.get("strict_config")
    if strict is not None:
        summary.strict = strict
    elif isinstance(strict_from_root, bool):
        summary.strict = strict_from_root

    check_schema_conformance(
        summary.strict, raw_cfg, RootConfigInput, summary=summary
    )

    # --- values the type system does not pin down ---
    obfuscation: Any = raw_cfg.get("obfuscation")
    if isinstance(obfuscation, dict):
        tool: Any = obfuscation.get("tool")
        if isinstance(tool, str) and tool not in OBFUSCATION_TOOLS:
            collect_msg(
                summary.strict,
                f"obfuscation.tool: unknown tool '{tool}'"
                f" (expected one of: {', '.join(OBFUSCATION_TOOLS)})",
                summary,
                is_error=True,
            )

    log_level: Any = raw_cfg.get("log_level")
    if isinstance(log_level, str) and log_level.lower() not in LEVEL_ORDER:
        collect_msg(
            summary.strict,
            f"log_level: unknown level '{log_level}'"
            f" (expected one of: {', '.join(LEVEL_ORDER)})",
            summary,
            is_error=True,
        )

    summary.valid = not summary.errors and not summary.strict_warnings
    return summary
