# src/luapack/utils_schema.py
from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, cast, get_args, get_origin

from typing_extensions import is_typeddict

from .constants import DEFAULT_HINT_CUTOFF
from .utils import plural
from .utils_types import cast_hint, is_union, safe_isinstance, schema_from_typeddict

# --- dataclasses ------------------------------------------------------


@dataclass
class ValidationSummary:
    valid: bool
    errors: list[str]
    strict_warnings: list[str]
    warnings: list[str]
    strict: bool


# --- helpers --------------------------------------------------------


def collect_msg(
    strict: bool,
    msg: str,
    summary: ValidationSummary,  # modified in function, not returned
    *,
    is_error: bool = False,
) -> None:
    """
    Route a message to the appropriate bucket.
    Errors are always fatal.
    Warnings may escalate to strict_warnings in strict mode.
    """
    if is_error:
        summary.errors.append(msg)
    elif strict:
        summary.strict_warnings.append(msg)
    else:
        summary.warnings.append(msg)


def _infer_type_label(expected_type: Any) -> str:
    """Return a readable label for logging (e.g. 'list[str]', 'OverrideInput')."""
    if is_union(expected_type):
        return " | ".join(_infer_type_label(a) for a in get_args(expected_type))
    origin = get_origin(expected_type)
    args = get_args(expected_type)
    if origin is list and args:
        return f"list[{_infer_type_label(args[0])}]"
    if origin is dict and len(args) == 2:  # noqa: PLR2004
        return f"dict[{_infer_type_label(args[0])}, {_infer_type_label(args[1])}]"
    if isinstance(expected_type, type):
        return expected_type.__name__
    return str(expected_type)


def _location(context: str, key: str) -> str:
    return f"{context}.{key}" if context else key


# ---------------------------------------------------------------------------
# granular schema validator helpers (private and testable)
# ---------------------------------------------------------------------------


def _validate_value(
    strict: bool,
    context: str,
    key: str,
    val: Any,
    expected_type: Any,
    *,
    summary: ValidationSummary,  # modified in function, not returned
) -> bool:
    """Validate one value, recursing into TypedDicts, lists and dicts."""
    location = _location(context, key)

    if is_typeddict(expected_type):
        return _validate_typed_dict(
            strict, location, val, expected_type, summary=summary
        )

    if is_union(expected_type):
        # pick the first member whose outer shape matches, then go deep
        for member in get_args(expected_type):
            if safe_isinstance(val, member):
                return _validate_value(
                    strict, context, key, val, member, summary=summary
                )

    origin = get_origin(expected_type)
    args = get_args(expected_type)

    if origin is list and isinstance(val, list):
        subtype = args[0] if args else Any
        items = cast_hint(list[Any], val)
        valid = True
        for i, item in enumerate(items):
            valid &= _validate_value(
                strict, context, f"{key}[{i}]", item, subtype, summary=summary
            )
        return valid

    if origin is dict and isinstance(val, dict):
        _, value_type = args if args else (Any, Any)
        mapping = cast_hint(dict[Any, Any], val)
        valid = True
        for k, item in mapping.items():
            if not isinstance(k, str):
                collect_msg(
                    strict,
                    f"{location}: keys must be strings, got {type(k).__name__}",
                    summary,
                    is_error=True,
                )
                valid = False
                continue
            valid &= _validate_value(
                strict, location, k, item, value_type, summary=summary
            )
        return valid

    if safe_isinstance(val, expected_type):
        return True

    collect_msg(
        strict,
        f"{location}: expected {_infer_type_label(expected_type)},"
        f" got {type(val).__name__}",
        summary,
        is_error=True,
    )
    return False


def _validate_typed_dict(
    strict: bool,
    context: str,
    val: Any,
    typedict_cls: type[Any],
    *,
    summary: ValidationSummary,  # modified in function, not returned
) -> bool:
    """Validate a dict against a TypedDict schema recursively.

    - Return False if val is not a dict
    - Recurse into known fields
    - Report unknown keys, with a "did you mean" hint where one is close
    """
    where = context or "top-level configuration"
    if not isinstance(val, dict):
        collect_msg(
            strict,
            f"{where}: expected an object with named keys for"
            f" {typedict_cls.__name__}, got {type(val).__name__}",
            summary,
            is_error=True,
        )
        return False

    schema = schema_from_typeddict(typedict_cls)
    val_dict = cast(dict[str, Any], val)
    valid = True

    for field, expected_type in schema.items():
        if field not in val_dict:
            # optional → not a failure
            continue
        valid &= _validate_value(
            strict, context, field, val_dict[field], expected_type, summary=summary
        )

    # --- Unknown keys ---
    unknown: list[str] = [k for k in val_dict if k not in schema]
    if unknown:
        joined = ", ".join(f"`{u}`" for u in unknown)
        msg = f"Unknown key{plural(unknown)} {joined} in {where}."

        hints: list[str] = []
        for k in unknown:
            close = get_close_matches(
                str(k), schema.keys(), n=1, cutoff=DEFAULT_HINT_CUTOFF
            )
            if close:
                hints.append(f"'{k}' → '{close[0]}'")
        if hints:
            msg += "\nHint: did you mean " + ", ".join(hints) + "?"

        collect_msg(strict, msg, summary)
        if strict:
            valid = False

    return valid


# ---------------------------------------------------------------------------
# public entry
# ---------------------------------------------------------------------------


def check_schema_conformance(
    strict_config: bool,
    cfg: dict[str, Any],
    typedict_cls: type[Any],
    *,
    summary: ValidationSummary,  # modified in function, not returned
) -> bool:
    """Validate a whole config object against its root TypedDict."""
    return _validate_typed_dict(strict_config, "", cfg, typedict_cls, summary=summary)
