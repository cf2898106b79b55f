# src/luapack/utils_types.py

import types
from typing import Any, TypeVar, Union, cast, get_args, get_origin

from typing_extensions import get_type_hints, is_typeddict

T = TypeVar("T")


def cast_hint(typ: type[T], value: Any) -> T:
    """Explicit cast that documents intent without runtime checks."""
    return cast(T, value)


def schema_from_typeddict(td: type[Any]) -> dict[str, Any]:
    """Return the key → annotation map of a TypedDict, forward refs resolved."""
    return get_type_hints(td)


def is_union(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def safe_isinstance(value: Any, expected_type: Any) -> bool:  # noqa: PLR0911
    """isinstance() that understands the typing constructs used in config schemas.

    Handles Any, unions, list[X], dict[K, V] and TypedDicts (shape only,
    keys are checked separately by the schema validator).
    """
    if expected_type is Any:
        return True

    if is_union(expected_type):
        return any(safe_isinstance(value, arg) for arg in get_args(expected_type))

    if is_typeddict(expected_type):
        return isinstance(value, dict)

    origin = get_origin(expected_type)
    if origin is list:
        (item_type,) = get_args(expected_type) or (Any,)
        return isinstance(value, list) and all(
            safe_isinstance(v, item_type) for v in value
        )
    if origin is dict:
        key_type, val_type = get_args(expected_type) or (Any, Any)
        return isinstance(value, dict) and all(
            safe_isinstance(k, key_type) and safe_isinstance(v, val_type)
            for k, v in value.items()
        )

    # bool is a subclass of int but never a valid int in config files
    if expected_type is int and isinstance(value, bool):
        return False
    if expected_type is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    if isinstance(expected_type, type):
        return isinstance(value, expected_type)
    return False
