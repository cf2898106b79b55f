# src/luapack/utils.py


import json
import os
import re
import sys
from contextlib import suppress
from pathlib import Path
from typing import Any, TextIO, cast

# Strings are matched first so comment markers inside them survive.
_JSONC_TOKEN = re.compile(
    r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/',
    re.DOTALL,
)
_TRAILING_COMMA = re.compile(r'("(?:\\.|[^"\\])*")|,(?=\s*[}\]])')


def should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    # Respect explicit overrides
    if "NO_COLOR" in os.environ:
        return False
    if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
        return True

    # Auto-detect: use color if output is a TTY
    return sys.stdout.isatty()


def strip_jsonc(text: str) -> str:
    """Remove // and /* */ comments plus trailing commas, leaving strings intact."""
    text = _JSONC_TOKEN.sub(lambda m: m.group(1) or "", text)
    return _TRAILING_COMMA.sub(lambda m: m.group(1) or "", text)


def load_jsonc(path: Path) -> dict[str, Any] | None:
    """Load a JSONC config object (JSON with comments and trailing commas).

    Returns None for a file that is empty or holds only comments.
    """
    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)

    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = strip_jsonc(path.read_text(encoding="utf-8")).strip()
    if not text:
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    if not isinstance(data, dict):
        xmsg = f"Invalid JSONC root type: {type(data).__name__} (expected object)"
        raise ValueError(xmsg)  # noqa: TRY004

    return cast("dict[str, Any]", data)


def remove_path_in_error_message(inner_msg: str, path: Path) -> str:
    """Remove redundant file path mentions from a wrapped error message.

    Example:
        "Invalid JSONC syntax in /abs/path/luapack.config.json: Expecting value"
        → "Invalid JSONC syntax: Expecting value"
    """
    clean_msg = inner_msg
    for mention in (str(path), path.name):
        for wrapped in (f"in '{mention}'", f'in "{mention}"', f"in {mention}"):
            clean_msg = clean_msg.replace(wrapped, "")
        clean_msg = clean_msg.replace(mention, "")

    clean_msg = re.sub(r"\s{2,}", " ", clean_msg)
    clean_msg = re.sub(r"\s*:\s*", ": ", clean_msg)
    return clean_msg.strip(": ").strip()


def plural(obj: Any) -> str:
    """Return 's' if obj represents a plural count.

    Accepts ints, floats, and any object implementing __len__().
    """
    count: int | float
    try:
        count = len(obj)
    except TypeError:
        count = obj if isinstance(obj, (int, float)) else 0
    return "s" if count != 1 else ""


def safe_log(msg: str) -> None:
    """Emergency logger that never fails."""
    stream = cast("TextIO", sys.__stderr__)
    try:
        print(msg, file=stream)
    except Exception:  # noqa: BLE001
        # never crash while reporting a crash
        with suppress(Exception):
            stream.write(f"[INTERNAL] {msg}\n")


def is_within(path: Path, root: Path) -> bool:
    """Return True if `path` lies inside `root` (or is `root`)."""
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True
