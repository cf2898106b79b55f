# tests/utils/lua.py

import re
from pathlib import Path

_CHAR_CALL = re.compile(r"string\.char\(([^)]*)\)")


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write `{relative path: content}` under root; return the resolved root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root.resolve()


def decode_ascii_bundle(text: str) -> str:
    """Rebuild the source an ascii-encoded loader would execute."""
    codes: list[int] = []
    for match in _CHAR_CALL.finditer(text):
        body = match.group(1).strip()
        if body:
            codes.extend(int(c) for c in body.split(","))
    return bytes(codes).decode("utf-8")
