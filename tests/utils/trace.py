# tests/utils/trace.py

import builtins
import os

TRACE_ENABLED = os.environ.get("TRACE", "").lower() in {"1", "true", "yes"}


def make_trace(icon: str = "🧪"):
    """Return a TRACE printer prefixed with `icon`; silent unless TRACE=1."""

    def trace(label: str, *args: object) -> None:
        if TRACE_ENABLED:
            builtins.print(f"{icon} [TRACE] {label}:", *args, flush=True)

    return trace


TRACE = make_trace()
