# tests/conftest.py
"""
Shared test setup for project.

Every test starts from the same runtime: info-level logging, no colour, and
none of the environment variables that change resolution or logging.
"""

import pytest
from pytest import Config

import luapack.meta as mod_meta
import luapack.runtime as mod_runtime
from tests.utils import make_trace

TRACE = make_trace("⚡️")

_ISOLATED_ENV = (
    "LUA_PATH",
    "LOG_LEVEL",
    f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL",
    f"{mod_meta.PROGRAM_ENV}_FORMATTER",
    "NO_COLOR",
    "FORCE_COLOR",
)


def pytest_report_header(config: Config) -> str:
    return f"{mod_meta.PROGRAM_DISPLAY} test suite"


@pytest.fixture(autouse=True)
def isolated_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", "info")
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", False)
    TRACE("runtime reset", dict(mod_runtime.current_runtime))
