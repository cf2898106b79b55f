# src/luapack/errors.py
"""Exception taxonomy for resolution, ordering and obfuscation failures.

All errors derive from RuntimeError so the CLI treats them as controlled
terminations (logged without a traceback).
"""

from pathlib import Path


class LuapackError(RuntimeError):
    code: str = "LUAPACK_ERROR"


class LuaModuleNotFoundError(LuapackError):
    """A require identifier matched no candidate file."""

    code = "MODULE_NOT_FOUND"

    def __init__(self, module_id: str, message: str | None = None) -> None:
        self.module_id = module_id
        super().__init__(message or f"Module not found: {module_id}")


class OverridePathNotFoundError(LuaModuleNotFoundError):
    """An explicit override points at a file that does not exist."""

    def __init__(self, module_id: str, override_path: str) -> None:
        self.override_path = override_path
        super().__init__(
            module_id,
            f"Override path for module '{module_id}' not found: {override_path}",
        )


class CircularDependencyError(LuapackError):
    code = "CIRCULAR_DEPENDENCY"

    def __init__(self, cycle: list[Path]) -> None:
        self.cycle = cycle
        chain = " → ".join(str(p) for p in cycle)
        super().__init__(f"Circular dependency detected: {chain}")


class GenerationExhaustedError(LuapackError):
    code = "GENERATION_EXHAUSTED"


class FormatterError(LuapackError):
    code = "FORMATTER_FAILED"


class ModuleNameConflictError(LuapackError):
    """Two different files derived the same logical module name."""

    code = "MODULE_NAME_CONFLICT"

    def __init__(self, module_name: str, first: Path, second: Path) -> None:
        self.module_name = module_name
        self.paths = (first, second)
        super().__init__(
            f"Module name '{module_name}' is claimed by both {first} and {second}"
        )
