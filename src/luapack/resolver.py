# src/luapack/resolver.py
"""Turn a require identifier plus a requesting directory into a module record.

Search order for `require("a.b")` from a file in `dir`:

    1. explicit override for "a.b" (bypasses the search entirely)
    2. dir/a/b
    3. <source_root>/a/b
    4. each external root, configured paths first, then LUA_PATH-style roots

A candidate base `P` matches `P.lua`, or `P/init.lua` when `P.lua` is absent.
"""

from __future__ import annotations

from pathlib import Path

from .constants import LUA_EXTENSION, LUA_INIT_NAME
from .context import BundleContext
from .errors import LuaModuleNotFoundError, OverridePathNotFoundError
from .logs import get_logger
from .records import IgnoredModule, MissingModule, ModuleRecord, ResolvedModule
from .types import OverrideConfig
from .utils import is_within


def normalize_module_id(module_id: str) -> str:
    return module_id.replace("\\", "/")


def try_path(base: Path) -> Path | None:
    """Return the file a candidate base path resolves to, if any."""
    direct = base.with_name(base.name + LUA_EXTENSION)
    if direct.is_file():
        return direct.resolve()

    package_index = base / f"{LUA_INIT_NAME}{LUA_EXTENSION}"
    if package_index.is_file():
        return package_index.resolve()

    return None


class ModuleResolver:
    def __init__(self, ctx: BundleContext) -> None:
        modules = ctx.modules
        self.source_root = ctx.source_root.resolve()
        self.ignore_missing = modules["ignore_missing"]
        self.ignore_set = {normalize_module_id(i) for i in modules["ignore"]}
        self.overrides: dict[str, OverrideConfig] = {
            normalize_module_id(k): v for k, v in modules["overrides"].items()
        }
        self.external_recursive = modules["external"]["recursive"]

        roots: list[Path] = []
        for raw in [*modules["external"]["paths"], *ctx.env.all_paths]:
            root = (raw if raw.is_absolute() else self.source_root / raw).resolve()
            if root not in roots:
                roots.append(root)
        self.external_roots = roots

    # ------------------------------------------------------------------ #
    # public API
    # ------------------------------------------------------------------ #

    def resolve(self, require_id: str, requesting_dir: Path) -> ModuleRecord:
        """Resolve one require identifier.

        Raises LuaModuleNotFoundError (or OverridePathNotFoundError) unless
        `ignore_missing` is set, in which case a MissingModule is returned.
        """
        logger = get_logger()
        module_id = normalize_module_id(require_id)

        if module_id in self.ignore_set:
            logger.trace("[RESOLVE] %s ignored by config", module_id)
            return IgnoredModule(id=module_id, module_name=module_id)

        override = self.overrides.get(module_id)
        if override and override.get("path"):
            return self._resolve_override(module_id, override)

        relative = module_id.replace(".", "/")
        for root in self._search_roots(requesting_dir):
            found = try_path(root / relative)
            if found is not None:
                logger.trace("[RESOLVE] %s → %s (root=%s)", module_id, found, root)
                return self._create_record(module_id, found, root, override)

        return self._missing(module_id, LuaModuleNotFoundError(module_id))

    def create_entry_record(self, file_path: Path) -> ResolvedModule:
        file_path = file_path.resolve()
        module_name = self.derive_module_name(file_path, file_path.parent)
        return self._create_record(module_name, file_path, file_path.parent, None)

    def create_missing_record(
        self,
        module_id: str,
        error: Exception | None = None,
        *,
        override_applied: bool = False,
    ) -> MissingModule:
        return MissingModule(
            id=module_id,
            module_name=module_id,
            override_applied=override_applied,
            error=error,
        )

    def derive_module_name(
        self,
        file_path: Path,
        search_root: Path | None = None,
        fallback_id: str | None = None,
    ) -> str:
        """Logical name of a file: its path relative to the owning root, dotted.

        `pkg/sub/init.lua` collapses onto `pkg.sub`. Files outside every
        known root use `fallback_id`, or their dotted absolute path.
        """
        if is_within(file_path, self.source_root):
            root = self.source_root
        elif search_root is not None and is_within(file_path, search_root):
            root = search_root
        elif any(is_within(file_path, r) for r in self.external_roots):
            root = next(r for r in self.external_roots if is_within(file_path, r))
        elif fallback_id:
            return fallback_id
        else:
            parts = [p for p in file_path.with_suffix("").parts if p.strip("/\\")]
            return ".".join(p.rstrip(":\\/") for p in parts)

        parts = list(file_path.relative_to(root).with_suffix("").parts)
        if len(parts) > 1 and parts[-1] == LUA_INIT_NAME:
            parts.pop()
        return ".".join(parts) or (fallback_id or LUA_INIT_NAME)

    def is_external(self, file_path: Path) -> bool:
        return not is_within(file_path, self.source_root)

    # ------------------------------------------------------------------ #
    # internals
    # ------------------------------------------------------------------ #

    def _search_roots(self, requesting_dir: Path) -> list[Path]:
        roots = [requesting_dir, self.source_root, *self.external_roots]
        unique: list[Path] = []
        for root in roots:
            if root not in unique:
                unique.append(root)
        return unique

    def _resolve_override(
        self, module_id: str, override: OverrideConfig
    ) -> ModuleRecord:
        raw_path = override["path"]
        candidate = Path(raw_path.removesuffix(LUA_EXTENSION))
        if not candidate.is_absolute():
            candidate = self.source_root / candidate

        found = try_path(candidate)
        if found is None:
            return self._missing(
                module_id,
                OverridePathNotFoundError(module_id, raw_path),
                override_applied=True,
            )

        get_logger().trace("[RESOLVE] %s → %s (override)", module_id, found)
        return self._create_record(
            module_id, found, None, override, override_applied=True
        )

    def _missing(
        self,
        module_id: str,
        error: LuaModuleNotFoundError,
        *,
        override_applied: bool = False,
    ) -> MissingModule:
        if not self.ignore_missing:
            raise error
        get_logger().debug("Continuing past missing module: %s", error)
        return self.create_missing_record(
            module_id, error, override_applied=override_applied
        )

    def _create_record(
        self,
        module_id: str,
        file_path: Path,
        search_root: Path | None,
        override: OverrideConfig | None,
        *,
        override_applied: bool = False,
    ) -> ResolvedModule:
        is_external = self.is_external(file_path)
        fallback = None if override_applied else module_id
        module_name = self.derive_module_name(file_path, search_root, fallback)

        # override flag → external policy → recurse
        analyze = True
        if override is not None and isinstance(override.get("recursive"), bool):
            analyze = override["recursive"]
        elif is_external and isinstance(self.external_recursive, bool):
            analyze = self.external_recursive

        return ResolvedModule(
            id=module_id or module_name,
            module_name=module_name,
            file_path=file_path,
            is_external=is_external,
            override_applied=override_applied,
            analyze_dependencies=analyze,
        )
