# src/luapack/bundle.py
"""Assemble ordered modules into one self-contained Lua file.

Require ids are resolved per requesting module: each bundled module sees
`require` bound to a loader that first consults that module's own alias
table, then the bundled names, then the host `require`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from string import Template

from .constants import LUA_INIT_NAME
from .errors import ModuleNameConflictError
from .logs import get_logger
from .records import DependencyGraph, ResolvedModule

# requester name → {require id → bundled name, or None for the host require}
ScopedAliases = dict[str, dict[str, str | None]]

_INIT_SUFFIX = f".{LUA_INIT_NAME}"

_LUA_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

# $-placeholders never clash with Lua syntax.
BUNDLE_TEMPLATE = Template(
    """\
local __lp_modules = {
$modules
}

local __lp_aliases = {
$aliases
}

local __lp_cache = {}
local __lp_loaded = {}
local original_require = require

local function resolve_module_name(module_name, scope)
    if type(module_name) ~= "string" then
        return nil
    end
    local scoped = __lp_aliases[scope]
    if scoped ~= nil and scoped[module_name] ~= nil then
        return scoped[module_name] or nil
    end
    if __lp_modules[module_name] then
        return module_name
    end
    if module_name:sub(-5) == ".init" then
        local without_init = module_name:sub(1, -6)
        if __lp_modules[without_init] then
            return without_init
        end
    else
        local with_init = module_name .. ".init"
        if __lp_modules[with_init] then
            return with_init
        end
    end
    return nil
end

local load_module

local function require_from(scope)
    return function(module_name)
        local resolved_name = resolve_module_name(module_name, scope)
        if resolved_name then
            return load_module(resolved_name, module_name)
        end
        local result = original_require(module_name)
        return result
    end
end

load_module = function(resolved_name, ...)
    if __lp_loaded[resolved_name] then
        return __lp_cache[resolved_name]
    end
    local previous_require = require
    require = require_from(resolved_name)
    local ok, result = pcall(__lp_modules[resolved_name], ...)
    require = previous_require
    if not ok then
        error(result, 0)
    end
    if result == nil then
        result = true
    end
    __lp_cache[resolved_name] = result
    __lp_loaded[resolved_name] = true
    return result
end

local function run_entry(...)
    return load_module($entry, ...)
end

return run_entry(...)
"""
)


def lua_string(value: str) -> str:
    """Quote `value` as a double-quoted Lua string literal."""
    out: list[str] = []
    for ch in value:
        if ch in _LUA_ESCAPES:
            out.append(_LUA_ESCAPES[ch])
        elif ord(ch) < 32 or ord(ch) == 127:
            out.append(f"\\{ord(ch):03d}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def strip_shebang(source: str) -> str:
    # a shebang is only legal on the first line of a chunk, not inside a function
    if source.startswith("#"):
        _, _, rest = source.partition("\n")
        return rest
    return source


def _bundled_lookup(module_id: str, names: set[str]) -> bool:
    """Mirror of the shim's unscoped lookup: would `module_id` hit a bundled name?"""
    if module_id in names:
        return True
    if module_id.endswith(_INIT_SUFFIX):
        return module_id[: -len(_INIT_SUFFIX)] in names
    return module_id + _INIT_SUFFIX in names


def collect_aliases(graph: DependencyGraph) -> ScopedAliases:
    """Record, per requesting module, where each of its require ids went.

    An id needs an entry when it reached a file under a different logical
    name, or when it stayed unresolved but the unscoped lookup would hit
    some other bundled module. Ids equal to their target's name need none.
    """
    names = {node.module.module_name for node in graph.values()}
    aliases: ScopedAliases = {}

    for node in graph.values():
        scope: dict[str, str | None] = {}
        for edge in node.dependencies:
            target = graph.get(edge.file_path) if edge.file_path else None
            if target is not None:
                if edge.id != target.module.module_name:
                    scope[edge.id] = target.module.module_name
            elif edge.is_missing and _bundled_lookup(edge.id, names):
                scope[edge.id] = None
        if scope:
            aliases[node.module.module_name] = scope

    return aliases


def _alias_block(scope: str, entries: Mapping[str, str | None]) -> str:
    lines = [f"[{lua_string(scope)}] = {{"]
    for module_id, target in sorted(entries.items()):
        value = lua_string(target) if target is not None else "false"
        lines.append(f"    [{lua_string(module_id)}] = {value},")
    lines.append("},")
    return "\n".join(lines)


def assemble(
    entry_module: ResolvedModule,
    ordered_modules: Iterable[ResolvedModule],
    aliases: Mapping[str, Mapping[str, str | None]] | None = None,
) -> str:
    """Return the bundle text for `ordered_modules`, run from `entry_module`.

    Module sources are read from disk at call time. Raises
    ModuleNameConflictError when two files share one logical name.
    """
    logger = get_logger()
    entries: list[str] = []
    seen: dict[str, ResolvedModule] = {}

    for record in ordered_modules:
        if record.file_path is None:
            continue
        name = record.module_name
        if name in seen:
            if seen[name].file_path == record.file_path:
                continue
            raise ModuleNameConflictError(
                name, seen[name].file_path, record.file_path
            )
        seen[name] = record

        source = strip_shebang(record.file_path.read_text(encoding="utf-8"))
        entries.append(f"[{lua_string(name)}] = function(...)\n{source}\nend,")
        logger.trace("[BUNDLE] %s ← %s", name, record.file_path)

    alias_blocks = [
        _alias_block(scope, entries_for_scope)
        for scope, entries_for_scope in sorted((aliases or {}).items())
        if entries_for_scope
    ]

    return BUNDLE_TEMPLATE.substitute(
        modules="\n".join(entries),
        aliases="\n".join(alias_blocks),
        entry=lua_string(entry_module.module_name),
    )
