# src/luapack/analyzer.py
"""Dependency graph construction and deterministic ordering."""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

from .context import BundleContext
from .errors import (
    CircularDependencyError,
    LuaModuleNotFoundError,
    OverridePathNotFoundError,
)
from .logs import get_logger
from .records import (
    DependencyEdge,
    DependencyGraph,
    GraphNode,
    GraphResult,
    IgnoredModule,
    MissingModule,
    MissingRecord,
    ModuleRecord,
    ResolvedModule,
)
from .resolver import ModuleResolver, normalize_module_id

# Only literal ids are seen: require(name), require("a" .. b) and
# require "x" (no parentheses) are invisible to the bundler.
REQUIRE_PATTERN = re.compile(r"""require\s*\(\s*['"]([\w./-]+)['"]\s*\)""")

_VISITING = 1
_DONE = 2


def find_requires(source: str) -> list[str]:
    """Return require identifiers in source order, duplicates removed."""
    seen: list[str] = []
    for require_id in REQUIRE_PATTERN.findall(source):
        if require_id not in seen:
            seen.append(require_id)
    return seen


class DependencyAnalyzer:
    def __init__(self, ctx: BundleContext) -> None:
        self.ctx = ctx
        self.resolver = ModuleResolver(ctx)

    def build_graph(self, entry_file: Path) -> GraphResult:
        """Walk the require graph depth-first from `entry_file`.

        Cycles terminate through the visited set; they are only reported
        later by `topological_sort`. Resolution failures are collected in
        the result instead of being raised.
        """
        logger = get_logger()
        entry = self.resolver.create_entry_record(entry_file)
        result = GraphResult(graph={}, entry_module=entry)
        visited: set[Path] = set()

        # explicit stack; popping in push-reverse order keeps recursive preorder
        stack: list[ResolvedModule] = [entry]
        while stack:
            record = stack.pop()
            if record.file_path in visited:
                continue
            visited.add(record.file_path)

            if not record.analyze_dependencies:
                logger.trace("[GRAPH] %s (not analyzed)", record.module_name)
                result.graph[record.file_path] = GraphNode(module=record)
                continue

            source = record.file_path.read_text(encoding="utf-8")
            edges, children = self._collect_dependencies(record, source, result)
            result.graph[record.file_path] = GraphNode(
                module=record, dependencies=edges
            )
            logger.trace(
                "[GRAPH] %s → %s",
                record.module_name,
                [e.module_name for e in edges],
            )
            stack.extend(reversed(children))

        logger.debug(
            "Dependency graph: %d module(s), %d missing",
            len(result.graph),
            len(result.missing),
        )
        return result

    def _collect_dependencies(
        self,
        record: ResolvedModule,
        source: str,
        result: GraphResult,
    ) -> tuple[list[DependencyEdge], list[ResolvedModule]]:
        edges: list[DependencyEdge] = []
        children: list[ResolvedModule] = []

        for require_id in find_requires(source):
            dependency: ModuleRecord
            try:
                dependency = self.resolver.resolve(require_id, record.file_path.parent)
            except LuaModuleNotFoundError as error:
                dependency = self.resolver.create_missing_record(
                    normalize_module_id(require_id),
                    error,
                    override_applied=isinstance(error, OverridePathNotFoundError),
                )
                result.missing.append(
                    MissingRecord(record, require_id, dependency, error, fatal=True)
                )
                result.errors.append(error)
                edges.append(DependencyEdge.from_record(dependency))
                continue

            if isinstance(dependency, IgnoredModule):
                continue

            edges.append(DependencyEdge.from_record(dependency))
            if isinstance(dependency, MissingModule):
                result.missing.append(
                    MissingRecord(
                        record, require_id, dependency, dependency.error, fatal=False
                    )
                )
                continue

            children.append(dependency)

        return edges, children

    def topological_sort(self, graph: DependencyGraph) -> list[ResolvedModule]:
        """Order modules so every module follows its dependencies.

        Three-colour DFS over graph keys in insertion order. Meeting a node
        that is still on the stack is a structural cycle.
        """
        state: dict[Path, int] = {}
        order: list[ResolvedModule] = []

        def targets(node: Path) -> Iterator[Path]:
            entry = graph.get(node)
            deps = entry.dependencies if entry else []
            return iter([d.file_path for d in deps if d.file_path is not None])

        for start in graph:
            if start in state:
                continue
            state[start] = _VISITING
            stack: list[tuple[Path, Iterator[Path]]] = [(start, targets(start))]

            while stack:
                node, pending = stack[-1]
                for target in pending:
                    target_state = state.get(target)
                    if target_state == _VISITING:
                        on_stack = [n for n, _ in stack]
                        cycle = [*on_stack[on_stack.index(target) :], target]
                        raise CircularDependencyError(cycle)
                    if target_state is None:
                        state[target] = _VISITING
                        stack.append((target, targets(target)))
                        break
                else:
                    stack.pop()
                    state[node] = _DONE
                    if node in graph:
                        order.append(graph[node].module)

        get_logger().trace("[ORDER] %s", [m.module_name for m in order])
        return order
