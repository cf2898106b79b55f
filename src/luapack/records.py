# src/luapack/records.py
"""Module records, dependency edges and the dependency graph.

A module record is one of three frozen variants:

    ResolvedModule  → a concrete file that will be bundled
    IgnoredModule   → listed in `modules.ignore`; never traversed or bundled
    MissingModule   → could not be resolved; kept as a dangling edge

Every variant answers the same read-only questions (`is_ignored`,
`is_missing`, `file_path`, ...) so callers never need isinstance checks
just to read a flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Union


@dataclass(frozen=True)
class ResolvedModule:
    id: str
    module_name: str
    file_path: Path
    is_external: bool = False
    override_applied: bool = False
    analyze_dependencies: bool = True

    is_ignored: ClassVar[bool] = False
    is_missing: ClassVar[bool] = False


@dataclass(frozen=True)
class IgnoredModule:
    id: str
    module_name: str

    is_ignored: ClassVar[bool] = True
    is_missing: ClassVar[bool] = False
    file_path: ClassVar[None] = None
    is_external: ClassVar[bool] = False
    override_applied: ClassVar[bool] = False
    analyze_dependencies: ClassVar[bool] = False


@dataclass(frozen=True)
class MissingModule:
    id: str
    module_name: str
    override_applied: bool = False
    error: Exception | None = field(default=None, compare=False)

    is_ignored: ClassVar[bool] = False
    is_missing: ClassVar[bool] = True
    file_path: ClassVar[None] = None
    is_external: ClassVar[bool] = False
    analyze_dependencies: ClassVar[bool] = False


ModuleRecord = Union[ResolvedModule, IgnoredModule, MissingModule]


@dataclass(frozen=True)
class DependencyEdge:
    """Snapshot of a required module, taken when the edge was recorded."""

    id: str
    module_name: str
    file_path: Path | None
    is_external: bool
    is_missing: bool
    override_applied: bool

    @classmethod
    def from_record(cls, record: ModuleRecord) -> DependencyEdge:
        return cls(
            id=record.id,
            module_name=record.module_name,
            file_path=record.file_path,
            is_external=record.is_external,
            is_missing=record.is_missing,
            override_applied=record.override_applied,
        )


@dataclass
class GraphNode:
    module: ResolvedModule
    dependencies: list[DependencyEdge] = field(default_factory=list)


# Keyed by resolved file path; insertion order is traversal order.
DependencyGraph = dict[Path, GraphNode]


@dataclass(frozen=True)
class MissingRecord:
    required_by: ResolvedModule
    require_id: str
    record: MissingModule
    error: Exception | None
    fatal: bool


@dataclass
class GraphResult:
    graph: DependencyGraph
    entry_module: ResolvedModule
    missing: list[MissingRecord] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
