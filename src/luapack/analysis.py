# src/luapack/analysis.py
"""One analysis pass: build the graph, order it, and collect metrics."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

from .analyzer import DependencyAnalyzer
from .context import BundleContext
from .env import ExternalEnvInfo
from .errors import CircularDependencyError
from .logs import get_logger
from .records import (
    DependencyEdge,
    DependencyGraph,
    MissingRecord,
    ResolvedModule,
)
from .types import ObfuscationConfig


@dataclass
class AnalysisContext:
    root: Path
    entry: Path
    output: Path
    analyze_only: bool
    ignored_patterns: list[str]
    ignore_missing: bool
    external_paths: list[Path]
    external_recursive: bool | None
    env: ExternalEnvInfo


@dataclass
class AnalysisMetrics:
    module_count: int = 0
    external_count: int = 0
    missing_count: int = 0
    module_size_sum: int = 0
    estimated_bundle_size: int = 0
    bundle_size_bytes: int | None = None


@dataclass
class MissingModuleInfo:
    require_id: str
    module_name: str
    file_path: Path | None
    required_by: str | None
    is_external: bool
    override_applied: bool
    fatal: bool
    message: str
    code: str | None


@dataclass
class AnalysisResult:
    context: AnalysisContext
    obfuscation: ObfuscationConfig
    entry_module: ResolvedModule | None = None
    graph: DependencyGraph = field(default_factory=dict)
    modules: list[ResolvedModule] = field(default_factory=list)
    module_by_id: dict[str, ResolvedModule] = field(default_factory=dict)
    dependency_graph: dict[str, list[DependencyEdge]] = field(default_factory=dict)
    sorted_modules: list[ResolvedModule] = field(default_factory=list)
    topological_order: list[str] = field(default_factory=list)
    externals: list[ResolvedModule] = field(default_factory=list)
    missing: list[MissingModuleInfo] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    metrics: AnalysisMetrics = field(default_factory=AnalysisMetrics)
    success: bool = True
    duration_ms: float = 0.0


def format_missing(item: MissingRecord) -> MissingModuleInfo:
    error = item.error
    return MissingModuleInfo(
        require_id=item.require_id,
        module_name=item.record.module_name,
        file_path=item.record.file_path,
        required_by=item.required_by.module_name,
        is_external=item.record.is_external,
        override_applied=item.record.override_applied,
        fatal=item.fatal,
        message=str(error) if error else "Module was marked missing.",
        code=getattr(error, "code", None),
    )


def module_size_sum(modules: list[ResolvedModule]) -> int:
    total = 0
    for module in modules:
        try:
            total += module.file_path.stat().st_size
        except OSError as e:
            get_logger().warning(
                "Failed to read size for module '%s': %s", module.module_name, e
            )
    return total


class AnalysisPipeline:
    def __init__(self, ctx: BundleContext) -> None:
        self.ctx = ctx
        self.analyzer = DependencyAnalyzer(ctx)

    def build_context(self) -> AnalysisContext:
        config = self.ctx.config
        external = config["modules"]["external"]
        return AnalysisContext(
            root=config["source_root"],
            entry=config["entry"],
            output=config["output"],
            analyze_only=config["analyze_only"],
            ignored_patterns=list(config["modules"]["ignore"]),
            ignore_missing=config["modules"]["ignore_missing"],
            external_paths=list(self.analyzer.resolver.external_roots),
            external_recursive=external["recursive"],
            env=self.ctx.env,
        )

    def run(self) -> AnalysisResult:
        logger = get_logger()
        start = time.perf_counter()
        result = AnalysisResult(
            context=self.build_context(),
            obfuscation=self.ctx.obfuscation,
        )

        try:
            graph_result = self.analyzer.build_graph(self.ctx.config["entry"])
        except (OSError, ValueError, RuntimeError) as e:
            logger.debug("Graph construction failed: %s", e)
            result.errors.append(e)
            result.success = False
            result.duration_ms = (time.perf_counter() - start) * 1000
            return result

        result.entry_module = graph_result.entry_module
        result.graph = graph_result.graph
        result.errors.extend(graph_result.errors)
        result.missing = [format_missing(item) for item in graph_result.missing]

        for info in result.missing:
            if info.override_applied and not info.fatal:
                if info.message not in result.warnings:
                    result.warnings.append(info.message)

        self._populate_collections(result)

        try:
            result.sorted_modules = self.analyzer.topological_sort(result.graph)
            result.topological_order = [
                m.module_name for m in result.sorted_modules
            ]
        except CircularDependencyError as e:
            result.errors.append(e)
            result.sorted_modules = []
            result.topological_order = []

        metrics = result.metrics
        metrics.module_count = len(result.modules)
        metrics.external_count = len(result.externals)
        metrics.missing_count = len(result.missing)
        metrics.module_size_sum = module_size_sum(result.modules)
        metrics.estimated_bundle_size = metrics.module_size_sum

        result.success = not result.errors
        result.duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "Analysis finished in %.1fms (success=%s)",
            result.duration_ms,
            result.success,
        )
        return result

    def _populate_collections(self, result: AnalysisResult) -> None:
        for node in result.graph.values():
            module = node.module
            result.modules.append(module)
            result.module_by_id.setdefault(module.id, module)
            result.dependency_graph[module.id] = list(node.dependencies)

            for edge in node.dependencies:
                target = result.graph.get(edge.file_path) if edge.file_path else None
                if target is not None:
                    result.module_by_id.setdefault(edge.id, target.module)

        result.externals = [m for m in result.modules if m.is_external]
        for external in result.externals:
            result.warnings.append(
                f"Module '{external.module_name}' resolved outside source root"
                " and will be treated as external."
            )
