# src/luapack/report.py
"""Display helpers for an analysis result: log summary and JSON report."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .analysis import AnalysisResult
from .logs import get_logger
from .records import DependencyEdge, ResolvedModule
from .utils import plural


def _module_payload(module: ResolvedModule) -> dict[str, Any]:
    return {
        "id": module.id,
        "module_name": module.module_name,
        "file_path": str(module.file_path),
        "is_external": module.is_external,
        "override_applied": module.override_applied,
        "analyze_dependencies": module.analyze_dependencies,
    }


def _edge_payload(edge: DependencyEdge) -> dict[str, Any]:
    return {
        "id": edge.id,
        "module_name": edge.module_name,
        "file_path": str(edge.file_path) if edge.file_path else None,
        "is_external": edge.is_external,
        "is_missing": edge.is_missing,
    }


def build_payload(result: AnalysisResult) -> dict[str, Any]:
    """Return a JSON-serializable view of `result`."""
    metrics = result.metrics
    entry = result.entry_module
    return {
        "summary": {
            "success": result.success,
            "entry": entry.module_name if entry else None,
            "root": str(result.context.root),
            "output": str(result.context.output),
            "analyze_only": result.context.analyze_only,
            "duration_ms": round(result.duration_ms, 3),
        },
        "metrics": {
            "module_count": metrics.module_count,
            "external_count": metrics.external_count,
            "missing_count": metrics.missing_count,
            "module_size_sum": metrics.module_size_sum,
            "estimated_bundle_size": metrics.estimated_bundle_size,
            "bundle_size_bytes": metrics.bundle_size_bytes,
        },
        "modules": [_module_payload(m) for m in result.modules],
        "externals": [m.module_name for m in result.externals],
        "missing": [
            {
                "require_id": m.require_id,
                "module_name": m.module_name,
                "required_by": m.required_by,
                "fatal": m.fatal,
                "override_applied": m.override_applied,
                "message": m.message,
                "code": m.code,
            }
            for m in result.missing
        ],
        "topological_order": list(result.topological_order),
        "dependencies": {
            module_id: [_edge_payload(e) for e in edges]
            for module_id, edges in result.dependency_graph.items()
        },
        "warnings": list(result.warnings),
        "errors": [str(e) for e in result.errors],
    }


def write_report(path: Path, result: AnalysisResult) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(build_payload(result), indent=2, ensure_ascii=False)
    path.write_text(text + "\n", encoding="utf-8")
    get_logger().info("Analysis report written to: %s", path)


# --------------------------------------------------------------------------- #
# text output
# --------------------------------------------------------------------------- #


def _edge_tags(edge: DependencyEdge) -> str:
    tags = []
    if edge.is_missing:
        tags.append("missing")
    if edge.is_external:
        tags.append("external")
    if edge.override_applied:
        tags.append("override")
    return f" [{', '.join(tags)}]" if tags else ""


def dependency_tree_lines(result: AnalysisResult) -> list[str]:
    """Render the require tree from the entry; repeated subtrees are elided."""
    entry = result.entry_module
    if entry is None:
        return []

    lines = [entry.module_name]
    expanded: set[Path] = {entry.file_path}

    def walk(file_path: Path, prefix: str) -> None:
        node = result.graph.get(file_path)
        edges = node.dependencies if node else []
        for i, edge in enumerate(edges):
            last = i == len(edges) - 1
            branch = "└── " if last else "├── "
            repeat = edge.file_path in expanded
            suffix = " (…)" if repeat and edge.file_path in result.graph else ""
            lines.append(f"{prefix}{branch}{edge.module_name}{_edge_tags(edge)}{suffix}")
            if edge.file_path is None or repeat:
                continue
            expanded.add(edge.file_path)
            walk(edge.file_path, prefix + ("    " if last else "│   "))

    walk(entry.file_path, "")
    return lines


def log_summary(result: AnalysisResult, *, verbose: bool = False) -> None:
    logger = get_logger()
    metrics = result.metrics

    logger.info(
        "Analyzed %d module%s (%d external, %d missing) in %.0fms",
        metrics.module_count,
        plural(metrics.module_count),
        metrics.external_count,
        metrics.missing_count,
        result.duration_ms,
    )

    for missing in result.missing:
        level = logger.error if missing.fatal else logger.warning
        level(
            "Missing module '%s' (required by %s): %s",
            missing.require_id,
            missing.required_by,
            missing.message,
        )
    for warning in result.warnings:
        logger.warning(warning)
    for error in result.errors:
        if not any(m.message == str(error) for m in result.missing):
            logger.error(str(error))

    if verbose:
        tree = dependency_tree_lines(result)
        if tree:
            logger.info("Dependency tree:\n%s", "\n".join(tree))
        if result.topological_order:
            order = "\n".join(
                f"  {i}. {name}" for i, name in enumerate(result.topological_order, 1)
            )
            logger.info("Topological order:\n%s", order)
