# tests/test_analyzer.py
"""Tests for luapack.analyzer (graph construction and ordering)."""

from pathlib import Path

import pytest

import luapack.analyzer as mod_analyzer
import luapack.context as mod_context
import luapack.errors as mod_errors
from tests.utils import make_config, write_tree


def _analyzer(root: Path, **kwargs: object) -> mod_analyzer.DependencyAnalyzer:
    config = make_config(root, **kwargs)  # type: ignore[arg-type]
    return mod_analyzer.DependencyAnalyzer(
        mod_context.build_context(config, environ={})
    )


def _order(analyzer: mod_analyzer.DependencyAnalyzer, entry: Path) -> list[str]:
    result = analyzer.build_graph(entry)
    return [m.module_name for m in analyzer.topological_sort(result.graph)]


# ---------------------------------------------------------------------------
# require extraction
# ---------------------------------------------------------------------------


def test_find_requires_literal_calls_only() -> None:
    # --- setup ---
    source = "\n".join(
        [
            'local a = require("a.b")',
            "local c = require ( 'c-d' )",
            'local skipped = require "no.parens"',
            "local dynamic = require(name)",
            'local again = require("a.b")',
            'local nested = require("pkg/sub")',
        ]
    )

    # --- execute ---
    found = mod_analyzer.find_requires(source)

    # --- verify ---
    assert found == ["a.b", "c-d", "pkg/sub"]


# ---------------------------------------------------------------------------
# graph + ordering
# ---------------------------------------------------------------------------


def test_simple_chain_orders_dependency_first(tmp_path: Path) -> None:
    # --- setup ---
    root = write_tree(
        tmp_path,
        {
            "main.lua": 'local greeter = require("app.greeter")\n',
            "app/greeter.lua": "return {}\n",
        },
    )
    analyzer = _analyzer(root)

    # --- execute ---
    order = _order(analyzer, root / "main.lua")

    # --- verify ---
    assert order == ["app.greeter", "main"]


def test_diamond_visits_shared_dependency_once(tmp_path: Path) -> None:
    # --- setup ---
    root = write_tree(
        tmp_path,
        {
            "main.lua": 'require("a")\nrequire("b")\n',
            "a.lua": 'return require("c")\n',
            "b.lua": 'return require("c")\n',
            "c.lua": "return 1\n",
        },
    )
    analyzer = _analyzer(root)

    # --- execute ---
    result = analyzer.build_graph(root / "main.lua")
    order = [m.module_name for m in analyzer.topological_sort(result.graph)]

    # --- verify ---
    assert len(result.graph) == 4
    assert list(result.graph) == [
        root / "main.lua",
        root / "a.lua",
        root / "c.lua",
        root / "b.lua",
    ]
    assert order == ["c", "a", "b", "main"]


def test_cycle_is_reported_only_when_sorting(tmp_path: Path) -> None:
    # --- setup ---
    root = write_tree(
        tmp_path,
        {
            "main.lua": 'require("a")\n',
            "a.lua": 'require("b")\n',
            "b.lua": 'require("a")\n',
        },
    )
    analyzer = _analyzer(root)

    # --- execute ---
    result = analyzer.build_graph(root / "main.lua")

    # --- verify ---
    assert result.errors == []
    with pytest.raises(mod_errors.CircularDependencyError) as exc:
        analyzer.topological_sort(result.graph)
    assert exc.value.cycle == [root / "a.lua", root / "b.lua", root / "a.lua"]
    assert "Circular dependency detected" in str(exc.value)


def test_missing_dependency_is_fatal_by_default(tmp_path: Path) -> None:
    # --- setup ---
    root = write_tree(tmp_path, {"main.lua": 'local pkg = require("vendor.pkg")\n'})
    analyzer = _analyzer(root)

    # --- execute ---
    result = analyzer.build_graph(root / "main.lua")

    # --- verify ---
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], mod_errors.LuaModuleNotFoundError)
    assert [m.fatal for m in result.missing] == [True]
    edges = result.graph[root / "main.lua"].dependencies
    assert [(e.id, e.is_missing, e.file_path) for e in edges] == [
        ("vendor.pkg", True, None)
    ]


def test_missing_dependency_is_recorded_when_ignoring_missing(
    tmp_path: Path,
) -> None:
    # --- setup ---
    root = write_tree(tmp_path, {"main.lua": 'local pkg = require("vendor.pkg")\n'})
    analyzer = _analyzer(root, ignore_missing=True)

    # --- execute ---
    result = analyzer.build_graph(root / "main.lua")
    order = [m.module_name for m in analyzer.topological_sort(result.graph)]

    # --- verify ---
    assert result.errors == []
    assert len(result.missing) == 1
    assert result.missing[0].fatal is False
    assert result.missing[0].require_id == "vendor.pkg"
    assert result.missing[0].required_by.module_name == "main"
    assert order == ["main"]


def test_ignored_dependency_leaves_no_edge(tmp_path: Path) -> None:
    # --- setup ---
    root = write_tree(
        tmp_path,
        {"main.lua": 'require("socket")\nrequire("util")\n', "util.lua": ""},
    )
    analyzer = _analyzer(root, ignore=["socket"])

    # --- execute ---
    result = analyzer.build_graph(root / "main.lua")

    # --- verify ---
    edges = result.graph[root / "main.lua"].dependencies
    assert [e.id for e in edges] == ["util"]
    assert result.missing == []


def test_non_recursive_modules_are_not_read(tmp_path: Path) -> None:
    # --- setup ---
    write_tree(
        tmp_path,
        {
            "src/main.lua": 'require("vendor")\n',
            "ext/vendor.lua": 'require("does.not.exist")\n',
        },
    )
    analyzer = _analyzer(
        tmp_path,
        entry="src/main.lua",
        external_paths=[(tmp_path / "ext").resolve()],
        external_recursive=False,
    )

    # --- execute ---
    result = analyzer.build_graph((tmp_path / "src" / "main.lua").resolve())

    # --- verify ---
    assert result.errors == []
    vendor = result.graph[(tmp_path / "ext" / "vendor.lua").resolve()]
    assert vendor.module.is_external is True
    assert vendor.dependencies == []


def test_duplicate_requires_produce_one_edge(tmp_path: Path) -> None:
    # --- setup ---
    root = write_tree(
        tmp_path,
        {"main.lua": 'require("util")\nrequire("util")\n', "util.lua": ""},
    )
    analyzer = _analyzer(root)

    # --- execute ---
    result = analyzer.build_graph(root / "main.lua")

    # --- verify ---
    assert len(result.graph[root / "main.lua"].dependencies) == 1


def test_entry_module_is_always_last(tmp_path: Path) -> None:
    # --- setup ---
    root = write_tree(
        tmp_path,
        {
            "main.lua": 'require("z")\nrequire("y")\nrequire("x")\n',
            "z.lua": 'require("y")\n',
            "y.lua": 'require("x")\n',
            "x.lua": "",
        },
    )
    analyzer = _analyzer(root)

    # --- execute ---
    order = _order(analyzer, root / "main.lua")

    # --- verify ---
    assert order[-1] == "main"
    assert order.index("x") < order.index("y") < order.index("z")
