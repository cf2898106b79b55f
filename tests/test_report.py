# tests/test_report.py
"""Tests for luapack.report (JSON payload, tree rendering, summary)."""

import json
from pathlib import Path

import pytest

import luapack.analysis as mod_analysis
import luapack.context as mod_context
import luapack.report as mod_report
from tests.utils import make_config, write_tree


def _analyze(root: Path, **kwargs: object) -> mod_analysis.AnalysisResult:
    config = make_config(root, **kwargs)  # type: ignore[arg-type]
    ctx = mod_context.build_context(config, environ={})
    return mod_analysis.AnalysisPipeline(ctx).run()


def _diamond(tmp_path: Path) -> Path:
    return write_tree(
        tmp_path,
        {
            "main.lua": 'require("a")\nrequire("b")\nrequire("gone")\n',
            "a.lua": 'return require("c")\n',
            "b.lua": 'return require("c")\n',
            "c.lua": "return {}\n",
        },
    )


def test_payload_is_json_serializable(tmp_path: Path) -> None:
    # --- setup ---
    result = _analyze(_diamond(tmp_path), ignore_missing=True)

    # --- execute ---
    payload = json.loads(json.dumps(mod_report.build_payload(result)))

    # --- verify ---
    assert payload["summary"]["success"] is True
    assert payload["summary"]["entry"] == "main"
    assert payload["metrics"]["module_count"] == 4
    assert payload["metrics"]["missing_count"] == 1
    assert payload["topological_order"] == ["c", "a", "b", "main"]
    assert [m["module_name"] for m in payload["modules"]] == ["main", "a", "c", "b"]
    assert payload["missing"][0]["require_id"] == "gone"
    assert payload["missing"][0]["fatal"] is False
    main_deps = payload["dependencies"]["main"]
    assert [d["module_name"] for d in main_deps] == ["a", "b", "gone"]
    assert main_deps[2]["is_missing"] is True
    assert main_deps[2]["file_path"] is None


def test_write_report_creates_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    # --- setup ---
    result = _analyze(_diamond(tmp_path), ignore_missing=True)
    path = tmp_path / "reports" / "analysis.json"

    # --- execute ---
    mod_report.write_report(path, result)

    # --- verify ---
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metrics"]["module_count"] == 4
    assert "Analysis report written to:" in capsys.readouterr().out


def test_dependency_tree_marks_repeats_and_missing(tmp_path: Path) -> None:
    # --- setup ---
    result = _analyze(_diamond(tmp_path), ignore_missing=True)

    # --- execute ---
    lines = mod_report.dependency_tree_lines(result)

    # --- verify ---
    assert lines == [
        "main",
        "├── a",
        "│   └── c",
        "├── b",
        "│   └── c (…)",
        "└── gone [missing]",
    ]


def test_log_summary_verbose_prints_tree_and_order(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    # --- setup ---
    result = _analyze(_diamond(tmp_path), ignore_missing=True)

    # --- execute ---
    mod_report.log_summary(result, verbose=True)

    # --- verify ---
    captured = capsys.readouterr()
    assert "Analyzed 4 modules (0 external, 1 missing)" in captured.out
    assert "Dependency tree:" in captured.out
    assert "Topological order:\n  1. c\n  2. a\n  3. b\n  4. main" in captured.out
    assert "Missing module 'gone' (required by main)" in captured.err


def test_log_summary_reports_fatal_errors_once(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    # --- setup ---
    root = write_tree(tmp_path, {"main.lua": 'require("gone")\n'})
    result = _analyze(root)

    # --- execute ---
    mod_report.log_summary(result)

    # --- verify ---
    err = capsys.readouterr().err
    assert err.count("Module not found: gone") == 1
    assert "❌" in err
