# tests/test_obfuscation.py
"""Tests for luapack.obfuscation (banner, renaming, ascii, pipeline)."""

import random
import re
import string
from pathlib import Path

import pytest

import luapack.context as mod_context
import luapack.errors as mod_errors
import luapack.obfuscation as mod_obf
from tests.utils import (
    FakeFormatter,
    decode_ascii_bundle,
    make_config,
    make_obfuscation,
    write_tree,
)

TAGGED = (
    "local L_1_a = 1\n"
    "local L_2_b = L_1_a + 1\n"
    "local L_3_c = L_2_b\n"
    "print(L_3_c)\n"
)


# ---------------------------------------------------------------------------
# banner
# ---------------------------------------------------------------------------


def test_strip_banner_removes_leading_block_comment() -> None:
    # --- execute and verify ---
    assert mod_obf.strip_banner("--[[ generated\n by tool ]]\n\nlocal a = 1") == (
        "local a = 1"
    )
    assert mod_obf.strip_banner("local a = 1") == "local a = 1"
    assert mod_obf.strip_banner("local a\n--[[ x ]]") == "local a\n--[[ x ]]"


# ---------------------------------------------------------------------------
# renaming
# ---------------------------------------------------------------------------


def test_rename_respects_length_range_and_reserved_words() -> None:
    # --- execute ---
    result = mod_obf.rename_tagged_identifiers(TAGGED, random.Random(42), 6, 9)

    # --- verify ---
    names = re.findall(r"local (\w+)", result)
    assert len(names) == 3
    assert len(set(names)) == 3
    for name in names:
        assert 6 <= len(name) <= 9
        assert name not in mod_obf.LUA_RESERVED_WORDS
    assert not mod_obf.TAG_PATTERN.search(result)
    # every occurrence of one tag gets the same replacement
    first, second, third = names
    assert f"local {second} = {first} + 1" in result
    assert f"local {third} = {second}" in result
    assert f"print({third})" in result


def test_rename_second_pass_is_noop() -> None:
    # --- setup ---
    once = mod_obf.rename_tagged_identifiers(TAGGED, random.Random(7))

    # --- execute ---
    twice = mod_obf.rename_tagged_identifiers(once, random.Random(8))

    # --- verify ---
    assert twice == once


def test_rename_avoids_existing_identifiers() -> None:
    # --- setup ---
    # single-letter names: every letter is taken, only "_" is left
    text = "local L_1_x = 1\n" + " ".join(string.ascii_letters)

    # --- execute ---
    result = mod_obf.rename_tagged_identifiers(text, random.Random(0), 1, 1)

    # --- verify ---
    assert result.startswith("local _ = 1\n")


def test_generate_name_gives_up_after_retry_cap() -> None:
    # --- setup ---
    taken = set(string.ascii_letters) | {"_"}

    # --- execute and verify ---
    with pytest.raises(mod_errors.GenerationExhaustedError):
        mod_obf.generate_name(random.Random(0), 1, 1, taken)


def test_generate_name_never_returns_reserved_words() -> None:
    # --- setup ---
    rng = random.Random(3)

    # --- execute ---
    names = [mod_obf.generate_name(rng, 2, 2) for _ in range(2000)]

    # --- verify ---
    assert not set(names) & mod_obf.LUA_RESERVED_WORDS
    assert all(n[0] in mod_obf.NAME_HEAD_CHARS for n in names)


# ---------------------------------------------------------------------------
# ascii encoding
# ---------------------------------------------------------------------------


def test_ascii_encode_round_trips_utf8() -> None:
    # --- setup ---
    source = "print('héllo, wörld')\nreturn ...\n"

    # --- execute ---
    encoded = mod_obf.ascii_encode(source, "bundle")

    # --- verify ---
    assert decode_ascii_bundle(encoded) == source
    assert "table.concat" not in encoded
    assert '(loadstring or load)(__lp_source, "bundle")' in encoded
    assert encoded.endswith("return __lp_chunk(...)\n")


def test_ascii_encode_splits_into_chunks() -> None:
    # --- setup ---
    source = "x" * 450

    # --- execute ---
    encoded = mod_obf.ascii_encode(source, "big")

    # --- verify ---
    assert encoded.count("string.char(") == 3
    assert "table.concat({" in encoded
    assert decode_ascii_bundle(encoded) == source


# ---------------------------------------------------------------------------
# pipeline
# ---------------------------------------------------------------------------


def _ctx(tmp_path: Path, formatter: FakeFormatter | None = None, **obf: object):
    root = write_tree(tmp_path, {"main.lua": ""})
    config = make_config(root, obfuscation=make_obfuscation(**obf))  # type: ignore[arg-type]
    return mod_context.build_context(
        config, formatter=formatter, rng=random.Random(1), environ={}
    )


def test_pipeline_is_inert_unless_tool_is_internal(tmp_path: Path) -> None:
    # --- setup ---
    fake = FakeFormatter("changed")
    ctx = _ctx(tmp_path, fake, tool="none", minify=True, ascii=True)

    # --- execute ---
    result = mod_obf.obfuscate("print(1)", ctx, "out")

    # --- verify ---
    assert result == "print(1)"
    assert fake.calls == []


def test_pipeline_requires_formatter_for_minify(tmp_path: Path) -> None:
    # --- setup ---
    ctx = _ctx(tmp_path, None, tool="internal", minify=True)

    # --- execute and verify ---
    with pytest.raises(mod_errors.FormatterError):
        mod_obf.ObfuscationPipeline(ctx)


def test_pipeline_run_rechecks_formatter(tmp_path: Path) -> None:
    # --- setup ---
    ctx = _ctx(tmp_path, FakeFormatter(), tool="internal", rename=True)
    pipeline = mod_obf.ObfuscationPipeline(ctx)
    pipeline.formatter = None

    # --- execute and verify ---
    with pytest.raises(mod_errors.FormatterError, match="no formatter"):
        pipeline.run("local a = 1", "out")


def test_pipeline_rename_only_beautifies_and_strips_banner(tmp_path: Path) -> None:
    # --- setup ---
    fake = FakeFormatter(TAGGED, banner="--[[ formatted ]]\n")
    ctx = _ctx(tmp_path, fake, tool="internal", rename=True)

    # --- execute ---
    result = mod_obf.obfuscate("local a = 1", ctx, "out")

    # --- verify ---
    assert fake.calls == [("beautify", True, True)]
    assert not result.startswith("--[[")
    assert not mod_obf.TAG_PATTERN.search(result)
    assert result.count("local ") == 3


def test_pipeline_minify_passes_rename_flags(tmp_path: Path) -> None:
    # --- setup ---
    fake = FakeFormatter()
    plain = _ctx(tmp_path / "a", fake, tool="internal", minify=True)
    renaming = _ctx(tmp_path / "b", fake, tool="internal", minify=True, rename=True)

    # --- execute ---
    mod_obf.obfuscate("x", plain, "out")
    mod_obf.obfuscate("x", renaming, "out")

    # --- verify ---
    assert fake.calls == [("minify", False, False), ("minify", True, True)]


def test_pipeline_ascii_runs_last_without_formatter(tmp_path: Path) -> None:
    # --- setup ---
    ctx = _ctx(tmp_path, None, tool="internal", ascii=True)

    # --- execute ---
    result = mod_obf.obfuscate("return 42\n", ctx, "main_packed")

    # --- verify ---
    assert result.startswith("local __lp_source = string.char(")
    assert '"main_packed"' in result
    assert decode_ascii_bundle(result) == "return 42\n"
