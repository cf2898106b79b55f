# src/luapack/build.py
from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .analysis import AnalysisPipeline, AnalysisResult
from .bundle import assemble, collect_aliases
from .context import build_context
from .formatter import Formatter
from .logs import get_logger
from .obfuscation import ObfuscationPipeline
from .types import PackConfig


@dataclass
class BuildResult:
    analysis: AnalysisResult
    output: Path | None = None
    written: bool = False

    @property
    def success(self) -> bool:
        return self.analysis.success

    @property
    def errors(self) -> list[Exception]:
        return self.analysis.errors


def run_build(
    config: PackConfig,
    *,
    formatter: Formatter | None = None,
    rng: random.Random | None = None,
    environ: Mapping[str, str] | None = None,
) -> BuildResult:
    """Analyze, assemble, obfuscate and write one bundle.

    Nothing is written unless every stage succeeds. A missing formatter for
    requested minify/rename raises FormatterError before analysis starts.
    """
    logger = get_logger()
    ctx = build_context(config, formatter=formatter, rng=rng, environ=environ)
    # analyze-only runs never obfuscate, so they need no formatter
    pipeline = None if config["analyze_only"] else ObfuscationPipeline(ctx)

    analysis = AnalysisPipeline(ctx).run()
    result = BuildResult(analysis=analysis)

    if pipeline is None:
        logger.debug("Analyze-only run; skipping bundle generation")
        return result

    if not analysis.success or analysis.entry_module is None:
        logger.debug("Analysis failed; no bundle written")
        return result

    output = config["output"]
    try:
        text = assemble(
            analysis.entry_module,
            analysis.sorted_modules,
            collect_aliases(analysis.graph),
        )
        text = pipeline.run(text, output.stem)

        output.parent.mkdir(parents=True, exist_ok=True)
        data = text.encode("utf-8")
        output.write_bytes(data)
    except (OSError, ValueError, RuntimeError) as e:
        analysis.errors.append(e)
        analysis.success = False
        return result

    analysis.metrics.bundle_size_bytes = len(data)
    result.output = output
    result.written = True
    logger.info("Bundle successfully created at: %s", output)
    return result
