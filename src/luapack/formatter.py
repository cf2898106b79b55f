# src/luapack/formatter.py
"""Boundary to the external Lua minifier/beautifier.

The bundler treats the formatter as a pure text → text function. When
renaming is requested, the formatter must rename identifiers to tagged
placeholders (`L_<n>_<hint>` for locals, `G_<n>_<hint>` for globals) that
the rename stage later swaps for random names.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from typing import Protocol

from .constants import DEFAULT_ENV_FORMATTER
from .errors import FormatterError
from .logs import get_logger
from .types import ObfuscationConfig


class Formatter(Protocol):
    def minify(
        self, text: str, *, rename_variables: bool, rename_globals: bool
    ) -> str: ...

    def beautify(
        self, text: str, *, rename_variables: bool, rename_globals: bool
    ) -> str: ...


class CommandFormatter:
    """Run an external formatter command, source on stdin, result on stdout."""

    def __init__(self, command: Sequence[str], *, timeout: float | None = None):
        if not command:
            xmsg = "Formatter command must not be empty."
            raise ValueError(xmsg)
        self.command = list(command)
        self.timeout = timeout

    def minify(self, text: str, *, rename_variables: bool, rename_globals: bool) -> str:
        return self._run("minify", text, rename_variables, rename_globals)

    def beautify(
        self, text: str, *, rename_variables: bool, rename_globals: bool
    ) -> str:
        return self._run("beautify", text, rename_variables, rename_globals)

    def _run(
        self,
        mode: str,
        text: str,
        rename_variables: bool,
        rename_globals: bool,
    ) -> str:
        args = [*self.command, f"--{mode}"]
        if rename_variables:
            args.append("--rename-variables")
        if rename_globals:
            args.append("--rename-globals")

        get_logger().debug("Running formatter: %s", shlex.join(args))
        try:
            result = subprocess.run(  # noqa: S603
                args,
                input=text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            xmsg = f"Formatter command not found: {self.command[0]}"
            raise FormatterError(xmsg) from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip()
            xmsg = f"Formatter exited with status {e.returncode}: {detail}"
            raise FormatterError(xmsg) from e
        except subprocess.TimeoutExpired as e:
            xmsg = f"Formatter timed out after {self.timeout}s"
            raise FormatterError(xmsg) from e
        return result.stdout


def formatter_from_config(
    config: ObfuscationConfig,
    environ: Mapping[str, str] | None = None,
) -> Formatter | None:
    """Build the configured formatter, or None when no command is available."""
    environ = os.environ if environ is None else environ
    command = config.get("formatter") or shlex.split(
        environ.get(DEFAULT_ENV_FORMATTER, "")
    )
    return CommandFormatter(command) if command else None
