# src/luapack/cli.py

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata
from .build import run_build
from .config import can_run_configless, determine_log_level, load_and_validate_config
from .config_resolve import resolve_config
from .constants import CONFIG_CANDIDATES, DEFAULT_HINT_CUTOFF
from .logs import LEVEL_ORDER, get_logger
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .report import log_summary, write_report
from .runtime import current_runtime
from .types import RootConfigInput
from .utils import safe_log
from .utils_types import cast_hint

TRUE_STATES = {"true", "1", "yes", "on"}
FALSE_STATES = {"false", "0", "no", "off"}


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        # Build known option strings: ["-v", "--verbose", "--log-level", ...]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # "unrecognized arguments: --minfy ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(
                    arg, known_opts, n=1, cutoff=DEFAULT_HINT_CUTOFF
                )
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        # Print usage + the original error
        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def parse_toggle(value: str) -> bool:
    """argparse type for `--minify [STATE]` style flags."""
    state = value.strip().lower()
    if state in TRUE_STATES:
        return True
    if state in FALSE_STATES:
        return False
    xmsg = f"invalid toggle value {value!r} (use true/false, yes/no, on/off, 1/0)"
    raise argparse.ArgumentTypeError(xmsg)


def _add_toggle(parser: argparse.ArgumentParser, flag: str, help_text: str) -> None:
    parser.add_argument(
        flag,
        nargs="?",
        const=True,
        default=None,
        type=parse_toggle,
        metavar="STATE",
        help=help_text + " Implies obfuscation tool 'internal'.",
    )


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    parser.add_argument(
        "entry",
        nargs="?",
        metavar="ENTRY",
        help="Entry Lua file (overrides `entry` in the config).",
    )
    parser.add_argument("-o", "--output", help="Output bundle (or report) path.")
    parser.add_argument("-c", "--config", help="Path to config file.")
    parser.add_argument(
        "--sourceroot",
        metavar="DIR",
        help="Root directory for module resolution (default: entry directory).",
    )

    # --- Obfuscation toggles ---
    _add_toggle(parser, "--rename-variables", "Rename local and global identifiers.")
    _add_toggle(parser, "--minify", "Minify the bundle.")
    _add_toggle(parser, "--ascii", "Encode the bundle as string.char byte codes.")

    # --- Module policy ---
    parser.add_argument(
        "--ignore-missing",
        action="store_true",
        default=None,
        help="Continue when a required module cannot be resolved.",
    )
    parser.add_argument(
        "--env",
        metavar="VARS",
        default=None,
        help=(
            "Comma-separated environment variables holding extra search paths"
            ' (default: LUA_PATH; "" disables).'
        ),
    )

    # --- Analysis ---
    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Only analyze dependencies; with --output, write a JSON report.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print the dependency tree and topological order.",
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and log level ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Debug output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    return parser


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:  # noqa: PLR0911
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        current_runtime["log_level"] = determine_log_level(args)
        if args.use_color is not None:
            current_runtime["use_color"] = args.use_color
        logger = get_logger()
        logger.trace("[BOOT] log-level initialized: %s", current_runtime["log_level"])

        logger.debug(
            "Runtime: Python %s (%s)",
            platform.python_version(),
            platform.python_implementation(),
        )

        # --- Version flag ---
        if args.version:
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0

        # --- Load configuration ---
        config_path: Path | None = None
        raw_cfg: RootConfigInput | None = None
        config_result = load_and_validate_config(args)
        if config_result is not None:
            config_path, raw_cfg = config_result

        # --- Configless early bailout ---
        if raw_cfg is None and not can_run_configless(args):
            logger.error(
                "No config file found (%s) and no entry provided.",
                ", ".join(CONFIG_CANDIDATES),
            )
            return 1

        cwd = Path.cwd().resolve()
        config_dir = config_path.parent if config_path else cwd
        if raw_cfg is None:
            raw_cfg = cast_hint(RootConfigInput, {})

        # --- Resolve config with args and defaults ---
        config = resolve_config(
            raw_cfg, args, config_dir, cwd, config_path=config_path
        )
        current_runtime["log_level"] = config["log_level"]
        logger = get_logger()

        if config_path:
            logger.debug("Using config: %s", config_path)
        logger.debug("Entry: %s", config["entry"])
        logger.debug("Source root: %s", config["source_root"])

        # --- Run ---
        result = run_build(config)
        log_summary(result.analysis, verbose=args.verbose)

        if config["analyze_only"] and args.output:
            write_report(config["output"], result.analysis)

        if not result.success:
            logger.error("Bundling failed; no output was written.")
            return 1

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        silent = getattr(e, "silent", False)
        if not silent:
            try:
                logger.error(str(e))  # noqa: TRY400
            except Exception:  # noqa: BLE001
                safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.critical("Unexpected internal error: %s", e, exc_info=True)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    else:
        return 0
