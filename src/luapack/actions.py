# src/luapack/actions.py

import re
import subprocess
from contextlib import suppress
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path

from .logs import get_logger
from .meta import PROGRAM_PACKAGE, Metadata


def get_metadata() -> Metadata:
    """Return (version, commit) tuple for this tool.

    - Installed → distribution metadata
    - Source checkout → read pyproject.toml + git
    """
    logger = get_logger()
    root = Path(__file__).resolve().parents[2]
    version = "unknown"
    commit = "unknown"

    with suppress(PackageNotFoundError):
        version = dist_version(PROGRAM_PACKAGE)

    pyproject = root / "pyproject.toml"
    if version == "unknown" and pyproject.exists():
        logger.trace("trying to read metadata from %s", pyproject)
        text = pyproject.read_text(encoding="utf-8")
        match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
        if match:
            version = match.group(1)

    # Try git for commit
    with suppress(OSError, subprocess.CalledProcessError):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip() or commit

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)
