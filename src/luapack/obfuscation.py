# src/luapack/obfuscation.py
"""Post-processing of the assembled bundle: minify → rename → ascii."""

from __future__ import annotations

import random
import re
import string

from .bundle import lua_string
from .constants import (
    ASCII_CHUNK_SIZE,
    DEFAULT_RENAME_MAX,
    DEFAULT_RENAME_MIN,
    RENAME_MAX_ATTEMPTS,
)
from .context import BundleContext
from .errors import FormatterError, GenerationExhaustedError
from .formatter import Formatter
from .logs import get_logger
from .utils import plural

# Identifiers the formatter tagged while renaming: L_<n>_<hint> / G_<n>_<hint>
TAG_PATTERN = re.compile(r"\b[LG]_\d+_\w*")
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
BANNER_PATTERN = re.compile(r"^--\[\[.*?\]\]\s*", re.DOTALL)

NAME_HEAD_CHARS = string.ascii_letters + "_"
NAME_TAIL_CHARS = string.ascii_letters + string.digits + "_"

LUA_RESERVED_WORDS = frozenset(
    {
        "and",
        "break",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "goto",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    }
)


# --------------------------------------------------------------------------- #
# stages
# --------------------------------------------------------------------------- #


def strip_banner(text: str) -> str:
    """Drop a leading `--[[ ... ]]` header comment, if present."""
    return BANNER_PATTERN.sub("", text, count=1)


def generate_name(
    rng: random.Random,
    min_length: int,
    max_length: int,
    taken: set[str] | frozenset[str] = frozenset(),
) -> str:
    """Return a random identifier not in `taken` and not a reserved word.

    Raises GenerationExhaustedError after RENAME_MAX_ATTEMPTS collisions.
    """
    for _ in range(RENAME_MAX_ATTEMPTS):
        length = rng.randint(min_length, max_length)
        name = rng.choice(NAME_HEAD_CHARS) + "".join(
            rng.choice(NAME_TAIL_CHARS) for _ in range(length - 1)
        )
        if name in LUA_RESERVED_WORDS or name in taken:
            continue
        # a generated name must never look like a tag again
        if TAG_PATTERN.fullmatch(name):
            continue
        return name

    xmsg = (
        f"Could not generate a unique identifier after {RENAME_MAX_ATTEMPTS}"
        f" attempts (length {min_length}-{max_length})"
    )
    raise GenerationExhaustedError(xmsg)


def rename_tagged_identifiers(
    text: str,
    rng: random.Random,
    min_length: int = DEFAULT_RENAME_MIN,
    max_length: int = DEFAULT_RENAME_MAX,
) -> str:
    """Replace every distinct tagged identifier with one random name."""
    tags = list(dict.fromkeys(TAG_PATTERN.findall(text)))
    if not tags:
        return text

    taken = set(IDENTIFIER_PATTERN.findall(text))
    mapping: dict[str, str] = {}
    for tag in tags:
        name = generate_name(rng, min_length, max_length, taken)
        taken.add(name)
        mapping[tag] = name

    get_logger().debug("Renamed %d identifier%s", len(mapping), plural(mapping))
    return TAG_PATTERN.sub(lambda m: mapping[m.group(0)], text)


def ascii_encode(text: str, name: str, chunk_size: int = ASCII_CHUNK_SIZE) -> str:
    """Wrap `text` in a loader that rebuilds it from byte codes and runs it."""
    codes = list(text.encode("utf-8"))
    chunks = [
        "string.char({})".format(", ".join(str(c) for c in codes[i : i + chunk_size]))
        for i in range(0, len(codes), chunk_size)
    ] or ["string.char()"]

    if len(chunks) == 1:
        source = chunks[0]
    else:
        source = "table.concat({\n" + ",\n".join(chunks) + "\n})"

    return (
        f"local __lp_source = {source}\n"
        "local __lp_chunk = assert((loadstring or load)"
        f"(__lp_source, {lua_string(name)}))\n"
        "return __lp_chunk(...)\n"
    )


# --------------------------------------------------------------------------- #
# pipeline
# --------------------------------------------------------------------------- #


class ObfuscationPipeline:
    """Apply the configured stages, in fixed order, to one bundle text.

    Construction fails with FormatterError when minify or rename is
    requested without a formatter, so callers can check before any
    work is done.
    """

    def __init__(self, ctx: BundleContext) -> None:
        settings = ctx.obfuscation
        self.enabled = settings["tool"] == "internal"
        self.minify = self.enabled and settings["minify"]
        self.rename = self.enabled and settings["rename"]["enabled"]
        self.ascii = self.enabled and settings["ascii"]
        self.min_length = settings["rename"]["min"]
        self.max_length = settings["rename"]["max"]
        self.rng = ctx.rng
        self.formatter: Formatter | None = ctx.formatter

        if self.minify or self.rename:
            self._require_formatter()

    def run(self, text: str, name: str) -> str:
        if not self.enabled:
            return text

        logger = get_logger()
        if self.minify:
            logger.debug("Minifying bundle (rename=%s)", self.rename)
            text = self._require_formatter().minify(
                text, rename_variables=self.rename, rename_globals=self.rename
            )
        elif self.rename:
            logger.debug("Beautifying bundle for renaming")
            text = strip_banner(
                self._require_formatter().beautify(
                    text, rename_variables=True, rename_globals=True
                )
            )

        if self.rename:
            text = rename_tagged_identifiers(
                text, self.rng, self.min_length, self.max_length
            )

        if self.ascii:
            logger.debug("ASCII-encoding bundle as %r", name)
            text = ascii_encode(text, name)

        return text

    def _require_formatter(self) -> Formatter:
        if self.formatter is None:
            xmsg = (
                "Minify/rename requested but no formatter is configured"
                " (set obfuscation.formatter or LUAPACK_FORMATTER)."
            )
            raise FormatterError(xmsg)
        return self.formatter


def obfuscate(text: str, ctx: BundleContext, name: str) -> str:
    return ObfuscationPipeline(ctx).run(text, name)
