# tests/utils/__init__.py

from .args import make_args
from .config_validate import make_summary
from .formatter import FakeFormatter
from .lua import decode_ascii_bundle, write_tree
from .packconfig import make_config, make_obfuscation
from .trace import TRACE, make_trace

__all__ = [
    "TRACE",
    "FakeFormatter",
    "decode_ascii_bundle",
    "make_args",
    "make_config",
    "make_obfuscation",
    "make_summary",
    "make_trace",
    "write_tree",
]
