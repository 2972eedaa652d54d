from .cfg import DEFAULT_CFG, Cfg
from .minifier import Minifier, minify
from .node import Document
from .parser import TurboMin, parse
from .serialize import to_test_format
from .tokens import ParseError

__all__ = [
    "DEFAULT_CFG",
    "Cfg",
    "Document",
    "Minifier",
    "ParseError",
    "TurboMin",
    "minify",
    "parse",
    "to_test_format",
]
