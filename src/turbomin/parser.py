"""Minimal turbomin parser entry point."""

from .cfg import DEFAULT_CFG
from .tokenizer import Tokenizer, TokenizerOpts
from .treebuilder import TreeBuilder


def decode_source(src):
    """Bytes are read as UTF-8; undecodable bytes survive as lone surrogates."""
    if isinstance(src, (bytes, bytearray, memoryview)):
        return bytes(src).decode("utf-8", "surrogateescape")
    return src or ""


class TurboMin:
    __slots__ = ("cfg", "debug", "document", "tokenizer", "tree_builder")

    def __init__(
        self,
        html,
        cfg=None,
        *,
        collect_errors=False,
        debug=False,
    ):
        self.cfg = cfg or DEFAULT_CFG
        self.debug = bool(debug)
        self.tree_builder = TreeBuilder(debug=self.debug)
        opts = TokenizerOpts(
            collect_errors=collect_errors,
            preserve_brace_template_syntax=self.cfg.preserve_brace_template_syntax,
            preserve_chevron_percent_template_syntax=self.cfg.preserve_chevron_percent_template_syntax,
        )
        self.tokenizer = Tokenizer(self.tree_builder, opts)
        self.tree_builder.tokenizer = self.tokenizer
        self.tokenizer.run(decode_source(html))
        self.document = self.tree_builder.finish()
        self.document.errors = self.tokenizer.errors


def parse(src, cfg=None, *, collect_errors=False, debug=False):
    """Parse markup (bytes or str) into a Document. Never raises on bad markup."""
    return TurboMin(src, cfg, collect_errors=collect_errors, debug=debug).document
