"""Conversion of HTML fragments to structured blocks and Markdown."""

from .chunking import needs_chunking, split_into_chunks
from .inline import InlineRenderer
from .markdown import ConversionResult, MarkdownConverter, render_block

__all__ = [
    "ConversionResult",
    "InlineRenderer",
    "MarkdownConverter",
    "needs_chunking",
    "render_block",
    "split_into_chunks",
]
