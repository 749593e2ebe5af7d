"""Splitting oversized fragments into block-aligned chunks."""

import logging

from bs4 import NavigableString, Tag
from bs4.element import PageElement

from ..dom import BLOCK_TAGS

logger = logging.getLogger(__name__)

# Wrappers that carry no meaning of their own and can be looked through
WRAPPER_TAGS = frozenset({"body", "main", "article", "section", "div"})


def serialized_size(node: PageElement) -> int:
    """Size in bytes of the node's UTF-8 serialization."""
    return len(str(node).encode("utf-8"))


def needs_chunking(fragment: Tag, max_size: int) -> bool:
    return serialized_size(fragment) > max_size


def _content_children(fragment: Tag) -> list[PageElement]:
    """
    Top-level children of a fragment, descending through lone wrappers.

    ``<body><div><div>...</div></div></body>`` is looked through until a
    level with more than one meaningful child is found.
    """
    current = fragment
    while True:
        children = [
            child
            for child in current.children
            if not (isinstance(child, NavigableString) and not child.strip())
        ]
        if len(children) == 1 and isinstance(children[0], Tag) and children[0].name in WRAPPER_TAGS:
            current = children[0]
            continue
        return children


def split_into_chunks(fragment: Tag, chunk_size: int) -> list[list[PageElement]]:
    """
    Group a fragment's top-level children into chunks of at most chunk_size bytes.

    A chunk is only closed before a block-level element, so runs of inline
    content stay together. A single child larger than chunk_size becomes its
    own chunk.

    Args:
        fragment: Element to split
        chunk_size: Target serialized size per chunk

    Returns:
        Chunks in document order; each is a list of sibling nodes
    """
    chunks: list[list[PageElement]] = []
    current: list[PageElement] = []
    current_size = 0

    for child in _content_children(fragment):
        size = serialized_size(child)
        is_block = isinstance(child, Tag) and child.name in BLOCK_TAGS
        if current and is_block and current_size + size > chunk_size:
            chunks.append(current)
            current, current_size = [], 0
        current.append(child)
        current_size += size

    if current:
        chunks.append(current)

    logger.debug(f"Split fragment into {len(chunks)} chunk(s) of <= {chunk_size} bytes")
    return chunks
