"""Block-level polish: cleanup, heading hierarchy, table of contents."""

import logging
import re
from dataclasses import replace
from typing import Optional

from .models.blocks import Block, BlockType, TableData
from .models.config import PostProcessConfig

logger = logging.getLogger(__name__)

# Control characters, soft hyphens, zero-width and bidi marks, BOM
NON_PRINTABLE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\xad\u061c\u200b-\u200f\u2028\u2029\ufeff\ufff9-\ufffc]"
)

_SLUG_STRIP = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_MARKDOWN_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_EMPHASIS = re.compile(r"[*_`]")


def github_slug(text: str) -> str:
    """
    Anchor slug the way GitHub renders heading ids.

    Example:
        >>> github_slug("Getting Started: Install!")
        'getting-started-install'
    """
    return _WHITESPACE.sub("-", _SLUG_STRIP.sub("", text.lower()).strip())


def _plain(text: str) -> str:
    """Heading text without inline Markdown."""
    return _EMPHASIS.sub("", _MARKDOWN_LINK.sub(r"\1", text)).strip()


class PostProcessor:
    """
    Final polish applied to converted blocks.

    Works on blocks rather than Markdown text, so the rendered Markdown stays
    a pure function of the returned blocks.
    """

    def __init__(self, config: Optional[PostProcessConfig] = None):
        self.config = config or PostProcessConfig()

    def process(self, blocks: list[Block]) -> list[Block]:
        """
        Clean and polish blocks.

        Args:
            blocks: Converted blocks in reading order

        Returns:
            New list of blocks; the input list is left untouched
        """
        result = [self._clean(block) for block in blocks]
        result = [block for block in result if block is not None]

        if self.config.normalize_headings:
            result = self.normalize_heading_levels(result)

        if self.config.table_of_contents:
            result = self.insert_table_of_contents(result)

        return result

    def _clean(self, block: Block) -> Optional[Block]:
        """Strip non-printable characters and drop blocks left empty."""
        strip = self.config.remove_non_printable

        def fix(value: Optional[str]) -> Optional[str]:
            if value is None or not strip:
                return value
            return NON_PRINTABLE.sub("", value)

        if block.type == BlockType.LIST:
            items = [fix(item) for item in block.items or []]
            items = [item for item in items if item and item.strip()]
            return replace(block, items=items) if items else None

        if block.type == BlockType.TABLE:
            table = block.table
            if table is None or (not table.headers and not table.rows):
                return None
            cleaned = TableData(
                headers=[fix(cell) or "" for cell in table.headers],
                rows=[[fix(cell) or "" for cell in row] for row in table.rows],
                simple=table.simple,
            )
            return replace(block, table=cleaned)

        if block.type == BlockType.CODE:
            code = fix(block.code)
            return replace(block, code=code) if code and code.strip() else None

        text = fix(block.text)
        if not text or not text.strip():
            return None
        return replace(block, text=text)

    @staticmethod
    def normalize_heading_levels(blocks: list[Block]) -> list[Block]:
        """
        Ensure heading levels never skip (an h1 followed by an h3 becomes h1, h2).

        Headings are re-leveled by their place in the outline, so siblings
        always share a level: h2, h3, h3, h2 becomes 1, 2, 2, 1.
        """
        # (original level, assigned level) of the open ancestors
        stack: list[tuple[int, int]] = []
        result = []
        for block in blocks:
            if block.type == BlockType.HEADING:
                original = block.level or 1
                while stack and original <= stack[-1][0]:
                    stack.pop()
                level = stack[-1][1] + 1 if stack else 1
                stack.append((original, level))
                if level != block.level:
                    block = replace(block, level=level)
            result.append(block)
        return result

    def insert_table_of_contents(self, blocks: list[Block]) -> list[Block]:
        """Insert a heading-derived table of contents after the first heading."""
        headings = [
            (index, block) for index, block in enumerate(blocks) if block.type == BlockType.HEADING
        ]
        if len(headings) < self.config.toc_min_headings:
            return blocks

        base_level = min(block.level or 1 for _, block in headings)
        items: list[str] = []
        for _, heading in headings:
            entry = self._toc_link(heading.text or "")
            depth = (heading.level or 1) - base_level
            if depth > 0 and items:
                # Continuation lines get one indent level from the list renderer
                items[-1] += "\n" + "  " * (depth - 1) + "- " + entry
            else:
                items.append(entry)

        toc_level = min(2, (headings[0][1].level or 1) + 1)
        toc = [
            Block(type=BlockType.HEADING, level=toc_level, text=self.config.toc_title),
            Block(type=BlockType.LIST, items=items),
        ]

        first_index = headings[0][0]
        logger.debug(f"Inserted table of contents with {len(headings)} entries")
        return blocks[: first_index + 1] + toc + blocks[first_index + 1 :]

    def _toc_link(self, text: str) -> str:
        label = _plain(text)
        if self.config.platform == "obsidian":
            return f"[[#{label}]]"
        return f"[{label}](#{github_slug(label)})"
