"""HTML fragment to structured blocks and Markdown."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Union

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
from bs4.element import PageElement

from ..dom import BLOCK_TAGS, clone, normalize_space, text_of
from ..models.blocks import Block, BlockType, TableData
from ..models.config import ConversionConfig
from .inline import InlineRenderer

logger = logging.getLogger(__name__)

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

LIST_TAGS = frozenset({"ul", "ol"})

# Cell content that makes a table unsafe as a pipe table
CELL_BLOCK_TAGS = sorted(BLOCK_TAGS - {"hr"})

# Elements rendered by nothing at all
SKIPPED_TAGS = frozenset({"hr", "script", "style", "template", "noscript", "head", "title", "meta", "link", "button"})

_LANGUAGE_CLASS = re.compile(r"(?:language|lang)-([A-Za-z0-9_+#.-]+)")
_BACKTICK_RUN = re.compile(r"`{3,}")


@dataclass
class ConversionResult:
    """Markdown and the blocks it was rendered from."""

    markdown: str
    blocks: list[Block] = field(default_factory=list)


class MarkdownConverter:
    """
    Converts an HTML fragment into ordered blocks and Markdown.

    Markdown is always rendered from the blocks, so the two representations
    never diverge. Tables that cannot be expressed safely as GFM pipe tables
    (merged cells, block content in cells) become fenced JSON instead.

    Example:
        converter = MarkdownConverter()
        result = converter.convert("<h1>Title</h1><p>Body</p>", "https://example.com/")
        result.markdown   # '# Title\\n\\nBody\\n'
        result.blocks     # [Block(type=HEADING, ...), Block(type=PARAGRAPH, ...)]
    """

    def __init__(
        self,
        config: Optional[ConversionConfig] = None,
        inline: Optional[InlineRenderer] = None,
    ):
        self._config = config or ConversionConfig()
        self._inline = inline or InlineRenderer(ignore_images=not self._config.include_images)

    # Public API -------------------------------------------------------------

    def convert(self, fragment: Union[Tag, str], base_url: str) -> ConversionResult:
        """
        Convert a fragment to Markdown and blocks.

        Args:
            fragment: Element (its children are converted) or HTML string
            base_url: URL for absolutizing links and images

        Returns:
            ConversionResult with markdown == render(blocks)
        """
        blocks = self.extract_blocks(fragment, base_url)
        return ConversionResult(markdown=self.render(blocks), blocks=blocks)

    def extract_blocks(self, fragment: Union[Tag, str], base_url: str) -> list[Block]:
        if isinstance(fragment, str):
            fragment = BeautifulSoup(fragment, "html.parser")
        return self.extract_blocks_from_nodes(list(fragment.children), base_url)

    def extract_blocks_from_nodes(self, nodes: Iterable[PageElement], base_url: str) -> list[Block]:
        """Convert a sequence of sibling nodes, in order."""
        blocks: list[Block] = []
        self._walk(nodes, base_url, blocks)
        return blocks

    def render(self, blocks: Iterable[Block]) -> str:
        """Render blocks to Markdown, one blank line between blocks."""
        parts = [part for part in (render_block(block) for block in blocks) if part.strip()]
        if not parts:
            return ""
        return "\n\n".join(parts) + "\n"

    # Tree walk --------------------------------------------------------------

    def _walk(self, nodes: Iterable[PageElement], base_url: str, blocks: list[Block]) -> None:
        buffer: list[PageElement] = []
        for node in nodes:
            if isinstance(node, (Comment, Doctype, Declaration, ProcessingInstruction)):
                continue
            if isinstance(node, NavigableString):
                buffer.append(node)
                continue
            if not isinstance(node, Tag):
                continue
            if node.name in SKIPPED_TAGS:
                continue
            if self._is_inline(node):
                buffer.append(node)
                continue

            self._flush(buffer, base_url, blocks)
            buffer = []
            self._convert_element(node, base_url, blocks)

        self._flush(buffer, base_url, blocks)

    def _is_inline(self, node: Tag) -> bool:
        if node.name in BLOCK_TAGS or node.name in ("td", "th", "tr", "tbody", "thead", "tfoot", "caption"):
            return False
        return node.find(list(BLOCK_TAGS)) is None

    def _flush(self, buffer: list[PageElement], base_url: str, blocks: list[Block]) -> None:
        """Turn a run of loose inline nodes into one paragraph."""
        if not buffer:
            return
        html = "".join(str(node) for node in buffer)
        text = self._inline.render(html, base_url)
        if text:
            blocks.append(Block(type=BlockType.PARAGRAPH, text=text))

    def _convert_element(self, element: Tag, base_url: str, blocks: list[Block]) -> None:
        name = element.name
        block: Optional[Block] = None

        if name in HEADING_TAGS:
            block = self._heading(element)
        elif name == "p":
            if element.find(list(BLOCK_TAGS)) is not None:
                self._walk(element.children, base_url, blocks)
                return
            block = self._paragraph(element, base_url)
        elif name in LIST_TAGS:
            block = self._list(element, base_url)
        elif name == "dl":
            block = self._definition_list(element, base_url)
        elif name == "table":
            block = self._table(element, base_url)
        elif name == "pre":
            block = self._code(element)
        elif name == "blockquote":
            block = self._quote(element, base_url)
        else:
            # Containers (div, section, article, figure, ...) are transparent
            self._walk(element.children, base_url, blocks)
            return

        if block is not None:
            blocks.append(block)

    # Block builders ---------------------------------------------------------

    def _heading(self, element: Tag) -> Optional[Block]:
        text = text_of(element)
        if not text:
            return None
        level = min(int(element.name[1]), self._config.max_heading_level)
        return Block(type=BlockType.HEADING, level=level, text=text)

    def _paragraph(self, element: Tag, base_url: str) -> Optional[Block]:
        text = self._inline.render(element.decode_contents(), base_url)
        if not text:
            return None
        return Block(type=BlockType.PARAGRAPH, text=text)

    def _list(self, element: Tag, base_url: str) -> Optional[Block]:
        items = self._list_items(element, base_url)
        if not items:
            return None
        return Block(type=BlockType.LIST, items=items, ordered=element.name == "ol")

    def _list_items(self, list_tag: Tag, base_url: str) -> list[str]:
        entries = list_tag.find_all("li", recursive=False)
        if not entries:
            entries = [li for li in list_tag.find_all("li") if li.find_parent(list(LIST_TAGS)) is list_tag]

        items = []
        for li in entries:
            own = clone(li)
            for nested in own.find_all(list(LIST_TAGS)):
                nested.extract()
            text = _single_line(self._inline.render(own.decode_contents(), base_url))

            nested_lines = []
            for nested in li.find_all(list(LIST_TAGS)):
                if nested.find_parent("li") is not li:
                    continue
                for number, sub_item in enumerate(self._list_items(nested, base_url), start=1):
                    marker = f"{number}." if nested.name == "ol" else "-"
                    # Continuation lines are relative to the item; the renderer adds the outer indent
                    sub_indent = " " * (len(marker) + 1)
                    nested_lines.append(_indent_continuation(f"{marker} {sub_item}", sub_indent))

            item = "\n".join([text] + nested_lines) if nested_lines else text
            if item.strip():
                items.append(item)
        return items

    def _definition_list(self, element: Tag, base_url: str) -> Optional[Block]:
        items = []
        term: Optional[str] = None
        for child in element.find_all(["dt", "dd"]):
            if child.find_parent("dl") is not element:
                continue
            text = _single_line(self._inline.render(child.decode_contents(), base_url))
            if child.name == "dt":
                if term:
                    items.append(term)
                term = text
            elif term:
                items.append(f"{term}: {text}" if text else term)
                term = None
            elif text:
                items.append(text)
        if term:
            items.append(term)
        if not items:
            return None
        return Block(type=BlockType.LIST, items=items)

    def _table(self, element: Tag, base_url: str) -> Optional[Block]:
        rows = [tr for tr in element.find_all("tr") if tr.find_parent("table") is element]
        cell_rows = [tr.find_all(["td", "th"], recursive=False) for tr in rows]
        cell_rows = [cells for cells in cell_rows if cells]
        column_count = max((len(cells) for cells in cell_rows), default=0)
        if not cell_rows or column_count == 0:
            return None

        all_cells = [cell for cells in cell_rows for cell in cells]
        if not any(text_of(cell) for cell in all_cells):
            return None

        simple = not any(_is_merged(cell) for cell in all_cells) and not any(
            cell.find(CELL_BLOCK_TAGS) is not None for cell in all_cells
        )

        if simple:
            texts = [[self._cell_text(cell, base_url) for cell in cells] for cells in cell_rows]
            texts = [row + [""] * (column_count - len(row)) for row in texts]
        else:
            texts = [[text_of(cell) for cell in cells] for cells in cell_rows]
            logger.debug("Table has merged cells or block content; using JSON fallback")

        headers, body = texts[0], texts[1:]
        return Block(type=BlockType.TABLE, table=TableData(headers=headers, rows=body, simple=simple))

    def _cell_text(self, cell: Tag, base_url: str) -> str:
        return _single_line(self._inline.render(cell.decode_contents(), base_url))

    def _code(self, element: Tag) -> Optional[Block]:
        code_element = element.find("code") or element
        code = code_element.get_text().strip("\n").rstrip()
        if not code.strip():
            return None

        language = None
        if self._config.preserve_code_languages:
            language = _detect_language(code_element) or _detect_language(element)
        return Block(type=BlockType.CODE, code=code, language=language)

    def _quote(self, element: Tag, base_url: str) -> Optional[Block]:
        inner: list[Block] = []
        self._walk(element.children, base_url, inner)
        text = "\n\n".join(part for part in (render_block(block) for block in inner) if part.strip())
        if not text:
            return None
        return Block(type=BlockType.QUOTE, text=text)


# Rendering ------------------------------------------------------------------


def render_block(block: Block) -> str:
    """Render a single block to Markdown."""
    if block.type == BlockType.HEADING:
        return f"{'#' * (block.level or 1)} {block.text or ''}".rstrip()

    if block.type == BlockType.PARAGRAPH:
        return block.text or ""

    if block.type == BlockType.LIST:
        lines = []
        for number, item in enumerate(block.items or [], start=1):
            marker = f"{number}." if block.ordered else "-"
            lines.append(_indent_continuation(f"{marker} {item}", " " * (len(marker) + 1)))
        return "\n".join(lines)

    if block.type == BlockType.TABLE:
        return _render_table(block.table)

    if block.type == BlockType.CODE:
        code = block.code or ""
        fence = _fence_for(code)
        return f"{fence}{block.language or ''}\n{code}\n{fence}"

    if block.type == BlockType.QUOTE:
        return "\n".join(f"> {line}" if line else ">" for line in (block.text or "").split("\n"))

    return ""


def _render_table(table: Optional[TableData]) -> str:
    if table is None or (not table.headers and not table.rows):
        return ""

    if not table.simple:
        payload = json.dumps(table.to_dict(), indent=2, ensure_ascii=False)
        return f"```json\n{payload}\n```"

    def pipe_row(cells: list[str]) -> str:
        return "| " + " | ".join(cell.replace("|", "\\|") for cell in cells) + " |"

    lines = [pipe_row(table.headers), "| " + " | ".join("---" for _ in table.headers) + " |"]
    lines.extend(pipe_row(row) for row in table.rows)
    return "\n".join(lines)


def _fence_for(code: str) -> str:
    longest = max((len(run) for run in _BACKTICK_RUN.findall(code)), default=2)
    return "`" * max(3, longest + 1)


def _indent_continuation(text: str, indent: str) -> str:
    """Indent every line after the first."""
    first, *rest = text.split("\n")
    return "\n".join([first] + [indent + line if line else line for line in rest])


def _single_line(text: str) -> str:
    return normalize_space(text.replace("  \n", " ").replace("\n", " "))


def _is_merged(cell: Tag) -> bool:
    for attr in ("colspan", "rowspan"):
        value = cell.get(attr)
        if value is None:
            continue
        try:
            if int(str(value).strip() or "1") > 1:
                return True
        except ValueError:
            return True
    return False


def _detect_language(element: Tag) -> Optional[str]:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for name in classes:
        match = _LANGUAGE_CLASS.match(name)
        if match:
            return match.group(1)
    for attr in ("data-language", "data-lang"):
        value = element.get(attr)
        if value:
            return str(value).strip() or None
    return None
