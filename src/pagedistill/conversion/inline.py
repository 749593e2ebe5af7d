"""Inline HTML to Markdown rendering (bold, italic, links, images, code spans)."""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

import html2text
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_MARKDOWN_LINK = re.compile(r"(!?)\[([^\]]*)\]\(([^)\s]+)\)")
_BLANK_LINES = re.compile(r"\n{3,}")


class InlineRenderer:
    """
    Renders inline HTML fragments to Markdown using html2text.

    Block structure is handled by MarkdownConverter; this class only turns
    the inline content of one block into Markdown text.

    Example:
        renderer = InlineRenderer()
        text = renderer.render('<b>Hi</b> <a href="/x">there</a>', "https://example.com/")
        # '**Hi** [there](https://example.com/x)'
    """

    def __init__(
        self,
        body_width: int = 0,
        ignore_images: bool = False,
        unicode_snob: bool = True,
        escape_snob: bool = False,
    ):
        """
        Initialize the inline renderer.

        Args:
            body_width: Max line width (0 = no wrapping)
            ignore_images: Skip image conversion
            unicode_snob: Use Unicode chars where possible
            escape_snob: Escape every special Markdown char
        """
        self._body_width = body_width
        self._ignore_images = ignore_images
        self._unicode_snob = unicode_snob
        self._escape_snob = escape_snob

    def _new_converter(self, base_url: str) -> html2text.HTML2Text:
        # html2text keeps parser state per instance, so each render gets its own
        converter = html2text.HTML2Text(baseurl=base_url)

        # Line width (0 = no wrapping for consistent output)
        converter.body_width = self._body_width

        # Link handling
        converter.inline_links = True
        converter.wrap_links = False
        converter.protect_links = False

        # Content handling
        converter.ignore_images = self._ignore_images
        converter.unicode_snob = self._unicode_snob
        converter.escape_snob = self._escape_snob
        converter.mark_code = False
        converter.emphasis_mark = "*"
        converter.strong_mark = "**"
        converter.default_image_alt = ""
        converter.single_line_break = False
        return converter

    def _clean_output(self, markdown: str) -> str:
        """Clean up the converted Markdown."""
        markdown = _BLANK_LINES.sub("\n\n", markdown)
        # Remove trailing whitespace on each line, keeping hard breaks
        lines = []
        for line in markdown.split("\n"):
            stripped = line.rstrip()
            lines.append(stripped + "  " if line.endswith("  ") and stripped else stripped)
        return "\n".join(lines).strip()

    def _fix_relative_links(self, markdown: str, base_url: str) -> str:
        """Ensure all links and images are absolute."""

        def replace_link(match: re.Match[str]) -> str:
            bang, text, url = match.group(1), match.group(2), match.group(3)

            # Skip anchors and already absolute URLs
            if url.startswith(("#", "http://", "https://", "mailto:", "tel:", "data:")):
                result: str = match.group(0)
                return result

            return f"{bang}[{text}]({urljoin(base_url, url)})"

        return _MARKDOWN_LINK.sub(replace_link, markdown)

    def render(self, html: str, base_url: str) -> str:
        """
        Render inline HTML to Markdown.

        Args:
            html: Inline HTML content string
            base_url: URL for resolving relative links and images

        Returns:
            Markdown text without surrounding blank lines
        """
        if not html.strip():
            return ""
        try:
            markdown = self._new_converter(base_url).handle(html)
            markdown = self._clean_output(markdown)
            if base_url:
                markdown = self._fix_relative_links(markdown, base_url)
            return markdown

        except Exception as e:
            logger.error(f"Failed to render inline HTML to Markdown: {e}")
            # Return plain text as fallback
            soup = BeautifulSoup(html, "html.parser")
            text: str = soup.get_text(separator=" ")
            return " ".join(text.split())
