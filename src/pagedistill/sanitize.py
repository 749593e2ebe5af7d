"""HTML sanitization before any filtering or scoring."""

import logging
from typing import Protocol

from bs4 import BeautifulSoup, Comment, Tag

logger = logging.getLogger(__name__)

# Elements dropped entirely, content included
DANGEROUS_TAGS = (
    "script",
    "style",
    "noscript",
    "iframe",
    "frame",
    "frameset",
    "object",
    "embed",
    "applet",
    "template",
    "link",
    "base",
)

URL_ATTRIBUTES = ("href", "src", "action", "formaction", "xlink:href")

UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:text/html")


class Sanitizer(Protocol):
    """
    Protocol for HTML sanitizers.

    The pipeline trusts the output without re-verification.
    """

    def sanitize(self, html: str) -> str:
        """
        Strip scripts, styles and dangerous attributes.

        Args:
            html: Raw HTML string

        Returns:
            Clean HTML string
        """
        ...


class HtmlSanitizer:
    """
    Default sanitizer built on BeautifulSoup.

    Removes executable and styling elements, comments, inline event
    handlers and script URLs. Structure and text are otherwise untouched.

    Example:
        clean = HtmlSanitizer().sanitize("<p onclick='x()'>Hi</p><script>x()</script>")
        # '<p>Hi</p>'
    """

    def __init__(self, drop_tags: tuple[str, ...] = DANGEROUS_TAGS):
        self._drop_tags = drop_tags

    def sanitize(self, html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")

        for element in soup.find_all(list(self._drop_tags)):
            element.decompose()

        # Refresh and cookie directives; author and description metadata stay
        for element in soup.find_all("meta", attrs={"http-equiv": True}):
            element.decompose()

        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        removed = 0
        for tag in soup.find_all(True):
            removed += self._clean_attributes(tag)

        if removed:
            logger.debug(f"Sanitizer removed {removed} unsafe attributes")
        return str(soup)

    def _clean_attributes(self, tag: Tag) -> int:
        # Get list of attrs to remove (can't modify during iteration)
        unsafe = [attr for attr in tag.attrs if attr.lower().startswith("on")]
        for attr in URL_ATTRIBUTES:
            value = tag.get(attr)
            if isinstance(value, str) and value.strip().lower().startswith(UNSAFE_SCHEMES):
                unsafe.append(attr)
        for attr in unsafe:
            del tag[attr]
        return len(unsafe)
