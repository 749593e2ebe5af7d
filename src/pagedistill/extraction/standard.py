"""Standard-path article extraction (readability-style, selector driven)."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from bs4 import BeautifulSoup, Tag

from ..dom import clone, normalize_space, text_length, text_of

logger = logging.getLogger(__name__)

# Elements that typically contain main content
CONTENT_SELECTORS = [
    "article",
    "main",
    '[role="main"]',
    '[role="article"]',
    ".content",
    ".main-content",
    ".post-content",
    ".article-content",
    ".entry-content",
    ".documentation",
    ".docs-content",
    "#content",
    "#main-content",
    "#documentation",
]

# Elements to remove (navigation, ads, etc.)
REMOVE_SELECTORS = [
    "nav",
    "header:not(article header)",
    "footer",
    "aside",
    ".nav",
    ".navbar",
    ".sidebar",
    ".footer",
    ".menu",
    ".toc",
    ".table-of-contents",
    ".advertisement",
    ".ads",
    ".social-share",
    ".comments",
    ".related",
    ".related-posts",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
    '[aria-hidden="true"]',
    "form",
]

BYLINE_SELECTORS = [
    '[rel="author"]',
    '[itemprop="author"]',
    ".byline",
    ".author",
]


@dataclass
class ExtractedArticle:
    """Result of a successful article extraction."""

    content: str
    title: Optional[str] = None
    byline: Optional[str] = None


class ArticleExtractor(Protocol):
    """
    Protocol for generic article extractors (the standard path).

    Implementations must not mutate the document they receive. Returning
    None sends the pipeline to the bypass path's scoring logic.
    """

    def extract(self, document: BeautifulSoup, url: str) -> Optional[ExtractedArticle]:
        """
        Extract the main article from a document.

        Args:
            document: Sanitized, safe-filtered document
            url: Source URL

        Returns:
            ExtractedArticle with HTML content, or None if nothing was found
        """
        ...


class StandardArticleExtractor:
    """
    Extracts main content from HTML documents.

    Uses semantic selectors to find the main content area and removes
    navigation, ads, and other non-content elements from a copy of it.

    Example:
        extractor = StandardArticleExtractor()
        article = extractor.extract(soup, "https://docs.example.com/page")
    """

    def __init__(
        self,
        content_selectors: Optional[list[str]] = None,
        remove_selectors: Optional[list[str]] = None,
        min_text_length: int = 100,
    ):
        """
        Initialize the article extractor.

        Args:
            content_selectors: CSS selectors for main content (overrides defaults)
            remove_selectors: CSS selectors for elements to remove (extends defaults)
            min_text_length: Preferred minimum text for a selector match
        """
        self._content_selectors = content_selectors or CONTENT_SELECTORS
        self._remove_selectors = list(REMOVE_SELECTORS)
        if remove_selectors:
            self._remove_selectors.extend(remove_selectors)
        self._min_text_length = min_text_length

    def _find_main_content(self, document: BeautifulSoup) -> Optional[Tag]:
        """Find the main content element using selectors."""
        for selector in self._content_selectors:
            element = document.select_one(selector)
            if element and text_length(element) > self._min_text_length:
                return element

        # Short pages: accept the first semantic match with any text
        for selector in self._content_selectors:
            element = document.select_one(selector)
            if element and text_length(element) > 0:
                return element

        body = document.find("body")
        if isinstance(body, Tag):
            return body
        return None

    def _remove_unwanted(self, element: Tag) -> None:
        """Remove navigation, ads, and other unwanted elements."""
        for selector in self._remove_selectors:
            for el in element.select(selector):
                el.extract()

    def _find_title(self, document: BeautifulSoup, content: Tag) -> Optional[str]:
        heading = content.find("h1")
        if isinstance(heading, Tag) and text_of(heading):
            return text_of(heading)
        title = document.find("title")
        if isinstance(title, Tag) and text_of(title):
            return text_of(title)
        return None

    def _find_byline(self, document: BeautifulSoup) -> Optional[str]:
        meta = document.find("meta", attrs={"name": "author"})
        if isinstance(meta, Tag) and meta.get("content"):
            return normalize_space(str(meta["content"]))
        for selector in BYLINE_SELECTORS:
            element = document.select_one(selector)
            if element is not None and text_of(element):
                return text_of(element)
        return None

    def extract(self, document: BeautifulSoup, url: str) -> Optional[ExtractedArticle]:
        """
        Extract main content from a document.

        Args:
            document: Parsed document (left untouched)
            url: Source URL

        Returns:
            ExtractedArticle, or None if no text survives cleanup
        """
        main_content = self._find_main_content(document)
        if main_content is None:
            logger.warning(f"Could not find main content for {url}")
            return None

        # Make a copy to avoid modifying the document
        content = clone(main_content)
        self._remove_unwanted(content)

        if not text_of(content):
            return None

        return ExtractedArticle(
            content=content.decode_contents() if content.name == "body" else str(content),
            title=self._find_title(document, content),
            byline=self._find_byline(document),
        )
