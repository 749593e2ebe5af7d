"""DOM parsing and read-only metrics on BeautifulSoup trees."""

import copy
import logging
import re
from collections.abc import Iterator
from typing import Optional, Union

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from .errors import FatalParseError

logger = logging.getLogger(__name__)

# Elements whose text never reaches the reader
INVISIBLE_TAGS = frozenset({"script", "style", "template", "noscript", "head", "title", "meta", "link"})

# Block-level elements (used to decide whether content is inline)
BLOCK_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "details",
        "dialog",
        "dd",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    }
)

_WHITESPACE = re.compile(r"\s+")
_DISPLAY_NONE = re.compile(r"display\s*:\s*none", re.IGNORECASE)
_CHARSET = re.compile(r'charset=["\']?([^"\'\s>;]+)', re.IGNORECASE)

HtmlInput = Union[str, bytes, BeautifulSoup]


def _detect_encoding(html: bytes) -> str:
    """Detect character encoding from a meta charset declaration."""
    head = html[:2048].decode("latin-1", errors="ignore")
    charset_match = _CHARSET.search(head)
    if charset_match:
        return charset_match.group(1).strip()
    return "utf-8"


def decode_input(html: HtmlInput) -> str:
    """
    Serialize caller input to HTML text without touching the caller's tree.

    Raises:
        FatalParseError: If the input is not HTML text or is empty
    """
    if isinstance(html, BeautifulSoup):
        text = str(html)
    elif isinstance(html, (bytes, bytearray)):
        encoding = _detect_encoding(bytes(html))
        try:
            text = bytes(html).decode(encoding, errors="replace")
        except LookupError:
            text = bytes(html).decode("utf-8", errors="replace")
    elif isinstance(html, str):
        text = html
    else:
        raise FatalParseError(f"Cannot parse input of type {type(html).__name__}")

    if not text.strip():
        raise FatalParseError("Empty document")
    return text


def parse_document(html: HtmlInput) -> BeautifulSoup:
    """
    Parse input into a BeautifulSoup document the caller does not own.

    Strings and bytes are parsed fresh; an existing BeautifulSoup tree is
    deep-copied so later mutations never reach the caller's tree.

    Raises:
        FatalParseError: If the input is not HTML text or is empty
    """
    if isinstance(html, BeautifulSoup):
        soup = copy.copy(html)
    elif isinstance(html, (bytes, bytearray)):
        encoding = _detect_encoding(bytes(html))
        try:
            text = bytes(html).decode(encoding, errors="replace")
        except LookupError:
            text = bytes(html).decode("utf-8", errors="replace")
        soup = _parse_text(text)
    elif isinstance(html, str):
        soup = _parse_text(html)
    else:
        raise FatalParseError(f"Cannot parse input of type {type(html).__name__}")

    ensure_body(soup)
    return soup


def _parse_text(text: str) -> BeautifulSoup:
    if not text.strip():
        raise FatalParseError("Empty document")
    try:
        return BeautifulSoup(text, "html.parser")
    except Exception as e:
        raise FatalParseError(f"HTML parser failed: {e}") from e


def ensure_body(soup: BeautifulSoup) -> Tag:
    """Return the document body, creating one around loose content if missing."""
    body = soup.find("body")
    if isinstance(body, Tag):
        return body

    body = soup.new_tag("body")
    html_tag = soup.find("html")
    container = html_tag if isinstance(html_tag, Tag) else soup
    for node in list(container.contents):
        if isinstance(node, Tag) and node.name == "head":
            continue
        if isinstance(node, (Doctype, Declaration, ProcessingInstruction)):
            continue
        body.append(node.extract())
    container.append(body)
    return body


def clone(tag: Tag) -> Tag:
    """Deep copy a subtree, detached from its document."""
    return copy.copy(tag)


def normalize_space(text: str) -> str:
    """Collapse whitespace runs into single spaces."""
    return _WHITESPACE.sub(" ", text).strip()


def text_of(tag: Tag) -> str:
    """Whitespace-normalised text content of a subtree."""
    return normalize_space(tag.get_text(" "))


def text_length(tag: Tag) -> int:
    return len(text_of(tag))


def link_text_length(tag: Tag) -> int:
    """Total text length inside links (outermost anchors only)."""
    total = 0
    for anchor in tag.find_all("a"):
        if anchor.find_parent("a") is not None:
            continue
        total += len(text_of(anchor))
    return total


def link_density(tag: Tag, total: Optional[int] = None) -> float:
    """Link text divided by total text, in [0, 1]."""
    if total is None:
        total = text_length(tag)
    if total <= 0:
        return 0.0
    return min(1.0, link_text_length(tag) / total)


def class_id_string(tag: Tag) -> str:
    """Lower-cased class names and id joined by spaces."""
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    parts = list(classes)
    element_id = tag.get("id")
    if element_id:
        parts.append(str(element_id))
    return " ".join(parts).lower()


def is_hidden(tag: Tag) -> bool:
    """True if the element is hidden through attributes or inline style."""
    if tag.has_attr("hidden"):
        return True
    if str(tag.get("aria-hidden", "")).lower() == "true":
        return True
    style = tag.get("style")
    return bool(style and _DISPLAY_NONE.search(str(style)))


def iter_visible_strings(root: Tag) -> Iterator[NavigableString]:
    """Yield text nodes a reader would see, skipping hidden subtrees."""
    for node in root.descendants:
        if not isinstance(node, NavigableString) or isinstance(node, Comment):
            continue
        if isinstance(node, (Doctype, Declaration, ProcessingInstruction)):
            continue
        hidden = False
        for parent in node.parents:
            if parent is root.parent:
                break
            if parent.name in INVISIBLE_TAGS or is_hidden(parent):
                hidden = True
                break
        if not hidden:
            yield node


def visible_text_length(root: Tag) -> int:
    """Length of the whitespace-normalised visible text of a subtree."""
    return len(normalize_space(" ".join(str(s) for s in iter_visible_strings(root))))


def depth_from(tag: Tag, root: Tag) -> int:
    """Number of steps from root down to tag (0 if tag is root)."""
    depth = 0
    node = tag
    while node is not None and node is not root:
        node = node.parent
        depth += 1
    return depth


def has_ancestor(tag: Tag, names: frozenset, stop: Optional[Tag] = None) -> bool:
    """True if any ancestor of tag (below stop) has one of the given names."""
    for parent in tag.parents:
        if parent is stop:
            return False
        if parent.name in names:
            return True
    return False


def element_children(tag: Tag) -> list[Tag]:
    return [child for child in tag.children if isinstance(child, Tag)]
