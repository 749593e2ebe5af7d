"""Decide whether generic article extraction should be bypassed."""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag

from ..dom import class_id_string, depth_from, element_children, has_ancestor, link_density, text_length
from ..models.config import BypassConfig

logger = logging.getLogger(__name__)

ISLAND_TAGS = frozenset({"article", "section", "div", "main"})

STRUCTURED_TAGS = frozenset({"table", "pre"})

DOMINANT_CONTAINER_SELECTOR = 'article, main, [role="main"]'

PRODUCT_MICRODATA_SELECTOR = '[itemtype*="schema.org/Product"]'


@dataclass
class BypassDecision:
    """Outcome of the heuristic, with the signals that fired."""

    bypass: bool
    reasons: list[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons) if self.reasons else "no bypass signal"


class BypassHeuristic:
    """
    Read-only predictor of when the standard extractor is likely to fail.

    Any single signal is sufficient:
    - several substantive content islands with no close common ancestor
    - many tables / code blocks outside one dominant main container
    - technical or datasheet structural fingerprints

    Example:
        if BypassHeuristic().should_bypass(soup):
            ...  # score islands instead of trusting the article extractor
    """

    def __init__(self, config: Optional[BypassConfig] = None):
        self._config = config or BypassConfig()
        self._fingerprint = re.compile(self._config.fingerprint_pattern, re.IGNORECASE)

    def should_bypass(self, document: Union[BeautifulSoup, Tag]) -> bool:
        return self.decide(document).bypass

    def decide(self, document: Union[BeautifulSoup, Tag]) -> BypassDecision:
        """Evaluate every signal and report which ones fired."""
        body = self._body_of(document)
        if body is None:
            return BypassDecision(bypass=False)

        reasons = []
        for signal in (self._scattered_islands, self._structured_density, self._technical_fingerprint):
            reason = signal(body)
            if reason:
                reasons.append(reason)

        decision = BypassDecision(bypass=bool(reasons), reasons=reasons)
        logger.debug(f"Bypass decision: {decision.bypass} ({decision.reason})")
        return decision

    def _body_of(self, document: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
        if isinstance(document, BeautifulSoup):
            body = document.find("body")
            return body if isinstance(body, Tag) else None
        return document

    # Signal 1 -------------------------------------------------------------

    def _is_substantive(self, element: Tag) -> bool:
        length = text_length(element)
        if length < self._config.island_min_text:
            return False
        return link_density(element, length) <= self._config.island_max_link_density

    def _collect_islands(self, node: Tag, islands: list[Tag]) -> bool:
        """Collect the deepest substantive containers; True if any lie in node."""
        found_below = False
        for child in element_children(node):
            if self._collect_islands(child, islands):
                found_below = True
        if found_below:
            return True
        if node.name in ISLAND_TAGS and self._is_substantive(node):
            islands.append(node)
            return True
        return False

    def _scattered_islands(self, body: Tag) -> Optional[str]:
        islands: list[Tag] = []
        for child in element_children(body):
            self._collect_islands(child, islands)
        if len(islands) < 2:
            return None

        ancestor = _common_ancestor(islands, body)
        gap = max(depth_from(island, ancestor) for island in islands)
        if ancestor is body or gap > self._config.max_ancestor_gap:
            return f"{len(islands)} content islands without a close common ancestor"
        return None

    # Signal 2 -------------------------------------------------------------

    def _structured_density(self, body: Tag) -> Optional[str]:
        blocks = [
            element
            for element in body.find_all(list(STRUCTURED_TAGS))
            if not has_ancestor(element, STRUCTURED_TAGS, stop=body)
        ]
        total = len(blocks)
        if total < self._config.min_structured_blocks:
            return None

        best = 0
        for container in body.select(DOMINANT_CONTAINER_SELECTOR):
            inside = sum(1 for block in blocks if any(parent is container for parent in block.parents))
            best = max(best, inside)

        share = best / total
        if share < self._config.dominant_share:
            return f"{total} tables/code blocks, {share:.0%} inside a main container"
        return None

    # Signal 3 -------------------------------------------------------------

    def _technical_fingerprint(self, body: Tag) -> Optional[str]:
        if body.select_one(PRODUCT_MICRODATA_SELECTOR) is not None:
            return "schema.org Product microdata"

        for element in body.find_all(True):
            names = class_id_string(element)
            if not names or not self._fingerprint.search(names):
                continue
            if element.name in ("table", "dl") or element.find(["table", "dl"]) is not None:
                return f"datasheet fingerprint on <{element.name} {names!r}>"
        return None


def _common_ancestor(nodes: list[Tag], root: Tag) -> Tag:
    """Deepest element (at or below root) containing every node."""
    for candidate in nodes[0].parents:
        if candidate is root:
            break
        if all(any(p is candidate for p in node.parents) for node in nodes[1:]):
            return candidate
    return root
