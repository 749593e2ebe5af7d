"""
Content island scoring and pruning for the bypass path.

Every weight and threshold comes from a ScoringConfig so the heuristics can
be tuned and tested independently of the control flow.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup, Tag

from ..dom import class_id_string, depth_from, element_children, link_density, text_length
from ..models.config import ScoringConfig

logger = logging.getLogger(__name__)

# Atomic content: never descended into or removed while pruning
PROTECTED_TAGS = frozenset({"pre", "code", "table", "thead", "tbody", "tfoot", "tr", "td", "th"})

CODE_TAGS = ["pre", "code"]


@dataclass
class ContentIsland:
    """A scored candidate for the main content root."""

    element: Tag
    order: int
    text_length: int
    link_density: float
    tag_weight: float
    has_table: bool
    has_code: bool
    depth: int
    score: float = 0.0

    @property
    def label(self) -> str:
        names = class_id_string(self.element)
        return f"<{self.element.name}{' ' + names if names else ''}>"


class ScoringEngine:
    """
    Scores candidate content islands, picks a winner, and prunes it.

    Example:
        engine = ScoringEngine(ScoringConfig())
        winner = engine.select_winner(soup.body)
        engine.prune_node(winner)
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self._config = config or ScoringConfig()
        self._positive = re.compile(self._config.positive_pattern, re.IGNORECASE)
        self._boilerplate = re.compile(self._config.boilerplate_pattern, re.IGNORECASE)

    @property
    def config(self) -> ScoringConfig:
        return self._config

    # Island selection -----------------------------------------------------

    def candidates(self, root: Tag) -> list[ContentIsland]:
        """Enumerate shallow, text-bearing candidate islands in document order."""
        cfg = self._config
        islands = []
        for order, element in enumerate(root.find_all(list(cfg.candidate_tags))):
            depth = depth_from(element, root)
            if depth > cfg.max_candidate_depth:
                continue
            length = text_length(element)
            if length < cfg.min_candidate_text:
                continue
            islands.append(
                ContentIsland(
                    element=element,
                    order=order,
                    text_length=length,
                    link_density=link_density(element, length),
                    tag_weight=cfg.tag_weights.get(element.name, 0.0),
                    has_table=element.find("table") is not None,
                    has_code=element.find(CODE_TAGS) is not None,
                    depth=depth,
                )
            )
        return islands

    def score_island(self, island: ContentIsland) -> float:
        """Weighted sum of the island's metrics."""
        cfg = self._config
        score = self._text_score(island.text_length)
        score -= cfg.link_density_weight * island.link_density
        score += island.tag_weight
        if island.has_table:
            score += cfg.table_bonus
        if island.has_code:
            score += cfg.code_bonus

        names = class_id_string(island.element)
        if names:
            if self._boilerplate.search(names):
                score -= cfg.boilerplate_term_penalty
            if self._positive.search(names):
                score += cfg.positive_term_bonus

        score -= cfg.depth_penalty * island.depth
        return score

    def _text_score(self, length: int) -> float:
        """Linear up to the cap, logarithmic past it."""
        cfg = self._config
        if length <= cfg.text_cap:
            return cfg.text_weight * length / cfg.text_cap
        return cfg.text_weight + cfg.overflow_weight * math.log(length / cfg.text_cap)

    def rank(self, root: Tag) -> list[ContentIsland]:
        """All scored islands, best first; ties keep document order."""
        islands = self.candidates(root)
        for island in islands:
            island.score = self.score_island(island)
        return sorted(islands, key=lambda island: (-island.score, island.order))

    def select_winner(self, root: Tag) -> Tag:
        """
        Pick the highest-scoring island under root.

        Ties go to the island earlier in document order. Falls back to the
        document body when no island reaches the viability threshold.
        """
        best: Optional[ContentIsland] = None
        for island in self.candidates(root):
            island.score = self.score_island(island)
            if best is None or island.score > best.score:
                best = island

        if best is None or best.score < self._config.min_viable_score:
            logger.debug(
                f"No viable island (best={best.score if best else None}); falling back to body"
            )
            return self._body_of(root)

        logger.debug(f"Winner {best.label} score={best.score:.2f} text={best.text_length}")
        return best.element

    def _body_of(self, root: Tag) -> Tag:
        if isinstance(root, BeautifulSoup):
            body = root.find("body")
            if isinstance(body, Tag):
                return body
        if root.name == "body":
            return root
        body = root.find_parent("body")
        return body if isinstance(body, Tag) else root

    # Pruning --------------------------------------------------------------

    def score_subcandidate(self, element: Tag) -> float:
        """Reduced heuristic weighted toward link density and blocklist terms."""
        cfg = self._config
        length = text_length(element)
        score = cfg.prune_base_score
        score += cfg.prune_text_bonus * min(1.0, length / cfg.prune_text_cap)
        score -= cfg.prune_link_weight * link_density(element, length)

        names = class_id_string(element)
        if names and self._boilerplate.search(names):
            score -= cfg.prune_boilerplate_penalty
        if element.find(["table", "pre", "code"]) is not None:
            score += cfg.prune_content_bonus
        if length == 0 and element.find(["img", "picture", "figure", "video"]) is None:
            # Nothing left to read
            score = min(score, cfg.prune_threshold - 1)
        return score

    def prune_node(self, winner: Tag) -> Tag:
        """
        Remove low-scoring nested boilerplate from the winner, in place.

        Children are pruned before their parent is scored, so a second call
        on the result finds nothing to remove.

        Returns:
            The same winner element
        """
        removed = self._prune_children(winner, depth=1)
        if removed:
            logger.debug(f"Pruned {removed} subtrees from <{winner.name}>")
        return winner

    def _prune_children(self, parent: Tag, depth: int) -> int:
        cfg = self._config
        removed = 0
        for child in element_children(parent):
            if child.name in PROTECTED_TAGS:
                continue
            if depth < cfg.prune_max_depth:
                removed += self._prune_children(child, depth + 1)
            if child.name not in cfg.prunable_tags:
                continue
            score = self.score_subcandidate(child)
            if score < cfg.prune_threshold:
                logger.debug(f"Pruning <{child.name} {class_id_string(child)!r}> score={score:.2f}")
                child.extract()
                removed += 1
        return removed
