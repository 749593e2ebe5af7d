"""Quality scoring (0-100) of an extracted fragment."""

from dataclasses import dataclass
from typing import Optional

from bs4 import Tag

from ..dom import link_density, text_length

SEMANTIC_SELECTOR = 'article, main, section, [role="main"], [role="article"]'


@dataclass
class QualityMetrics:
    """Raw measurements behind a quality score."""

    character_count: int = 0
    paragraph_count: int = 0
    link_density: float = 0.0
    heading_count: int = 0
    signal_to_noise: float = 0.0
    structure_score: float = 0.0


class QualityAssessor:
    """
    Rates how much an extracted fragment looks like real content.

    The score is a bounded sum of character count, paragraph count, link
    density, text-to-markup ratio and semantic structure points.
    """

    def measure(self, element: Optional[Tag]) -> QualityMetrics:
        if element is None:
            return QualityMetrics()

        characters = text_length(element)
        headings = len(element.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]))
        markup_length = len(element.decode_contents())
        semantic = len(element.select(SEMANTIC_SELECTOR))

        return QualityMetrics(
            character_count=characters,
            paragraph_count=len(element.find_all("p")),
            link_density=link_density(element, characters),
            heading_count=headings,
            signal_to_noise=characters / markup_length if markup_length else 0.0,
            structure_score=min(100.0, semantic * 20 + headings * 5),
        )

    def score(self, element: Optional[Tag]) -> int:
        """Overall quality score in [0, 100]."""
        return self.score_metrics(self.measure(element))

    @staticmethod
    def score_metrics(metrics: QualityMetrics) -> int:
        score = 0.0

        # Character count (0-30)
        if metrics.character_count >= 5000:
            score += 30
        elif metrics.character_count >= 1000:
            score += 25
        elif metrics.character_count >= 300:
            score += 15

        # Paragraph count (0-20)
        if metrics.paragraph_count >= 5:
            score += 20
        elif metrics.paragraph_count >= 3:
            score += 15
        elif metrics.paragraph_count >= 1:
            score += 10

        # Link density (0-20), only meaningful when there is text
        if metrics.character_count > 0:
            if metrics.link_density < 0.1:
                score += 20
            elif metrics.link_density < 0.2:
                score += 15
            elif metrics.link_density < 0.4:
                score += 10
            elif metrics.link_density < 0.6:
                score += 5

        # Signal-to-noise (0-15)
        if metrics.signal_to_noise > 0.5:
            score += 15
        elif metrics.signal_to_noise > 0.3:
            score += 10
        elif metrics.signal_to_noise > 0.1:
            score += 5

        # Structure (0-15)
        score += min(15.0, metrics.structure_score / 10)

        return int(round(min(100.0, max(0.0, score))))
