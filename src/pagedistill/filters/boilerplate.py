"""Rule-driven boilerplate filtering on a BeautifulSoup tree."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from bs4 import Tag

from ..dom import has_ancestor, is_hidden
from ..models.config import FilterAction, FilterPass, FilterRule

logger = logging.getLogger(__name__)

# Allowed actions per pass
PASS_ACTIONS: dict[FilterPass, frozenset[FilterAction]] = {
    FilterPass.SAFE: frozenset({FilterAction.UNWRAP, FilterAction.STRIP_ATTRIBUTES}),
    FilterPass.AGGRESSIVE: frozenset(FilterAction),
}

PROTECTED_TAGS = frozenset({"pre", "code"})

EMPTY_CANDIDATE_TAGS = ["p", "div", "span", "section", "article", "li", "ul", "ol"]

# Descendants that make an element non-empty even without text
MEANINGFUL_EMPTY_TAGS = ["img", "picture", "video", "audio", "table", "pre", "code", "hr", "br", "svg", "canvas"]


@dataclass
class FilterReport:
    """Counts of what a filter pass changed."""

    removed: int = 0
    unwrapped: int = 0
    stripped: int = 0
    skipped_rules: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.removed + self.unwrapped + self.stripped


class BoilerplateFilter:
    """
    Applies an ordered list of filter rules to a DOM subtree in place.

    Each rule sees the mutations of the rules before it. Selectors that
    match nothing are a no-op; invalid selectors are logged and skipped.

    Example:
        report = BoilerplateFilter().apply(soup.body, SAFE_RULES, FilterPass.SAFE)
    """

    def apply(self, root: Tag, rules: Iterable[FilterRule], pass_: FilterPass) -> FilterReport:
        """
        Apply rules to root.

        Args:
            root: Subtree to mutate (never matched by its own rules)
            rules: Ordered rules
            pass_: Which pass this is; the safe pass rejects REMOVE rules

        Returns:
            FilterReport with per-action counts

        Raises:
            ValueError: If a rule's action is not allowed in this pass
        """
        rules = tuple(rules)
        allowed = PASS_ACTIONS[pass_]
        for rule in rules:
            if rule.action not in allowed:
                raise ValueError(f"{rule.action.value} rule not allowed in {pass_.value} pass: {rule.description!r}")

        report = FilterReport()
        for rule in rules:
            try:
                elements = root.select(rule.selector)
            except Exception as e:
                logger.warning(f"Failed to apply filter rule {rule.description!r}: {e}")
                report.skipped_rules.append(rule.description)
                continue

            for element in elements:
                self._apply_action(element, rule, report)

        logger.debug(
            f"{pass_.value} pass: removed={report.removed} unwrapped={report.unwrapped} "
            f"stripped={report.stripped}"
        )
        return report

    def _apply_action(self, element: Tag, rule: FilterRule, report: FilterReport) -> None:
        if rule.action == FilterAction.REMOVE:
            element.extract()
            report.removed += 1
        elif rule.action == FilterAction.UNWRAP:
            # Replace the element with its children, in order
            if element.parent is not None:
                element.unwrap()
                report.unwrapped += 1
        elif rule.action == FilterAction.STRIP_ATTRIBUTES:
            keep = set(rule.allowed_attributes or ())
            attrs_to_remove = [attr for attr in element.attrs if attr not in keep]
            for attr in attrs_to_remove:
                del element[attr]
            if attrs_to_remove:
                report.stripped += 1

    @staticmethod
    def remove_hidden_elements(root: Tag) -> int:
        """Remove hidden elements, except inside code blocks."""
        removed = 0
        for element in root.find_all(is_hidden):
            if element.name in PROTECTED_TAGS or has_ancestor(element, PROTECTED_TAGS, stop=root):
                continue
            element.extract()
            removed += 1
        return removed

    @staticmethod
    def cleanup_empty_elements(root: Tag) -> int:
        """Remove containers left with neither text nor media after filtering."""
        removed = 0
        # Innermost first so emptied parents are caught in the same sweep
        for element in reversed(root.find_all(EMPTY_CANDIDATE_TAGS)):
            if element.get_text(strip=True):
                continue
            if element.find(MEANINGFUL_EMPTY_TAGS) is not None:
                continue
            if has_ancestor(element, PROTECTED_TAGS, stop=root):
                continue
            element.extract()
            removed += 1
        return removed
