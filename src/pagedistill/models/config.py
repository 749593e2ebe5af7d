"""Pydantic configuration models for pagedistill."""

from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ProfileName(str, Enum):
    """Built-in platform profiles for the final Markdown polish."""

    DEFAULT = "default"
    GITHUB = "github"
    OBSIDIAN = "obsidian"
    CUSTOM = "custom"


class FilterAction(str, Enum):
    """What a filter rule does to the elements its selector matches."""

    REMOVE = "remove"
    UNWRAP = "unwrap"
    STRIP_ATTRIBUTES = "strip_attributes"


class FilterPass(str, Enum):
    """The two boilerplate filter passes."""

    SAFE = "safe"
    AGGRESSIVE = "aggressive"


class FilterRule(BaseModel):
    """A single CSS-selector driven DOM rule."""

    description: str
    selector: str
    action: FilterAction
    allowed_attributes: Optional[tuple[str, ...]] = Field(
        None,
        description="Attributes kept by STRIP_ATTRIBUTES (None keeps none)",
    )

    model_config = {"extra": "forbid", "frozen": True}


def _default_safe_rules() -> tuple[FilterRule, ...]:
    from ..filters.rules import SAFE_RULES

    return SAFE_RULES


def _default_aggressive_rules() -> tuple[FilterRule, ...]:
    from ..filters.rules import AGGRESSIVE_RULES

    return AGGRESSIVE_RULES


class FilterConfig(BaseModel):
    """Ordered rule lists for both boilerplate filter passes."""

    safe_rules: tuple[FilterRule, ...] = Field(
        default_factory=_default_safe_rules,
        description="Pass 1 rules (UNWRAP / STRIP_ATTRIBUTES only)",
    )
    aggressive_rules: tuple[FilterRule, ...] = Field(
        default_factory=_default_aggressive_rules,
        description="Pass 2 rules, bypass path only",
    )
    mode: Literal["general", "code_docs"] = Field(
        "general",
        description="code_docs runs the conservative CODE_DOCS_RULES in pass 2 instead of aggressive_rules",
    )
    remove_hidden: bool = Field(True, description="Drop hidden elements during the aggressive pass")
    remove_empty: bool = Field(True, description="Drop empty containers after the aggressive pass")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("safe_rules")
    @classmethod
    def _safe_rules_never_remove(cls, rules: tuple[FilterRule, ...]) -> tuple[FilterRule, ...]:
        for rule in rules:
            if rule.action == FilterAction.REMOVE:
                raise ValueError(f"Safe pass rule may not REMOVE: {rule.description!r}")
        return rules

    def pass_two_rules(self) -> tuple[FilterRule, ...]:
        """Rules for the aggressive pass under the current mode."""
        if self.mode == "code_docs":
            from ..filters.rules import CODE_DOCS_RULES

            return CODE_DOCS_RULES
        return self.aggressive_rules


class BypassConfig(BaseModel):
    """Thresholds for the standard-vs-bypass decision."""

    island_min_text: int = Field(200, ge=1, description="Text length for an island to count as substantive")
    island_max_link_density: float = Field(0.5, ge=0, le=1)
    max_ancestor_gap: int = Field(3, ge=1, description="Max steps from an island up to the shared ancestor")
    min_structured_blocks: int = Field(3, ge=1, description="Tables + code blocks needed for the density signal")
    dominant_share: float = Field(
        0.6,
        ge=0,
        le=1,
        description="Share of tables/code a single main container must hold",
    )
    fingerprint_pattern: str = Field(
        r"(?:^|[\s_-])(datasheet|spec|specs|specification|specifications|tech-specs|techspecs|"
        r"product-specs|parameters|dimensions)(?:$|[\s_-])",
        description="Regex matched against class/id of table-bearing elements",
    )

    model_config = {"extra": "forbid", "frozen": True}


class ScoringConfig(BaseModel):
    """Every weight and threshold used by the scoring engine."""

    # Candidate enumeration
    candidate_tags: tuple[str, ...] = ("article", "main", "section", "div", "td")
    max_candidate_depth: int = Field(8, ge=1)
    min_candidate_text: int = Field(25, ge=1)
    min_viable_score: float = 5.0

    # Island score
    text_weight: float = 40.0
    text_cap: int = Field(1500, ge=1, description="Length beyond which text gains are logarithmic")
    overflow_weight: float = 8.0
    link_density_weight: float = 60.0
    table_bonus: float = 15.0
    code_bonus: float = 15.0
    positive_term_bonus: float = 10.0
    boilerplate_term_penalty: float = 35.0
    depth_penalty: float = 1.5
    tag_weights: dict[str, float] = Field(
        default_factory=lambda: {
            "article": 12.0,
            "main": 12.0,
            "section": 4.0,
            "div": 2.0,
            "td": -4.0,
        }
    )
    positive_pattern: str = (
        r"content|article|body|main|story|post|entry|product|detail|overview|spec|datasheet|doc"
    )
    boilerplate_pattern: str = (
        r"(?:^|[\s_-])(sidebar|side-bar|related|promo|promotions?|sponsor|sponsored|advert\w*|ads?|"
        r"banner|nav|navbar|navigation|menu|footer|breadcrumbs?|social|share|sharing|comments?|"
        r"widget|popup|newsletter|subscribe|cookie|recommended)(?=$|[\s_-])"
    )

    # Pruning
    prune_max_depth: int = Field(6, ge=1)
    prune_threshold: float = 0.0
    prune_base_score: float = 10.0
    prune_link_weight: float = 25.0
    prune_boilerplate_penalty: float = 30.0
    prune_content_bonus: float = 10.0
    prune_text_bonus: float = 5.0
    prune_text_cap: int = Field(400, ge=1)
    prunable_tags: tuple[str, ...] = (
        "div",
        "section",
        "aside",
        "nav",
        "ul",
        "ol",
        "form",
        "header",
        "footer",
        "figure",
    )

    model_config = {"extra": "forbid", "frozen": True}


class ConversionConfig(BaseModel):
    """Markdown converter settings."""

    max_heading_level: int = Field(3, ge=1, le=6)
    preserve_code_languages: bool = True
    include_images: bool = True

    model_config = {"extra": "forbid", "frozen": True}


class PostProcessConfig(BaseModel):
    """Final polish applied to the converted blocks."""

    platform: Literal["default", "github", "obsidian"] = "default"
    table_of_contents: bool = Field(False, description="Insert a heading-derived table of contents")
    toc_min_headings: int = Field(2, ge=1)
    toc_title: str = "Table of Contents"
    normalize_headings: bool = True
    remove_non_printable: bool = True

    model_config = {"extra": "forbid", "frozen": True}


class ChunkingConfig(BaseModel):
    """Limits for splitting oversized fragments before conversion."""

    max_document_size: int = Field(1_000_000, ge=1, description="Serialized size that triggers chunking")
    chunk_size: int = Field(100_000, ge=1, description="Target serialized size per chunk")

    model_config = {"extra": "forbid", "frozen": True}


class DistillConfig(BaseModel):
    """
    Root configuration model for pagedistill.

    Example:
        config = DistillConfig(
            profile=ProfileName.GITHUB,
            scoring=ScoringConfig(prune_threshold=-5.0),
        )

    YAML format:
        profile: github
        scoring:
          text_cap: 2000
        postprocess:
          table_of_contents: true
    """

    profile: ProfileName = Field(ProfileName.CUSTOM, description="Platform profile to apply")

    filters: FilterConfig = Field(default_factory=FilterConfig)
    bypass: BypassConfig = Field(default_factory=BypassConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    postprocess: PostProcessConfig = Field(default_factory=PostProcessConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)

    min_extracted_text: int = Field(
        20,
        ge=0,
        description="Below this many characters an extraction counts as empty",
    )
    min_quality_score: int = Field(
        0,
        ge=0,
        le=100,
        description="Standard extractions scoring below this hand over to the bypass path",
    )
    timeout_seconds: Optional[float] = Field(
        None,
        gt=0,
        description="Deadline checked between stages (None = no deadline)",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Logging level")
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "DistillConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_file(cls, path: Path) -> "DistillConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
