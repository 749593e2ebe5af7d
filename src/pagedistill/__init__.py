"""
pagedistill - Distill captured HTML pages into clean Markdown and structured blocks.

Usage:
    from pagedistill import Distiller, DistillConfig, ProfileName

    distiller = Distiller(DistillConfig(profile=ProfileName.GITHUB))
    result = distiller.run(html, "https://example.com/article", title="Article")

    print(result.pipeline_used)   # PipelineUsed.STANDARD or PipelineUsed.BYPASS
    print(result.markdown)
    for block in result.blocks:
        print(block.type, block.text)
"""

__version__ = "1.0.0"

from .conversion import ConversionResult, MarkdownConverter
from .errors import (
    DistillError,
    ExtractionEmpty,
    FailureReason,
    FatalParseError,
    PipelineCancelled,
    PipelineFailed,
)
from .extraction import ArticleExtractor, ExtractedArticle, StandardArticleExtractor
from .filters import AGGRESSIVE_RULES, SAFE_RULES, BoilerplateFilter
from .heuristics import BypassHeuristic
from .logging_config import setup_logging
from .models import (
    Block,
    BlockType,
    BypassConfig,
    ChunkingConfig,
    ConversionConfig,
    DistillConfig,
    FilterAction,
    FilterConfig,
    FilterPass,
    FilterRule,
    PipelineResult,
    PipelineStats,
    PipelineUsed,
    PostProcessConfig,
    ProfileName,
    ScoringConfig,
    Stage,
    TableData,
    TraceEvent,
)
from .pipeline import CancellationToken, Distiller
from .postprocess import PostProcessor
from .sanitize import HtmlSanitizer, Sanitizer
from .scoring import QualityAssessor, ScoringEngine

__all__ = [
    "__version__",
    # Core
    "Distiller",
    "CancellationToken",
    # Components
    "BoilerplateFilter",
    "BypassHeuristic",
    "ScoringEngine",
    "QualityAssessor",
    "MarkdownConverter",
    "ConversionResult",
    "PostProcessor",
    "HtmlSanitizer",
    "Sanitizer",
    "ArticleExtractor",
    "ExtractedArticle",
    "StandardArticleExtractor",
    "SAFE_RULES",
    "AGGRESSIVE_RULES",
    # Config
    "DistillConfig",
    "ProfileName",
    "FilterConfig",
    "FilterRule",
    "FilterAction",
    "FilterPass",
    "BypassConfig",
    "ScoringConfig",
    "ConversionConfig",
    "PostProcessConfig",
    "ChunkingConfig",
    # Results and events
    "Block",
    "BlockType",
    "TableData",
    "PipelineResult",
    "PipelineStats",
    "PipelineUsed",
    "Stage",
    "TraceEvent",
    # Errors
    "DistillError",
    "FailureReason",
    "FatalParseError",
    "ExtractionEmpty",
    "PipelineCancelled",
    "PipelineFailed",
    # Logging
    "setup_logging",
]
