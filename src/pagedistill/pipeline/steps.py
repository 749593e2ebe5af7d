"""Pipeline steps, one per state of the distillation state machine."""

import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag

from ..conversion.chunking import needs_chunking, split_into_chunks
from ..conversion.markdown import MarkdownConverter
from ..dom import clone, decode_input, ensure_body, parse_document, text_length, text_of
from ..errors import ExtractionEmpty
from ..extraction.standard import ArticleExtractor
from ..filters.boilerplate import BoilerplateFilter
from ..heuristics.bypass import BypassHeuristic
from ..models.blocks import Block, PipelineUsed
from ..models.config import ChunkingConfig, FilterConfig, FilterPass
from ..models.events import Stage
from ..postprocess import PostProcessor
from ..sanitize import Sanitizer
from ..scoring.engine import ScoringEngine
from ..scoring.quality import QualityAssessor
from .base import ExtractionContext

logger = logging.getLogger(__name__)


def _body(ctx: ExtractionContext) -> Tag:
    assert ctx.document is not None
    return ensure_body(ctx.document)


class SanitizeStep:
    """Serialize the input, sanitize it and parse a pipeline-owned document."""

    stage = Stage.SANITIZING

    def __init__(self, sanitizer: Sanitizer):
        self.sanitizer = sanitizer

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        text = decode_input(ctx.html)
        ctx.sanitized_html = self.sanitizer.sanitize(text)
        ctx.document = parse_document(ctx.sanitized_html)
        return ctx


class SafeFilterStep:
    """Pass 1: unwrap layout noise and strip attributes, never remove."""

    stage = Stage.FILTERING_SAFE

    def __init__(self, boilerplate: BoilerplateFilter, config: FilterConfig):
        self.boilerplate = boilerplate
        self.config = config

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        body = _body(ctx)
        report = self.boilerplate.apply(body, self.config.safe_rules, FilterPass.SAFE)
        ctx.body_snapshot = clone(body)
        ctx.record(self.stage, decision="filtered", reason=f"unwrapped={report.unwrapped} stripped={report.stripped}")
        return ctx


class DecidePathStep:
    """Choose between the standard extractor and the bypass path."""

    stage = Stage.DECIDING_PATH

    def __init__(self, heuristic: BypassHeuristic):
        self.heuristic = heuristic

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        decision = self.heuristic.decide(_body(ctx))
        ctx.decision = decision
        ctx.pipeline_used = PipelineUsed.BYPASS if decision.bypass else PipelineUsed.STANDARD
        ctx.record(self.stage, decision=ctx.pipeline_used.value, reason=decision.reason)
        return ctx


class ExtractStep:
    """
    Run the article extractor on the document.

    An empty or near-empty result, or one scoring below the quality gate,
    switches the run to the bypass path instead of failing.
    """

    stage = Stage.EXTRACTING

    def __init__(
        self,
        extractor: ArticleExtractor,
        min_text: int,
        assessor: Optional[QualityAssessor] = None,
        min_quality: int = 0,
    ):
        self.extractor = extractor
        self.min_text = min_text
        self.assessor = assessor or QualityAssessor()
        self.min_quality = min_quality

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        assert ctx.document is not None
        article = self.extractor.extract(ctx.document, ctx.base_url)
        fragment: Optional[Tag] = None
        if article is not None:
            fragment = BeautifulSoup(article.content, "html.parser")

        if article is None or fragment is None or text_length(fragment) < self.min_text:
            ctx.pipeline_used = PipelineUsed.BYPASS
            ctx.add_fallback("extractor-empty", self.stage, "extractor returned no usable content")
            return ctx

        if self.min_quality:
            quality = self.assessor.score(fragment)
            if quality < self.min_quality:
                ctx.pipeline_used = PipelineUsed.BYPASS
                ctx.add_fallback(
                    "standard-gate-failed",
                    self.stage,
                    f"quality {quality} below {self.min_quality}",
                )
                return ctx

        ctx.article = article
        ctx.fragment = fragment
        ctx.resolved_title = article.title
        ctx.byline = article.byline
        ctx.record(self.stage, decision="extracted", reason=f"{text_length(fragment)} characters")
        return ctx


class AggressiveFilterStep:
    """Pass 2: remove boilerplate orphaned by pass 1, hidden and empty elements."""

    stage = Stage.FILTERING_AGGRESSIVE

    def __init__(self, boilerplate: BoilerplateFilter, config: FilterConfig):
        self.boilerplate = boilerplate
        self.config = config

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        body = _body(ctx)
        report = self.boilerplate.apply(body, self.config.pass_two_rules(), FilterPass.AGGRESSIVE)
        hidden = self.boilerplate.remove_hidden_elements(body) if self.config.remove_hidden else 0
        empty = self.boilerplate.cleanup_empty_elements(body) if self.config.remove_empty else 0
        ctx.record(
            self.stage,
            decision="filtered",
            reason=f"removed={report.removed} hidden={hidden} empty={empty}",
        )
        return ctx


class ScoreStep:
    """Pick the highest-scoring content island."""

    stage = Stage.SCORING

    def __init__(self, engine: ScoringEngine):
        self.engine = engine

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        winner = self.engine.select_winner(_body(ctx))
        ctx.fragment = winner
        ctx.record(self.stage, decision="winner", reason=f"<{winner.name}> {text_length(winner)} characters")
        return ctx


class PruneStep:
    """
    Prune nested boilerplate from the winner.

    Raises:
        ExtractionEmpty: If the pruned winner holds near-zero text
    """

    stage = Stage.PRUNING

    def __init__(self, engine: ScoringEngine, min_text: int):
        self.engine = engine
        self.min_text = min_text

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        assert ctx.fragment is not None
        winner = self.engine.prune_node(ctx.fragment)
        length = text_length(winner)
        if length < self.min_text:
            raise ExtractionEmpty(f"Winner holds {length} characters", stage=self.stage.value)
        ctx.record(self.stage, decision="pruned", reason=f"{length} characters kept")
        return ctx


class ConvertStep:
    """Convert the fragment to blocks, chunk by chunk for oversized input."""

    stage = Stage.CONVERTING

    def __init__(
        self,
        converter: MarkdownConverter,
        chunking: ChunkingConfig,
        assessor: QualityAssessor,
    ):
        self.converter = converter
        self.chunking = chunking
        self.assessor = assessor

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        fragment = ctx.fragment
        assert fragment is not None

        if needs_chunking(fragment, self.chunking.max_document_size):
            chunks = split_into_chunks(fragment, self.chunking.chunk_size)
            ctx.record(self.stage, decision="chunked", reason=f"{len(chunks)} chunks")
            blocks: list[Block] = []
            for chunk in chunks:
                ctx.check_cancelled(self.stage)
                blocks.extend(self.converter.extract_blocks_from_nodes(chunk, ctx.base_url))
        else:
            blocks = self.converter.extract_blocks(fragment, ctx.base_url)

        ctx.blocks = blocks
        ctx.quality_score = self.assessor.score(fragment)
        if ctx.resolved_title is None:
            ctx.resolved_title = _find_title(ctx, fragment)
        return ctx


class PostProcessStep:
    stage = Stage.POST_PROCESSING

    def __init__(self, postprocessor: PostProcessor):
        self.postprocessor = postprocessor

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        ctx.blocks = self.postprocessor.process(ctx.blocks)
        return ctx


def _find_title(ctx: ExtractionContext, fragment: Tag) -> Optional[str]:
    """Caller title, else the fragment's h1, else the document <title>."""
    if ctx.title.strip():
        return ctx.title.strip()
    heading = fragment.find("h1")
    if isinstance(heading, Tag) and text_of(heading):
        return text_of(heading)
    if ctx.document is not None:
        title = ctx.document.find("title")
        if isinstance(title, Tag) and text_of(title):
            return text_of(title)
    return None
