"""Distiller: drives a document through the extraction state machine."""

import logging
import time
from collections.abc import Sequence
from typing import Optional

from bs4 import Tag

from ..conversion.markdown import MarkdownConverter
from ..dom import HtmlInput, ensure_body, parse_document, text_of
from ..errors import DistillError, ExtractionEmpty, PipelineCancelled, PipelineFailed
from ..extraction.standard import ArticleExtractor, StandardArticleExtractor
from ..filters.boilerplate import BoilerplateFilter
from ..heuristics.bypass import BypassHeuristic
from ..logging_config import setup_logging_from_config
from ..models.blocks import Block, BlockType, PipelineResult, PipelineStats, PipelineUsed
from ..models.config import DistillConfig
from ..models.events import Stage
from ..models.profiles import apply_profile
from ..postprocess import PostProcessor
from ..sanitize import HtmlSanitizer, Sanitizer
from ..scoring.engine import ScoringEngine
from ..scoring.quality import QualityAssessor
from .base import CancellationToken, EventEmitter, ExtractionContext, PipelineStep
from .steps import (
    AggressiveFilterStep,
    ConvertStep,
    DecidePathStep,
    ExtractStep,
    PostProcessStep,
    PruneStep,
    SafeFilterStep,
    SanitizeStep,
    ScoreStep,
)

logger = logging.getLogger(__name__)


class _Degraded(Exception):
    """A degradable stage failed; resolved by whole-body conversion."""


# Stages whose unexpected errors degrade to whole-body conversion
DEGRADABLE_STAGES = frozenset(
    {
        Stage.FILTERING_SAFE,
        Stage.DECIDING_PATH,
        Stage.EXTRACTING,
        Stage.FILTERING_AGGRESSIVE,
        Stage.SCORING,
        Stage.PRUNING,
    }
)


class Distiller:
    """
    Hybrid content extraction and Markdown conversion pipeline.

    Idle -> Sanitizing -> Filtering(safe) -> DecidingPath ->
    {Extracting | Filtering(aggressive) -> Scoring -> Pruning} ->
    Converting -> PostProcessing -> Done, with Failed reachable from any stage.

    Example:
        distiller = Distiller(DistillConfig(profile=ProfileName.GITHUB))
        result = distiller.run(html, "https://example.com/page", title="Page")
        print(result.pipeline_used, result.stats.quality_score)
        print(result.markdown)

    Instances hold no per-run state, so one Distiller can serve many
    independent runs.
    With configure_logging=True the config's log_level and log_file are
    applied to the pagedistill logger.
    """

    def __init__(
        self,
        config: Optional[DistillConfig] = None,
        sanitizer: Optional[Sanitizer] = None,
        extractor: Optional[ArticleExtractor] = None,
        configure_logging: bool = False,
    ):
        self.config = apply_profile(config or DistillConfig())
        cfg = self.config
        if configure_logging:
            setup_logging_from_config(cfg)

        boilerplate = BoilerplateFilter()
        engine = ScoringEngine(cfg.scoring)
        converter = MarkdownConverter(cfg.conversion)
        assessor = QualityAssessor()

        self._prelude: Sequence[PipelineStep] = (
            SanitizeStep(sanitizer or HtmlSanitizer()),
            SafeFilterStep(boilerplate, cfg.filters),
            DecidePathStep(BypassHeuristic(cfg.bypass)),
        )
        self._standard: Sequence[PipelineStep] = (
            ExtractStep(
                extractor or StandardArticleExtractor(),
                cfg.min_extracted_text,
                assessor,
                cfg.min_quality_score,
            ),
        )
        self._bypass: Sequence[PipelineStep] = (
            AggressiveFilterStep(boilerplate, cfg.filters),
            ScoreStep(engine),
            PruneStep(engine, cfg.min_extracted_text),
        )
        self._convert = ConvertStep(converter, cfg.chunking, assessor)
        self._postprocess = PostProcessStep(PostProcessor(cfg.postprocess))
        self._converter = converter

    def run(
        self,
        html: HtmlInput,
        base_url: str,
        title: str = "",
        cancel: Optional[CancellationToken] = None,
        emit: Optional[EventEmitter] = None,
    ) -> PipelineResult:
        """
        Distill one document.

        Args:
            html: Raw HTML text, bytes, or a BeautifulSoup tree (left untouched)
            base_url: URL for absolutizing links and images
            title: Title supplied by the capturing side
            cancel: Optional token checked between stages
            emit: Optional callback receiving each TraceEvent

        Returns:
            PipelineResult whose markdown is the rendering of its blocks

        Raises:
            FatalParseError: Input is not HTML text or is empty
            PipelineCancelled: Cancelled or deadline passed between stages
            PipelineFailed: Unexpected error during conversion or post-processing
        """
        deadline = None
        if self.config.timeout_seconds is not None:
            deadline = time.monotonic() + self.config.timeout_seconds

        ctx = ExtractionContext(
            html=html,
            base_url=base_url,
            title=title or "",
            cancel=cancel,
            deadline=deadline,
            emit=emit,
        )
        ctx.record(Stage.IDLE)

        try:
            self._extract(ctx)
            self._run_step(self._convert, ctx)
            if not ctx.blocks:
                self._convert_whole_body(ctx, "conversion produced no blocks")
            self._run_step(self._postprocess, ctx)
        except DistillError as e:
            self._fail(ctx, e)
            raise
        except Exception as e:
            # Steps wrap their own errors; this only catches bugs in the loop itself
            error = PipelineFailed(str(e), stage=Stage.FAILED.value)
            self._fail(ctx, error)
            raise error from e

        result = PipelineResult(
            markdown=self._converter.render(ctx.blocks),
            blocks=ctx.blocks,
            pipeline_used=ctx.pipeline_used,
            stats=PipelineStats(fallbacks_used=list(ctx.fallbacks_used), quality_score=ctx.quality_score),
            title=ctx.resolved_title,
            byline=ctx.byline,
            trace=ctx.trace,
        )
        ctx.record(Stage.DONE, decision=ctx.pipeline_used.value, reason=f"{len(ctx.blocks)} blocks")
        logger.info(
            f"Distilled {base_url} via {ctx.pipeline_used.value} path: "
            f"{len(ctx.blocks)} blocks, quality={ctx.quality_score}"
        )
        return result

    def _extract(self, ctx: ExtractionContext) -> None:
        """Run everything up to Converting; leaves ctx.fragment set."""
        try:
            for step in self._prelude:
                self._run_step(step, ctx)

            if ctx.pipeline_used == PipelineUsed.STANDARD:
                for step in self._standard:
                    self._run_step(step, ctx)

            # The extractor may have handed over to the bypass path
            if ctx.pipeline_used == PipelineUsed.BYPASS:
                for step in self._bypass:
                    self._run_step(step, ctx)
        except (ExtractionEmpty, _Degraded) as e:
            self._convert_whole_body(ctx, str(e), convert=False)

    def _run_step(self, step: PipelineStep, ctx: ExtractionContext) -> None:
        ctx.check_cancelled(step.stage)
        ctx.record(step.stage)
        try:
            step.execute(ctx)
        except (DistillError, _Degraded):
            raise
        except Exception as e:
            if step.stage in DEGRADABLE_STAGES:
                logger.warning(f"Stage {step.stage.value} failed, degrading: {e}")
                raise _Degraded(f"{step.stage.value}: {e}") from e
            raise PipelineFailed(str(e), stage=step.stage.value) from e

    def _convert_whole_body(self, ctx: ExtractionContext, reason: str, convert: bool = True) -> None:
        """
        Fall back to the safe-filtered body.

        With convert=True the body is converted right away (used when a
        conversion already ran and produced nothing); otherwise it is only
        installed as the fragment for the regular Converting stage.
        """
        if "whole-body" in ctx.fallbacks_used:
            if convert:
                ctx.blocks = self._plain_text_blocks(ctx)
                ctx.add_fallback("plain-text", Stage.CONVERTING, reason)
            return

        ctx.add_fallback("whole-body", Stage.CONVERTING, reason)
        ctx.fragment = self._whole_body(ctx)
        if convert:
            self._run_step(self._convert, ctx)
            if not ctx.blocks:
                ctx.blocks = self._plain_text_blocks(ctx)
                ctx.add_fallback("plain-text", Stage.CONVERTING, "whole-body conversion produced no blocks")

    def _whole_body(self, ctx: ExtractionContext) -> Tag:
        if ctx.body_snapshot is not None:
            return ctx.body_snapshot
        if ctx.sanitized_html is not None:
            return ensure_body(parse_document(ctx.sanitized_html))
        assert ctx.document is not None
        return ensure_body(ctx.document)

    def _plain_text_blocks(self, ctx: ExtractionContext) -> list[Block]:
        """Last resort: the body's visible text as a single paragraph."""
        text = text_of(self._whole_body(ctx))
        return [Block(type=BlockType.PARAGRAPH, text=text)] if text else []

    def _fail(self, ctx: ExtractionContext, error: DistillError) -> None:
        ctx.record(Stage.FAILED, decision=error.reason.value, reason=str(error))
        if isinstance(error, PipelineCancelled):
            logger.warning(f"Distillation cancelled: {error}")
        else:
            logger.error(f"Distillation failed ({error.reason.value}): {error}")
