"""Base classes for the distillation pipeline."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, runtime_checkable

from bs4 import BeautifulSoup, Tag

from ..dom import HtmlInput
from ..errors import PipelineCancelled
from ..extraction.standard import ExtractedArticle
from ..heuristics.bypass import BypassDecision
from ..models.blocks import Block, PipelineUsed
from ..models.events import Stage, TraceEvent

logger = logging.getLogger(__name__)

# Type alias for event emitter function
EventEmitter = Callable[[TraceEvent], None]


class CancellationToken:
    """
    Cooperative cancellation flag checked between pipeline stages.

    Example:
        token = CancellationToken()
        # from another thread or callback:
        token.cancel()
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ExtractionContext:
    """
    Context object passed through pipeline steps.

    Contains all state for distilling a single document, accumulated
    as it moves through the pipeline. The document is owned by the
    pipeline; nothing here aliases the caller's tree.

    Attributes:
        html: Raw input as given by the caller
        base_url: URL used to absolutize links and images
        title: Title supplied by the caller (may be empty)
        sanitized_html: Sanitizer output
        document: Pipeline-owned parsed document
        body_snapshot: Copy of the safe-filtered body, for whole-body fallback
        decision: Outcome of the bypass heuristic
        pipeline_used: Path that produced the fragment
        article: Standard extractor output
        fragment: Element that gets converted
        blocks: Converted (and later post-processed) blocks
        fallbacks_used: Fallbacks taken, in order
        trace: Diagnostic events, in order
    """

    html: HtmlInput
    base_url: str
    title: str = ""

    # Cancellation
    cancel: Optional[CancellationToken] = None
    deadline: Optional[float] = None

    # Content (accumulated through pipeline)
    sanitized_html: Optional[str] = None
    document: Optional[BeautifulSoup] = None
    body_snapshot: Optional[Tag] = None
    decision: Optional[BypassDecision] = None
    pipeline_used: PipelineUsed = PipelineUsed.STANDARD
    article: Optional[ExtractedArticle] = None
    fragment: Optional[Tag] = None
    blocks: list[Block] = field(default_factory=list)

    # Result metadata
    resolved_title: Optional[str] = None
    byline: Optional[str] = None
    quality_score: int = 0
    fallbacks_used: list[str] = field(default_factory=list)
    trace: list[TraceEvent] = field(default_factory=list)

    emit: Optional[EventEmitter] = None

    def record(self, stage: Stage, decision: Optional[str] = None, reason: Optional[str] = None) -> TraceEvent:
        """Append a trace event and forward it to the emit callback."""
        event = TraceEvent(stage=stage, decision=decision, reason=reason)
        self.trace.append(event)
        if self.emit:
            try:
                self.emit(event)
            except Exception as e:
                logger.warning(f"Trace callback failed at {stage.value}: {e}")
        return event

    def add_fallback(self, name: str, stage: Stage, reason: str) -> None:
        self.fallbacks_used.append(name)
        self.record(stage, decision=f"fallback:{name}", reason=reason)
        logger.warning(f"Fallback {name} at {stage.value}: {reason}")

    def check_cancelled(self, stage: Stage) -> None:
        """
        Raise if the run was cancelled or its deadline has passed.

        Raises:
            PipelineCancelled: With the stage about to start
        """
        if self.cancel is not None and self.cancel.cancelled:
            raise PipelineCancelled("Cancelled by caller", stage=stage.value)
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise PipelineCancelled("Deadline exceeded", stage=stage.value)


@runtime_checkable
class PipelineStep(Protocol):
    """
    Protocol for pipeline steps.

    Each step receives an ExtractionContext, processes it, and returns
    the (possibly modified) context.

    Error Handling Contract:
    - Steps never catch unexpected exceptions; the Distiller maps them
      to a fallback or a failure depending on the stage
    - ExtractionEmpty signals near-zero text and triggers whole-body conversion

    Example implementation:
        class SanitizeStep:
            stage = Stage.SANITIZING

            def execute(self, ctx: ExtractionContext) -> ExtractionContext:
                ctx.sanitized_html = self.sanitizer.sanitize(ctx.html)
                return ctx
    """

    stage: Stage

    def execute(self, ctx: ExtractionContext) -> ExtractionContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The extraction context with accumulated state

        Returns:
            The (possibly modified) context
        """
        ...
