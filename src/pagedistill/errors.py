"""Exception hierarchy for the distillation pipeline."""

from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    """Why a pipeline run ended in the Failed state."""

    PARSE = "parse"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class DistillError(Exception):
    """Base class for all pipeline errors."""

    reason: FailureReason = FailureReason.INTERNAL

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"{self.stage}: {message}"
        return message


class FatalParseError(DistillError):
    """Input could not be parsed into a DOM. No partial output is produced."""

    reason = FailureReason.PARSE


class ExtractionEmpty(DistillError):
    """
    Extraction produced near-zero text.

    Never escapes the orchestrator: it is resolved by converting the whole body.
    """


class PipelineCancelled(DistillError):
    """The caller cancelled the run, or its deadline passed, between stages."""

    reason = FailureReason.CANCELLED


class PipelineFailed(DistillError):
    """An unexpected error in a stage that has no fallback."""

    reason = FailureReason.INTERNAL
