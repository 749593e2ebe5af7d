"""Diagnostic trace events emitted between pipeline stages."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Stage(str, Enum):
    """States of the distillation state machine."""

    IDLE = "idle"
    SANITIZING = "sanitizing"
    FILTERING_SAFE = "filtering_safe"
    DECIDING_PATH = "deciding_path"
    EXTRACTING = "extracting"
    FILTERING_AGGRESSIVE = "filtering_aggressive"
    SCORING = "scoring"
    PRUNING = "pruning"
    CONVERTING = "converting"
    POST_PROCESSING = "post_processing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TraceEvent:
    """
    Event emitted when the pipeline enters a stage or makes a decision.

    Example:
        def log_event(event: TraceEvent) -> None:
            if event.decision:
                print(f"{event.stage.value}: {event.decision} ({event.reason})")

        Distiller().run(html, url, emit=log_event)
    """

    stage: Stage

    # Timestamp (always UTC)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    decision: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_error(self) -> bool:
        """Check if this is a failure event."""
        return self.stage == Stage.FAILED

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "decision": self.decision,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }
