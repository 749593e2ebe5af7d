"""Distillation pipeline: context, steps and the orchestrating Distiller."""

from .base import CancellationToken, EventEmitter, ExtractionContext, PipelineStep
from .orchestrator import Distiller

__all__ = [
    "CancellationToken",
    "Distiller",
    "EventEmitter",
    "ExtractionContext",
    "PipelineStep",
]
