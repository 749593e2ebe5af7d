"""Pagedistill configuration, event and result models."""

from .blocks import Block, BlockType, PipelineResult, PipelineStats, PipelineUsed, TableData
from .config import (
    BypassConfig,
    ChunkingConfig,
    ConversionConfig,
    DistillConfig,
    FilterAction,
    FilterConfig,
    FilterPass,
    FilterRule,
    PostProcessConfig,
    ProfileName,
    ScoringConfig,
)
from .events import Stage, TraceEvent
from .profiles import PROFILES, apply_profile

__all__ = [
    # Config
    "BypassConfig",
    "ChunkingConfig",
    "ConversionConfig",
    "DistillConfig",
    "FilterAction",
    "FilterConfig",
    "FilterPass",
    "FilterRule",
    "PostProcessConfig",
    "ProfileName",
    "ScoringConfig",
    # Results
    "Block",
    "BlockType",
    "PipelineResult",
    "PipelineStats",
    "PipelineUsed",
    "TableData",
    # Events
    "Stage",
    "TraceEvent",
    # Profiles
    "PROFILES",
    "apply_profile",
]
