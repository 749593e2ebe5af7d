"""Structured output models: blocks and the pipeline result."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .events import TraceEvent


class BlockType(str, Enum):
    """Kinds of structured content blocks."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    TABLE = "table"
    CODE = "code"
    QUOTE = "quote"


class PipelineUsed(str, Enum):
    """Which extraction path produced the result."""

    STANDARD = "standard"
    BYPASS = "bypass"


@dataclass
class TableData:
    """
    Table content in row-major order.

    Attributes:
        headers: Header cell texts (may be empty)
        rows: Data rows, each a list of cell texts
        simple: True if the table renders as a GFM pipe table,
            False for the fenced JSON fallback
    """

    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    simple: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"headers": list(self.headers), "rows": [list(r) for r in self.rows]}


@dataclass
class Block:
    """
    One unit of linear reading order.

    Only the fields relevant to ``type`` are set.
    """

    type: BlockType
    level: Optional[int] = None
    text: Optional[str] = None
    items: Optional[list[str]] = None
    ordered: bool = False
    table: Optional[TableData] = None
    code: Optional[str] = None
    language: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert block to a JSON-friendly dictionary, omitting unset fields."""
        data: dict[str, Any] = {"type": self.type.value}
        if self.level is not None:
            data["level"] = self.level
        if self.text is not None:
            data["text"] = self.text
        if self.items is not None:
            data["items"] = list(self.items)
            data["ordered"] = self.ordered
        if self.table is not None:
            data["table"] = self.table.to_dict()
        if self.code is not None:
            data["code"] = self.code
        if self.language:
            data["language"] = self.language
        return data


@dataclass
class PipelineStats:
    """Statistics describing how a result was produced."""

    fallbacks_used: list[str] = field(default_factory=list)
    quality_score: int = 0

    def to_dict(self) -> dict:
        return {
            "fallbacks_used": list(self.fallbacks_used),
            "quality_score": self.quality_score,
        }


@dataclass
class PipelineResult:
    """
    Final output of a distillation run.

    ``markdown`` is always the rendering of ``blocks``; the two describe the
    same content in the same order.
    """

    markdown: str
    blocks: list[Block]
    pipeline_used: PipelineUsed
    stats: PipelineStats = field(default_factory=PipelineStats)
    title: Optional[str] = None
    byline: Optional[str] = None
    trace: list[TraceEvent] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert result to dictionary for serialization."""
        return {
            "markdown": self.markdown,
            "blocks": [block.to_dict() for block in self.blocks],
            "pipeline_used": self.pipeline_used.value,
            "stats": self.stats.to_dict(),
            "title": self.title,
            "byline": self.byline,
        }
