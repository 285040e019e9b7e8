"""
Value records shared by the analysis, scanning and aggregation modules.

Every record is immutable and created fresh per analysis call.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, NamedTuple, Optional


class RiskLevel(IntEnum):
    """Ordinal risk classification, ``NONE`` through ``CRITICAL``."""
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        return self.name.title()


class Confidence(Enum):
    """How completely the flow shape was characterized."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class Location:
    """A 1-based, inclusive line span within a file."""
    file: str
    start_line: int
    end_line: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }


@dataclass(frozen=True)
class SourceCandidate:
    snippet: str  # at most 60 characters
    loc: Location


@dataclass(frozen=True)
class SinkCandidate:
    kind: str
    loc: Location


@dataclass(frozen=True)
class TransformCandidate:
    snippet: str
    loc: Location


@dataclass(frozen=True)
class DataFlowFinding:
    """
    One candidate path from a tainted source to a sink.

    The source always starts on an earlier line than the sink. When a
    transform is present it lies between them, inclusive.
    """
    source: str
    sink: str
    source_loc: Location
    sink_loc: Location
    severity: RiskLevel
    confidence: Confidence
    description: str
    transform: Optional[str] = None
    transform_loc: Optional[Location] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "sink": self.sink,
            "transform": self.transform,
            "source_loc": self.source_loc.to_dict(),
            "sink_loc": self.sink_loc.to_dict(),
            "transform_loc": self.transform_loc.to_dict() if self.transform_loc else None,
            "severity": self.severity.label,
            "confidence": self.confidence.label,
            "description": self.description,
        }


class EffortEstimate(NamedTuple):
    effort: str
    minutes: int
