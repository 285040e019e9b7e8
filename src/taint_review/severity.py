"""
Severity and confidence rules for source-to-sink findings.
"""

from typing import Dict, Optional, Tuple

from .models import Confidence, RiskLevel, TransformCandidate
from .patterns import CODE_EXEC, DATABASE_QUERY, PROCESS_EXEC, RAW_MARKUP_INJECTION

# sink kind -> (severity without transform, severity with transform)
SEVERITY_TABLE: Dict[str, Tuple[RiskLevel, RiskLevel]] = {
    CODE_EXEC: (RiskLevel.HIGH, RiskLevel.MEDIUM),
    RAW_MARKUP_INJECTION: (RiskLevel.HIGH, RiskLevel.MEDIUM),
    DATABASE_QUERY: (RiskLevel.HIGH, RiskLevel.LOW),
    PROCESS_EXEC: (RiskLevel.HIGH, RiskLevel.MEDIUM),
}

DEFAULT_SEVERITY: Tuple[RiskLevel, RiskLevel] = (RiskLevel.MEDIUM, RiskLevel.LOW)


class SeverityClassifier:
    """
    Deterministic lookup from (sink kind, transform present) to risk.

    Code execution and raw markup injection stay at ``MEDIUM`` even behind a
    transform. Sinks missing from the table use ``default``.
    """

    def __init__(self, table: Optional[Dict[str, Tuple[RiskLevel, RiskLevel]]] = None,
                 default: Tuple[RiskLevel, RiskLevel] = DEFAULT_SEVERITY):
        self.table = dict(SEVERITY_TABLE if table is None else table)
        self.default = default

    def severity(self, sink_kind: str, transform: Optional[TransformCandidate]) -> RiskLevel:
        without, with_transform = self.table.get(sink_kind, self.default)
        return with_transform if transform is not None else without

    @staticmethod
    def confidence(transform: Optional[TransformCandidate]) -> Confidence:
        # A transform means the flow shape was fully characterized
        return Confidence.HIGH if transform is not None else Confidence.MEDIUM

    def classify(self, sink_kind: str,
                 transform: Optional[TransformCandidate]) -> Tuple[RiskLevel, Confidence]:
        return self.severity(sink_kind, transform), self.confidence(transform)
