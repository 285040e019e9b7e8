"""
Aggregation of findings into overall review values.

All functions are pure and accept ``None`` as an empty input.
"""

from typing import Iterable, Optional

from .models import Confidence, DataFlowFinding, EffortEstimate, RiskLevel

MIN_MINUTES = 5
MAX_MINUTES = 30


def max_risk(findings: Optional[Iterable[DataFlowFinding]]) -> RiskLevel:
    """Highest severity among ``findings``; ``NONE`` when there are none."""
    return max((f.severity for f in findings or ()), default=RiskLevel.NONE)


def combine_confidence(findings: Optional[Iterable[DataFlowFinding]]) -> Confidence:
    """
    Overall confidence: the weakest level present wins.

    An empty input gives ``MEDIUM``, never ``HIGH``.
    """
    levels = {f.confidence for f in findings or ()}
    if Confidence.LOW in levels:
        return Confidence.LOW
    if Confidence.MEDIUM in levels:
        return Confidence.MEDIUM
    return Confidence.HIGH if levels else Confidence.MEDIUM


def estimate_effort(changed_files: int, finding_count: int) -> EffortEstimate:
    """
    Estimate human review time from change volume and finding count.

    Examples:
        >>> estimate_effort(0, 0)
        EffortEstimate(effort='Light', minutes=5)
        >>> estimate_effort(20, 10)
        EffortEstimate(effort='Heavy', minutes=30)
    """
    minutes = min(MAX_MINUTES, max(MIN_MINUTES, changed_files * 2 + finding_count * 3))
    if minutes > 25:
        effort = "Heavy"
    elif minutes > 15:
        effort = "Moderate"
    elif minutes > 9:
        effort = "Medium"
    else:
        effort = "Light"
    return EffortEstimate(effort, minutes)
