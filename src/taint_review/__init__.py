"""
taintreview - Security Review of Source-Code Changes

A heuristic reviewer that finds externally influenced data reaching
dangerous operations without a recognized sanitizer, scans changed text
for leaked credentials, and summarizes the risk of a change set.
"""

__version__ = "0.1.0"

from .analysis import TaintFlowAnalyzer
from .config import Config, config
from .models import Confidence, DataFlowFinding, EffortEstimate, Location, RiskLevel
from .parser import JavaScriptParser, ParseFailure, SyntaxTree
from .patterns import PatternCatalog
from .reviewer import ChangeReviewer, ReviewResult
from .risk import combine_confidence, estimate_effort, max_risk
from .secret_scanner import SecretScanner, detect_secrets
from .severity import SeverityClassifier

__all__ = [
    "ChangeReviewer",
    "ReviewResult",
    "TaintFlowAnalyzer",
    "JavaScriptParser",
    "ParseFailure",
    "SyntaxTree",
    "PatternCatalog",
    "SeverityClassifier",
    "SecretScanner",
    "detect_secrets",
    "max_risk",
    "combine_confidence",
    "estimate_effort",
    "DataFlowFinding",
    "Location",
    "RiskLevel",
    "Confidence",
    "EffortEstimate",
    "Config",
    "config",
]
