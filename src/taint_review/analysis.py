"""
Analysis module for extracting source-to-sink data flows.

This module walks the normalized syntax tree of one file, collects source,
sink and transform candidates, and pairs every source with the nearest
later sink. It is a best-effort heuristic: there is no control-flow graph,
no alias tracking and no interprocedural tracing.
"""

from typing import List, Optional, Tuple

from .models import (
    DataFlowFinding,
    Location,
    SinkCandidate,
    SourceCandidate,
    TransformCandidate,
)
from .parser import JavaScriptParser, ParseFailure, SyntaxNode, SyntaxTree
from .patterns import PatternCatalog
from .severity import SeverityClassifier

MAX_FINDINGS_PER_FILE = 5
SNIPPET_LENGTH = 60

Candidates = Tuple[List[SourceCandidate], List[SinkCandidate], List[TransformCandidate]]


def _nested_in(node: SyntaxNode, previous: Optional[SyntaxNode]) -> bool:
    """True if ``node`` is a sub-expression of ``previous`` on the same line."""
    if previous is None or node.start_line != previous.start_line:
        return False
    return previous.offset <= node.offset and node.end_offset <= previous.end_offset


class TaintFlowAnalyzer:
    """
    Extracts data-flow findings from JavaScript and TypeScript sources.

    Each file is analyzed independently; the analyzer keeps no state between
    calls apart from its parser.
    """

    def __init__(self,
                 catalog: Optional[PatternCatalog] = None,
                 classifier: Optional[SeverityClassifier] = None,
                 parser: Optional[JavaScriptParser] = None,
                 max_findings: int = MAX_FINDINGS_PER_FILE,
                 verbose: bool = False):
        """
        Initialize the analyzer.

        Args:
            catalog: Recognizers to use (defaults to the stock catalog)
            classifier: Severity rules (defaults to the stock table)
            parser: Parser instance, created when omitted
            max_findings: Cap on findings emitted per file
            verbose: Enable verbose output
        """
        self.verbose = verbose
        self.catalog = catalog or PatternCatalog()
        self.classifier = classifier or SeverityClassifier()
        self.parser = parser or JavaScriptParser(verbose=verbose)
        self.max_findings = max_findings

    def analyze_code(self, code: str, path: str) -> List[DataFlowFinding]:
        """
        Parse and analyze one file.

        A file that fails to parse yields no findings.
        """
        tree = self.parser.parse(code, path)
        if isinstance(tree, ParseFailure):
            if self.verbose:
                print(f"Skipping {path}: {tree.reason}")
            return []
        return self.analyze_tree(tree)

    def analyze_tree(self, tree: SyntaxTree) -> List[DataFlowFinding]:
        if self.verbose:
            print(f"Analyzing {tree.file} ({tree.backend})")
        sources, sinks, transforms = self.collect_candidates(tree)
        return self.pair(sources, sinks, transforms)

    def collect_candidates(self, tree: SyntaxTree) -> Candidates:
        """
        Visit every node once and record what it matches.

        Candidates are kept in traversal order, which follows source order.
        """
        sources: List[SourceCandidate] = []
        sinks: List[SinkCandidate] = []
        transforms: List[TransformCandidate] = []
        last_source: Optional[SyntaxNode] = None
        last_transform: Optional[SyntaxNode] = None

        for node in tree.walk():
            loc = Location(tree.file, node.start_line, node.end_line)

            if self.catalog.is_source(node) and not _nested_in(node, last_source):
                sources.append(SourceCandidate(node.text[:SNIPPET_LENGTH], loc))
                last_source = node

            if self.catalog.is_transform(node) and not _nested_in(node, last_transform):
                transforms.append(TransformCandidate(node.text[:SNIPPET_LENGTH], loc))
                last_transform = node

            for kind in self.catalog.sink_kinds(node):
                sinks.append(SinkCandidate(kind, loc))

        return sources, sinks, transforms

    def pair(self,
             sources: List[SourceCandidate],
             sinks: List[SinkCandidate],
             transforms: List[TransformCandidate]) -> List[DataFlowFinding]:
        """
        Pair each source with its nearest later sink.

        Sources without a later sink are dropped. A sink may be shared by
        several sources. Output stops at ``max_findings``.
        """
        findings: List[DataFlowFinding] = []
        ordered_sinks = sorted(sinks, key=lambda k: k.loc.start_line)
        ordered_transforms = sorted(transforms, key=lambda t: t.loc.start_line)

        for source in sources:
            if len(findings) >= self.max_findings:
                break

            line = source.loc.start_line
            sink = next((k for k in ordered_sinks if k.loc.start_line > line), None)
            if sink is None:
                continue

            transform = next(
                (t for t in ordered_transforms
                 if line <= t.loc.start_line <= sink.loc.start_line),
                None,
            )
            severity, confidence = self.classifier.classify(sink.kind, transform)
            description = f"{source.snippet} flows to {sink.kind}"
            if transform is not None:
                description += " via transform"

            findings.append(DataFlowFinding(
                source=source.snippet,
                sink=sink.kind,
                source_loc=source.loc,
                sink_loc=sink.loc,
                severity=severity,
                confidence=confidence,
                description=description,
                transform=transform.snippet if transform else None,
                transform_loc=transform.loc if transform else None,
            ))

        return findings
