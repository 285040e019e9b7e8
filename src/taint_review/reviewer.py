"""
Main reviewer module that coordinates parsing, analysis and scanning.

This module provides the high-level API: hand it changed file contents and
the raw diff, get back findings per file, detected secrets, and the overall
risk, confidence and effort values.
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .analysis import TaintFlowAnalyzer
from .config import config
from .diffs import DiffStats, added_line_numbers, build_unified, parse_unified_diff
from .models import Confidence, DataFlowFinding, EffortEstimate, RiskLevel
from .parser import JavaScriptParser, ParseFailure
from .report import render_security_summary
from .risk import combine_confidence, estimate_effort, max_risk
from .secret_scanner import SecretScanner


@dataclass(frozen=True)
class ReviewResult:
    """Everything one review produces."""
    findings: Dict[str, List[DataFlowFinding]]
    secrets: List[str]
    risk: RiskLevel
    confidence: Confidence
    effort: EffortEstimate
    unparsed_files: List[str] = field(default_factory=list)
    skipped_files: List[str] = field(default_factory=list)
    stats: Optional[DiffStats] = None
    languages: List[str] = field(default_factory=list)
    changed_lines: Dict[str, List[int]] = field(default_factory=dict)

    @property
    def all_findings(self) -> List[DataFlowFinding]:
        return [f for per_file in self.findings.values() for f in per_file]

    def touches_change(self, finding: DataFlowFinding) -> bool:
        """Whether the finding's sink sits on a line the diff added."""
        lines = self.changed_lines.get(finding.sink_loc.file, ())
        return any(
            finding.sink_loc.start_line <= line <= finding.sink_loc.end_line
            for line in lines
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "files": [
                {
                    "file": path,
                    "findings": [f.to_dict() for f in per_file],
                    "finding_count": len(per_file),
                }
                for path, per_file in self.findings.items()
            ],
            "total_findings": len(self.all_findings),
            "secrets": list(self.secrets),
            "risk": self.risk.label,
            "confidence": self.confidence.label,
            "effort": self.effort.effort,
            "minutes": self.effort.minutes,
            "unparsed_files": list(self.unparsed_files),
            "skipped_files": list(self.skipped_files),
        }
        if self.stats is not None:
            result["stats"] = {
                "files_changed": self.stats.files_changed,
                "additions": self.stats.additions,
                "deletions": self.stats.deletions,
            }
            result["languages"] = list(self.languages)
            result["changed_sinks"] = sum(1 for f in self.all_findings if self.touches_change(f))
        return result


class ChangeReviewer:
    """
    Main reviewer class for source-code changes.

    This class coordinates the data-flow analysis of changed files and the
    secret scan of the diff, then aggregates the results.
    """

    def __init__(self, verbose: bool = False,
                 max_findings: Optional[int] = None,
                 extensions: Optional[Iterable[str]] = None):
        """
        Initialize the reviewer.

        Args:
            verbose: Enable verbose output
            max_findings: Findings cap per file (defaults to configuration)
            extensions: File suffixes to analyze (defaults to configuration,
                then to every suffix the parser supports)
        """
        self.verbose = verbose
        self.parser = JavaScriptParser(verbose=verbose)
        self.analyzer = TaintFlowAnalyzer(
            parser=self.parser,
            max_findings=(max_findings if max_findings is not None
                          else config.max_findings_per_file),
            verbose=verbose,
        )
        self.scanner = SecretScanner()
        self.extensions = frozenset(
            extensions or config.extensions or JavaScriptParser.SUPPORTED_SUFFIXES
        )

    def is_supported(self, path: str) -> bool:
        return Path(path).suffix.lower() in self.extensions

    def review(self, files: Mapping[str, str], diff_text: str = "",
               changed_file_count: Optional[int] = None) -> ReviewResult:
        """
        Review changed files and the diff they came from.

        Args:
            files: Changed-file path to post-change text
            diff_text: Concatenated raw diff, scanned for secrets
            changed_file_count: Files in the change set, when it differs
                from ``len(files)``

        Returns:
            ``ReviewResult`` for the whole change
        """
        findings: Dict[str, List[DataFlowFinding]] = {}
        unparsed: List[str] = []
        skipped: List[str] = []

        for path, content in files.items():
            if not self.is_supported(path):
                if self.verbose:
                    print(f"Skipping unsupported file: {path}")
                skipped.append(path)
                continue

            tree = self.parser.parse(content, path)
            if isinstance(tree, ParseFailure):
                unparsed.append(path)
                findings[path] = []
                continue
            findings[path] = self.analyzer.analyze_tree(tree)

        flat = [f for per_file in findings.values() for f in per_file]
        if changed_file_count is None:
            changed_file_count = len(files)

        return ReviewResult(
            findings=findings,
            secrets=self.scanner.scan(diff_text),
            risk=max_risk(flat),
            confidence=combine_confidence(flat),
            effort=estimate_effort(changed_file_count, len(flat)),
            unparsed_files=unparsed,
            skipped_files=skipped,
        )

    def review_diff(self, diff_text: str, root: Path) -> ReviewResult:
        """
        Review a unified diff against a checkout of the post-change tree.

        Args:
            diff_text: Output of ``git diff``
            root: Directory holding the post-change files

        Returns:
            ``ReviewResult`` including diff statistics
        """
        files = parse_unified_diff(diff_text)
        unified = build_unified(files)

        contents: Dict[str, str] = {}
        changed_lines: Dict[str, List[int]] = {}
        for diff_file in files:
            if diff_file.status == "removed" or diff_file.binary:
                continue
            if not self.is_supported(diff_file.filename):
                continue
            content = self._read(root / diff_file.filename)
            if content is not None:
                contents[diff_file.filename] = content
                changed_lines[diff_file.filename] = added_line_numbers(diff_file.patch)

        result = self.review(contents, unified.text, changed_file_count=unified.stats.files_changed)
        return replace(
            result,
            stats=unified.stats,
            languages=unified.languages,
            changed_lines=changed_lines,
        )

    def analyze(self, path: Path) -> ReviewResult:
        """
        Review a file or every supported file below a directory.

        The analyzed text itself is scanned for secrets.

        Raises:
            ValueError: If the path is invalid
        """
        if path.is_file():
            paths = [path]
        elif path.is_dir():
            if self.verbose:
                print(f"Analyzing directory: {path}")
            paths = sorted(
                p for p in path.rglob("*")
                if p.is_file() and p.suffix.lower() in self.extensions
            )
        else:
            raise ValueError(f"Invalid path: {path}")

        contents: Dict[str, str] = {}
        for p in paths:
            content = self._read(p)
            if content is not None:
                contents[str(p)] = content
        return self.review(contents, "\n".join(contents.values()))

    def _read(self, file_path: Path) -> Optional[str]:
        try:
            return file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            if self.verbose:
                print(f"Warning: Could not read {file_path}: {e}")
            return None

    def print_results(self, result: ReviewResult) -> None:
        """
        Print review results to stdout in a human-readable format.

        Args:
            result: Review result
        """
        print("\n=== Review Results ===\n")
        print(f"Files analyzed: {len(result.findings)}")
        print(f"Overall risk: {result.risk.label} (confidence: {result.confidence.label})")
        print(f"Estimated effort: {result.effort.effort} (~{result.effort.minutes} minutes)\n")

        for path, findings in result.findings.items():
            if path in result.unparsed_files:
                print(f"[-] {path}: Could not be parsed")
            elif findings:
                print(f"[!] {path}: {len(findings)} data flow(s)")
            else:
                print(f"[+] {path}: No data flows detected")

            for finding in findings:
                line = f"   [{finding.severity.label.upper()}] Line {finding.sink_loc.start_line}: {finding.description}"
                if result.touches_change(finding):
                    line += " (changed line)"
                print(line)
                if finding.transform and self.verbose:
                    print(f"     Transform: {finding.transform}")

        if result.secrets:
            print(f"\n[!] Secrets detected: {', '.join(result.secrets)}")

    def print_markdown(self, result: ReviewResult) -> None:
        print(render_security_summary(result))

    def save_results(self, result: ReviewResult, output_path: Path) -> None:
        """
        Save review results to a JSON file.

        Args:
            result: Review result
            output_path: Path to save the results
        """
        with open(output_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)

        if self.verbose:
            print(f"Results saved to {output_path}")
