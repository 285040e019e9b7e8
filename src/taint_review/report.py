"""
Markdown rendering of review results for code-review comments.
"""

from typing import Iterable, List

from .models import DataFlowFinding

MAX_LISTED_FLOWS = 5

NO_FLOWS = "- No impactful data flows identified."
NO_CONCERNS = "- No significant security concerns identified."


def format_dataflow(finding: DataFlowFinding) -> str:
    path = f"{finding.source} → "
    if finding.transform:
        path += f"[{finding.transform}] → "
    path += finding.sink
    return (
        f"- {path}  (`{finding.source_loc.file}:{finding.source_loc.start_line}`"
        f" → `{finding.sink_loc.file}:{finding.sink_loc.start_line}`)"
    )


def format_dataflow_list(findings: Iterable[DataFlowFinding]) -> str:
    lines = [format_dataflow(f) for f in list(findings)[:MAX_LISTED_FLOWS]]
    return "\n".join(lines) if lines else NO_FLOWS


def format_key_findings(findings: List[DataFlowFinding], secrets: List[str]) -> str:
    lines = []
    if secrets:
        lines.append(f"- Secrets detected: {', '.join(secrets)}")
    for finding in findings:
        lines.append(
            f"- **{finding.severity.label}** {finding.description}"
            f" (`{finding.sink_loc.file}:{finding.sink_loc.start_line}`)"
        )
    return "\n".join(lines) if lines else NO_CONCERNS


def render_security_summary(result) -> str:
    """Render a ``ReviewResult`` as the security section of a review comment."""
    findings = result.all_findings
    return "\n".join([
        "## Security Review",
        "",
        f"**Overall risk:** `{result.risk.label}`",
        f"**Confidence:** `{result.confidence.label}`",
        "",
        "**Key findings**",
        format_key_findings(findings, result.secrets),
        "",
        "### Data-flow highlights",
        "",
        format_dataflow_list(findings),
        "",
        "## Estimated code review effort",
        "",
        f"🎯 `{result.effort.effort}` | ⏱️ `~{result.effort.minutes} minutes`",
        "",
    ])
