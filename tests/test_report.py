"""
Tests for markdown rendering of review results.
"""

import unittest

from taint_review.models import Confidence, DataFlowFinding, Location, RiskLevel
from taint_review.report import (
    NO_CONCERNS,
    NO_FLOWS,
    format_dataflow,
    format_dataflow_list,
    format_key_findings,
    render_security_summary,
)
from taint_review.reviewer import ChangeReviewer


def make_finding(transform=None, sink_line=5):
    return DataFlowFinding(
        source='req.query.id',
        sink='database-query',
        source_loc=Location('api.js', 2, 2),
        sink_loc=Location('api.js', sink_line, sink_line),
        severity=RiskLevel.LOW if transform else RiskLevel.HIGH,
        confidence=Confidence.HIGH if transform else Confidence.MEDIUM,
        description='req.query.id flows to database-query' + (' via transform' if transform else ''),
        transform=transform,
        transform_loc=Location('api.js', 3, 3) if transform else None,
    )


class TestFormatting(unittest.TestCase):
    """Test cases for the markdown helpers."""

    def test_format_dataflow(self):
        """Test a flow without a transform."""
        self.assertEqual(
            format_dataflow(make_finding()),
            '- req.query.id → database-query  (`api.js:2` → `api.js:5`)',
        )

    def test_format_dataflow_with_transform(self):
        """Test the transform is shown between source and sink."""
        self.assertEqual(
            format_dataflow(make_finding(transform='sanitize(id)')),
            '- req.query.id → [sanitize(id)] → database-query  (`api.js:2` → `api.js:5`)',
        )

    def test_dataflow_list_is_capped(self):
        """Test at most five flows are listed."""
        findings = [make_finding(sink_line=n) for n in range(10, 18)]
        lines = format_dataflow_list(findings).splitlines()
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[-1].endswith('`api.js:14`)'))

    def test_empty_lists(self):
        """Test placeholders for empty input."""
        self.assertEqual(format_dataflow_list([]), NO_FLOWS)
        self.assertEqual(format_key_findings([], []), NO_CONCERNS)

    def test_key_findings(self):
        """Test secrets come before flow findings."""
        text = format_key_findings([make_finding()], ['JWT'])
        lines = text.splitlines()
        self.assertEqual(lines[0], '- Secrets detected: JWT')
        self.assertEqual(lines[1], '- **High** req.query.id flows to database-query (`api.js:5`)')


class TestRenderSecuritySummary(unittest.TestCase):
    """Test cases for the full summary."""

    def test_summary_sections(self):
        """Test the rendered summary for a review with one flow."""
        code = 'const id = req.query.id;\ndb.query(id);\n'
        result = ChangeReviewer().review({'api.js': code})
        summary = render_security_summary(result)

        self.assertTrue(summary.startswith('## Security Review'))
        self.assertIn('**Overall risk:** `High`', summary)
        self.assertIn('**Confidence:** `Medium`', summary)
        self.assertIn('### Data-flow highlights', summary)
        self.assertIn('- req.query.id → database-query  (`api.js:1` → `api.js:2`)', summary)
        self.assertIn('`Light` | ⏱️ `~5 minutes`', summary)

    def test_summary_without_findings(self):
        """Test placeholders appear when nothing was found."""
        result = ChangeReviewer().review({'safe.js': 'const a = 1;\n'})
        summary = render_security_summary(result)
        self.assertIn('**Overall risk:** `None`', summary)
        self.assertIn(NO_CONCERNS, summary)
        self.assertIn(NO_FLOWS, summary)


if __name__ == '__main__':
    unittest.main()
