"""
Command-line interface for taintreview.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import config
from .models import RiskLevel
from .reviewer import ChangeReviewer, ReviewResult

EXIT_HIGH_RISK = 2


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="taintreview",
        description="Security review of code changes: tainted data flows and leaked secrets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze local files
  %(prog)s analyze path/to/file.js
  %(prog)s analyze path/to/directory/ -o results.json

  # Review a change set
  git diff main... > change.diff
  %(prog)s review --diff change.diff --root . --markdown
  %(prog)s review --diff change.diff --fail-on-high
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze local JavaScript/TypeScript/HTML files"
    )
    analyze_parser.add_argument(
        "path",
        type=str,
        help="Path to a file or directory to analyze",
    )
    _add_output_arguments(analyze_parser)

    # Review command
    review_parser = subparsers.add_parser(
        "review",
        help="Review a unified diff against the post-change checkout"
    )
    review_parser.add_argument(
        "--diff",
        type=str,
        required=True,
        help="Unified diff file, or '-' for stdin",
    )
    review_parser.add_argument(
        "--root",
        type=str,
        default=".",
        help="Directory holding the post-change files (default: .)",
    )
    review_parser.add_argument(
        "--fail-on-high",
        action="store_true",
        help=f"Exit with code {EXIT_HIGH_RISK} when the overall risk is High or Critical",
    )
    _add_output_arguments(review_parser)

    # Global arguments
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    validation = config.validate()
    for warning in validation["warnings"]:
        print(f"Warning: {warning}", file=sys.stderr)
    if not validation["valid"]:
        for problem in validation["missing"]:
            print(f"Error: {problem}", file=sys.stderr)
        return 1

    # Execute command
    if args.command == "analyze":
        return handle_analyze(args)
    elif args.command == "review":
        return handle_review(args)
    else:
        parser.print_help()
        return 1


def _add_output_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "-o", "--output",
        type=str,
        help="Output file for JSON results (default: stdout)",
        default=None,
    )
    subparser.add_argument(
        "--markdown",
        action="store_true",
        help="Print a markdown security summary instead of plain text",
    )
    subparser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )


def _emit(reviewer: ChangeReviewer, result: ReviewResult, args) -> None:
    if args.output:
        reviewer.save_results(result, Path(args.output))
        print(f"Results saved to {args.output}")
    elif args.markdown:
        reviewer.print_markdown(result)
    else:
        reviewer.print_results(result)

    if result.unparsed_files:
        print(
            f"Note: {len(result.unparsed_files)} file(s) could not be parsed and were not analyzed",
            file=sys.stderr,
        )


def handle_analyze(args) -> int:
    """Handle the analyze command."""
    input_path = Path(args.path)
    if not input_path.exists():
        print(f"Error: Path '{args.path}' does not exist", file=sys.stderr)
        return 1

    reviewer = ChangeReviewer(verbose=args.verbose)

    try:
        result = reviewer.analyze(input_path)
        _emit(reviewer, result, args)
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def handle_review(args) -> int:
    """Handle the review command."""
    root = Path(args.root)
    if not root.is_dir():
        print(f"Error: Root '{args.root}' is not a directory", file=sys.stderr)
        return 1

    if args.diff == "-":
        diff_text = sys.stdin.read()
    else:
        diff_path = Path(args.diff)
        if not diff_path.is_file():
            print(f"Error: Diff file '{args.diff}' does not exist", file=sys.stderr)
            return 1
        diff_text = diff_path.read_text(encoding="utf-8", errors="ignore")

    reviewer = ChangeReviewer(verbose=args.verbose)

    try:
        result = reviewer.review_diff(diff_text, root)
        _emit(reviewer, result, args)

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    fail_on_high = args.fail_on_high or config.fail_on_high
    if fail_on_high and result.risk >= RiskLevel.HIGH:
        print(f"Risk level is {result.risk.label}", file=sys.stderr)
        return EXIT_HIGH_RISK
    return 0


if __name__ == "__main__":
    sys.exit(main())
