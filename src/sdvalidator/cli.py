"""Command-line interface for the structured data validator."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from sdvalidator.analyzer import AnalysisReport, StructuredDataAnalyzer
from sdvalidator.config import load_thresholds, settings
from sdvalidator.engine import ValidationEngine
from sdvalidator.exceptions import StructuredDataError
from sdvalidator.logging_config import setup_logging
from sdvalidator.schema_registry import load_registry

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


def read_source(path: str) -> str:
    """Read HTML from a file path, or from stdin when path is `-`."""
    if path == STDIN_PATH:
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def print_report(source: str, report: AnalysisReport):
    """Print an analysis report in a formatted way.

    Args:
        source: File path (or `-`) the HTML came from
        report: AnalysisReport for that document
    """
    validation = report.validation
    stats = validation.stats

    print(f"\n{'=' * 60}")
    print(f"Structured Data Analysis for: {source}")
    print(f"{'=' * 60}")

    if not report.has_structured_data:
        print("\n❌ No structured data found")
    else:
        status = "✅ Valid" if validation.valid else "❌ Invalid"
        print(f"\n📊 Score: {validation.score}/100 ({status})")
        print(f"\nFormats:")
        for name, presence in report.formats.items():
            marker = "✓" if presence.found else "-"
            print(f"  {marker} {name}: {presence.items} items")
        print(
            f"\nItems: {stats.total_items} total, {stats.valid_items} valid, "
            f"{stats.total_errors} errors, {stats.total_warnings} warnings"
        )

    if report.schema_types:
        print(f"\n🏷️  Schema Types:")
        for type_name, count in sorted(report.schema_types.items()):
            print(f"  • {type_name} ({count})")

    for entry in validation.validation_results:
        if not entry.errors and not entry.warnings:
            continue
        label = ", ".join(entry.types) or "placeholder"
        print(f"\nItem #{entry.index + 1} [{entry.format or 'unknown'}] {label}")
        for issue in entry.errors:
            print(f"  ❌ {issue.location or '(root)'}: {issue.message} [{issue.code}]")
        for issue in entry.warnings:
            print(f"  ⚠️  {issue.location or '(root)'}: {issue.message} [{issue.code}]")

    summary = validation.summary
    if summary.suggestions:
        print(f"\n🔎 Suggestions:")
        for suggestion in summary.suggestions:
            print(f"  • {suggestion.message}")

    if report.recommendations:
        print(f"\n💡 Recommendations:")
        for rec in report.recommendations:
            print(f"  • [{rec.importance}] {rec.message}")

    print(f"\n{'=' * 60}\n")


def write_output(output: str, output_file: Optional[str]):
    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Results written to {output_file}")
    else:
        print(output)


def build_analyzer(args) -> StructuredDataAnalyzer:
    """Analyzer configured from --registry and --thresholds."""
    thresholds = load_thresholds(getattr(args, "thresholds", None))
    registry = load_registry(getattr(args, "registry", None))
    engine = ValidationEngine(registry=registry, thresholds=thresholds)
    return StructuredDataAnalyzer(engine=engine, thresholds=thresholds)


def validate_command(args) -> int:
    """Validate structured data in one or more HTML documents."""
    try:
        analyzer = build_analyzer(args)
    except (StructuredDataError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    exit_code = 0
    results = []
    for path in args.paths:
        try:
            html = read_source(path)
            report = analyzer.analyze(html, base_url=args.base_url)
        except (StructuredDataError, OSError) as e:
            logger.error(f"Could not analyze {path}: {e}")
            print(f"Error: {path}: {e}", file=sys.stderr)
            results.append({"source": path, "error": str(e)})
            exit_code = 1
            continue

        if args.fail_on_error and not report.valid:
            exit_code = 1

        if args.output == "text":
            print_report(path, report)
        else:
            results.append({"source": path, "report": report.to_dict()})

    if args.output == "json":
        output = json.dumps(results, indent=2, default=str)
        try:
            write_output(output, args.output_file)
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return exit_code


def types_command(args) -> int:
    """List the schema types known to the registry."""
    try:
        registry = load_registry(args.registry)
    except StructuredDataError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for name in registry.type_names:
        definition = registry.get(name)
        required = ", ".join(definition.required) or "-"
        line = f"{name}  (required: {required})"
        if definition.extends:
            line += f"  extends {definition.extends}"
        print(line)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdvalidator",
        description="Structured Data Validator - Extract and validate JSON-LD, Microdata and RDFa",
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper(),
        help="Set logging verbosity (default: SDV_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=settings.LOG_FILE,
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser(
        "validate", help="Validate structured data in HTML files."
    )
    validate_parser.add_argument(
        "paths", nargs="+", help="HTML files to validate ('-' reads stdin)"
    )
    validate_parser.add_argument(
        "--base-url",
        help="URL used to resolve relative links in the documents",
    )
    validate_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    validate_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    validate_parser.add_argument(
        "--registry",
        help="YAML or JSON file with extra schema type definitions",
    )
    validate_parser.add_argument(
        "--thresholds",
        help="JSON file with validation thresholds",
    )
    validate_parser.add_argument(
        "--fail-on-error",
        action="store_true",
        help="Exit with status 1 when a document has invalid structured data",
    )
    validate_parser.set_defaults(func=validate_command)

    types_parser = subparsers.add_parser(
        "types", help="List the schema types the validator knows."
    )
    types_parser.add_argument(
        "--registry",
        help="YAML or JSON file with extra schema type definitions",
    )
    types_parser.set_defaults(func=types_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, "log_file", None),
    )

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
