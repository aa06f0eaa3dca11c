"""
Review Analysis CLI
===================

Command-line interface for the review analysis engine.

Commands:
    analyze     - Analyze reviews from a JSON file or the database
    settings    - Show the effective analysis settings

Usage:
    python -m src.orchestrator.cli analyze --input reviews.json
    python -m src.orchestrator.cli analyze --input reviews.json --context context.json --json
    python -m src.orchestrator.cli analyze --business "Blue Door Cafe"
    python -m src.orchestrator.cli settings
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from src.data.config import get_settings
from src.reviews.enhanced_analyzer import EnhancedReviewAnalyzer
from src.reviews.review_loader import load_reviews_from_db, load_reviews_from_json
from src.reviews.review_models import BusinessContext, EnhancedAnalysisResult

from .logging_config import business_context, configure_logging

logger = logging.getLogger(__name__)


def _load_context(path: Optional[str]) -> Optional[BusinessContext]:
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return BusinessContext.from_dict(json.load(f))


def _load_reviews(args):
    if args.input:
        return load_reviews_from_json(args.input)

    import psycopg2

    db = get_settings().database
    conn = psycopg2.connect(**db.connection_dict)
    try:
        return load_reviews_from_db(conn, args.business, limit=args.limit)
    finally:
        conn.close()


def print_report(result: EnhancedAnalysisResult, title: str):
    """Human-readable summary of an analysis result."""
    print("=" * 60)
    print(f"REVIEW ANALYSIS: {title}")
    print("=" * 60)
    print(f"Reviews analyzed: {result.reviews_analyzed} ({result.reviews_with_dates} dated)")
    print()

    print("Temporal patterns:")
    for p in result.temporal_patterns:
        print(f"  [{p.pattern.value}] {p.description} (strength {p.strength:.2f})")

    print("\nHistorical trends:")
    for t in result.historical_trends:
        forecast = ""
        if t.forecast:
            forecast = f", forecast {t.forecast.predicted_value:g} for {t.forecast.next_period}"
        print(f"  {t.metric}: {t.trend.value} ({t.timeframe}{forecast})")

    print("\nClusters:")
    for c in result.review_clusters:
        staff = f", staff: {', '.join(c.staff)}" if c.staff else ""
        print(f"  {c.name}: {c.review_count} reviews, {c.average_rating:.1f} stars, {c.sentiment.value}{staff}")
    summary = result.cluster_summary
    if summary.total_clusters:
        print(
            f"  Largest: {summary.largest_cluster} | Most positive: {summary.most_positive_cluster} | "
            f"Most negative: {summary.most_negative_cluster} | Unclustered reviews: {summary.unclustered_reviews}"
        )

    print("\nSeasons:")
    for s in result.seasonal_patterns:
        print(
            f"  {s.name} ({s.date_range}): {s.metrics.avg_rating:.2f} stars, "
            f"{s.comparison_vs_year_average:+.1f}% vs year"
        )
        for rec in s.recommendations:
            print(f"    - {rec}")

    for heading, items in (
        ("Key findings", result.insights.key_findings),
        ("Opportunities", result.insights.opportunities),
        ("Risks", result.insights.risks),
    ):
        print(f"\n{heading}:")
        for item in items:
            print(f"  * {item}")


def cmd_analyze(args):
    """Run the analysis and print a report or JSON."""
    try:
        with business_context(args.business or args.input):
            context = _load_context(args.context)
            reviews = _load_reviews(args)
            config = get_settings().analysis.to_analysis_config()
            result = EnhancedReviewAnalyzer(config).analyze(reviews, context)
    except Exception as e:
        print(f"ERROR: Analysis failed: {e}", file=sys.stderr)
        logger.exception("Analysis failed")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        print_report(result, args.business or args.input)
    return 0


def cmd_settings(args):
    """Show effective settings."""
    try:
        settings = get_settings()
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return 1

    print(json.dumps({
        "analysis": asdict(settings.analysis),
        "logging": asdict(settings.logging),
        "environment": settings.environment,
    }, indent=2))
    return 0


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="review-insights",
        description="Enhanced review analysis CLI",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a business's reviews")
    source = analyze_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        help="JSON file with a list of reviews",
    )
    source.add_argument(
        "--business",
        help="Business name to load from the reviews table",
    )
    analyze_parser.add_argument(
        "--context",
        help="JSON file describing the business (type, hours, price range, location)",
    )
    analyze_parser.add_argument(
        "--limit",
        type=int,
        default=5000,
        help="Maximum reviews to load from the database (default: 5000)",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    subparsers.add_parser("settings", help="Show effective analysis settings")

    args = parser.parse_args(argv)

    configure_logging(get_settings().logging, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "analyze": cmd_analyze,
        "settings": cmd_settings,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
