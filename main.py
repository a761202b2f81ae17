"""Command-line entry point for the business collection workflow."""

from __future__ import annotations

import asyncio
import json
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import List, Optional

from loguru import logger

from business_collector.config import collector_settings
from business_collector.industry import get_industry_suggestions
from business_collector.logging import setup_logging
from business_collector.pipeline import run_collection, sources_from_names


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Collect, deduplicate and rank small-business records")
    parser.add_argument("category", nargs="?", help='Business category (e.g., "real estate agent")')
    parser.add_argument("geography", nargs="?", help='Location (e.g., "Tampa, FL" or "Florida")')
    parser.add_argument(
        "--max",
        dest="max_results",
        type=int,
        default=collector_settings.default_max_results,
        help="Maximum number of records to return",
    )
    parser.add_argument(
        "--sources",
        default=None,
        help="Comma separated subset of sources: google, opencorporates, llm (default: all configured)",
    )
    parser.add_argument("--quick", action="store_true", help="Stop at the first source that returns results")
    parser.add_argument("--output", help="Optional JSON file path for exporting results")
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--suggest", metavar="PARTIAL", help="Print supported categories matching PARTIAL and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args: Namespace = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.suggest is not None:
        print("\n".join(get_industry_suggestions(args.suggest)))
        return

    if not args.category or not args.geography:
        parser.error("category and geography are required")
    if args.max_results < 1:
        parser.error("--max must be a positive integer")

    try:
        sources = sources_from_names(args.sources.split(",")) if args.sources else None
    except ValueError as exc:
        parser.error(str(exc))

    result = asyncio.run(
        run_collection(args.category, args.geography, args.max_results, sources=sources, quick=args.quick)
    )
    serialized = result.to_payload()

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(json.dumps(serialized, indent=2))
        logger.info("Saved {} businesses to {}", result.meta.total_found, output_path)
    else:
        print(json.dumps(serialized, indent=2))


if __name__ == "__main__":
    main()
