#!/usr/bin/env python3
"""
Run regression analysis on stored FRED series.

Usage:
    python scripts/analyze_series.py [SERIES ...] [--summarize] [--provider NAME]

Options:
    --summarize         Ask a chat provider to summarize each report
    --provider NAME     Chat provider for --summarize (default: CHAT_PROVIDER)
    --output FORMAT     Output format: text, json (default: text)
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Allow running from a checkout without installing
parent_dir = Path(__file__).resolve().parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from analysis import analyze_series, build_summary_prompt, summarize  # noqa: E402
from config import get_default_series_ids  # noqa: E402
from db import init_db  # noqa: E402
from errors import FredRelayError  # noqa: E402
from providers import registry  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Regression analysis of stored FRED series",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "series", nargs="*", help="Series to analyze (default: catalog series)"
    )
    parser.add_argument(
        "--summarize",
        action="store_true",
        help="Ask a chat provider to summarize each report",
    )
    parser.add_argument(
        "--provider", type=str, help="Chat provider for --summarize"
    )
    parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    args = parser.parse_args()
    init_db()

    provider = None
    if args.summarize:
        try:
            provider = registry.resolve(args.provider)
        except ValueError as e:
            logger.error(str(e))
            sys.exit(1)

    for series_id in args.series or get_default_series_ids():
        result = analyze_series(series_id)
        if result is None:
            logger.warning(f"No data found for series {series_id}.")
            continue

        if args.output == "json":
            print(json.dumps(result.to_dict(), indent=2))
        else:
            print(build_summary_prompt(result))

        if provider is not None:
            try:
                print(f"\n--- {provider.name} summary ---\n{summarize(result, provider)}\n")
            except FredRelayError as e:
                logger.error(f"Summary for {series_id} failed: {e}")


if __name__ == "__main__":
    main()
