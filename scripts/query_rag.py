#!/usr/bin/env python3
"""
Query the vector store directly.

Usage:
    python scripts/query_rag.py "federal funds rate in 2020" [--top-k N]
"""

import argparse
import logging
import sys
from pathlib import Path

# Allow running from a checkout without installing
parent_dir = Path(__file__).resolve().parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from rag import RetrievalService  # noqa: E402
from rag.retriever import DEFAULT_TOP_K  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Query the FRED vector store")
    parser.add_argument("query", help="Free-text query")
    parser.add_argument(
        "--top-k",
        type=int,
        default=DEFAULT_TOP_K,
        help=f"Number of matches to return (default: {DEFAULT_TOP_K})",
    )

    args = parser.parse_args()

    matches = RetrievalService().query(args.query, args.top_k)
    if not matches:
        logger.info("No matches found.")
        return

    for match in matches:
        text = (match.metadata or {}).get("text", "")
        print(f"{match.score:.4f}  {match.id}  {text}")


if __name__ == "__main__":
    main()
