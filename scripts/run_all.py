#!/usr/bin/env python3
"""
Ingest FRED series and upsert their embeddings into the vector store.

Usage:
    python scripts/run_all.py [--series ID ...] [--skip-ingest] [--skip-upsert]

Options:
    --series ID         Series to ingest (repeatable; default: catalog series)
    --clean             Clean observations before storing
    --skip-ingest       Don't fetch from FRED, only upsert stored observations
    --skip-upsert       Only fetch and store observations
    --batch-size N      Vectors per upsert call (default: EMBEDDING_BATCH_SIZE)
"""

import argparse
import logging
import sys
from pathlib import Path

# Allow running from a checkout without installing
parent_dir = Path(__file__).resolve().parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from config import get_default_series_ids, get_settings  # noqa: E402
from db import init_db  # noqa: E402
from fred import ingest_all  # noqa: E402
from rag import EmbeddingUpserter  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Ingest FRED series and upsert embeddings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--series",
        action="append",
        metavar="ID",
        help="Series to ingest (repeatable; default: catalog series)",
    )
    parser.add_argument(
        "--clean", action="store_true", help="Clean observations before storing"
    )
    parser.add_argument(
        "--skip-ingest",
        action="store_true",
        help="Don't fetch from FRED, only upsert stored observations",
    )
    parser.add_argument(
        "--skip-upsert", action="store_true", help="Only fetch and store observations"
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Vectors per upsert call (default: EMBEDDING_BATCH_SIZE)",
    )

    args = parser.parse_args()
    init_db()

    if not args.skip_ingest:
        series_ids = args.series or get_default_series_ids()
        if not series_ids:
            logger.error("No series to ingest. Pass --series or fill config/series.yaml.")
            sys.exit(1)
        results = ingest_all(series_ids, clean=args.clean)
        for series_id, count in results.items():
            logger.info(f"  {series_id}: {count} observations")
        if not results:
            logger.error("No series were ingested")
            sys.exit(1)

    if not args.skip_upsert:
        batch_size = args.batch_size or get_settings().embedding_batch_size
        total = EmbeddingUpserter(batch_size=batch_size).upsert_all()
        logger.info(f"Done. {total} vectors upserted.")


if __name__ == "__main__":
    main()
