"""
FRED data ingestion.
"""

from .client import FredClient, FredObservation
from .ingest import ingest_all, store_series

__all__ = [
    "FredClient",
    "FredObservation",
    "ingest_all",
    "store_series",
]
