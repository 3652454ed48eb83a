"""
Config package: environment settings and the series catalog.
"""

from .settings import (
    Settings,
    get_api_key,
    get_default_series_ids,
    get_first_api_key,
    get_retrieval_top_k,
    get_settings,
    load_catalog,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_api_key",
    "get_first_api_key",
    "load_catalog",
    "get_default_series_ids",
    "get_retrieval_top_k",
]
