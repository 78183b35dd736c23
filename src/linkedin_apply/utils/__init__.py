"""Utilities for logging, selectors and search URLs."""

from .logging_config import configure_logging, get_logger
from .search_url import build_search_params, build_search_url

__all__ = [
    "configure_logging",
    "get_logger",
    "build_search_params",
    "build_search_url",
]
