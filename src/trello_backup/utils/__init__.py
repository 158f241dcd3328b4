"""
Utility modules for Trello backup operations.

This package contains the shared HTTP client and logging helpers.
"""

from .api_client import TrelloAPIClient
from .logger import setup_logger

__all__ = [
    "TrelloAPIClient",
    "setup_logger",
]
