"""
Backup modules for Trello account backup operations.

This package handles login, board discovery, board export, asset
extraction and download, and backup orchestration.
"""

from .manager import TrelloBackupManager
from .authenticator import (
    SessionAuthenticator,
    TokenCookieAuthenticator,
    CredentialAuthenticator,
    create_authenticator,
)
from .account import AccountQuery, Board
from .board_exporter import BoardExporter
from .asset_extractor import AssetExtractor, AssetKind, AssetReference
from .asset_downloader import AssetDownloader

__all__ = [
    "TrelloBackupManager",
    "SessionAuthenticator",
    "TokenCookieAuthenticator",
    "CredentialAuthenticator",
    "create_authenticator",
    "AccountQuery",
    "Board",
    "BoardExporter",
    "AssetExtractor",
    "AssetKind",
    "AssetReference",
    "AssetDownloader",
]
