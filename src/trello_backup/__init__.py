"""
Trello Backup

Backs up every open Trello board of an account: the full JSON export of
each board plus its attachment and background files.
"""

__version__ = "1.0.0"
__author__ = "Trello Backup"

from .backup.manager import TrelloBackupManager
from .config import BackupConfig

__all__ = [
    "TrelloBackupManager",
    "BackupConfig",
    "__version__",
]
