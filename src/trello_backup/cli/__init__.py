"""
Command-line interface module for backup operations.

This package provides the CLI entry point with a run summary and
error reporting.
"""

from .backup_cli import backup_app

__all__ = [
    "backup_app",
]
