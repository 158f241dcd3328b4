"""
Configuration management for Trello backup operations.

This module provides a dataclass for managing configuration settings,
environment variable loading, and validation of the loaded values.
Credentials are never part of the configuration; they are passed on the
command line for a single run only.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

TRELLO_BASE_URL = "https://trello.com"


@dataclass
class BackupConfig:
    """Configuration for backup operations."""

    # Trello Configuration
    base_url: str = field(default_factory=lambda: os.getenv("TRELLO_BASE_URL", TRELLO_BASE_URL))

    # Backup Settings
    output_dir: Path = field(default_factory=lambda: Path(os.getenv("TRELLO_BACKUP_OUTPUT_DIR", ".")))
    download_chunk_size: int = field(default_factory=lambda: int(os.getenv("DOWNLOAD_CHUNK_SIZE", "65536")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE"))
    log_max_size: int = field(default_factory=lambda: int(os.getenv("LOG_MAX_SIZE", "10485760")))  # 10MB
    log_backup_count: int = field(default_factory=lambda: int(os.getenv("LOG_BACKUP_COUNT", "5")))

    # Development
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    verbose: bool = field(default_factory=lambda: os.getenv("VERBOSE", "false").lower() == "true")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.output_dir = Path(self.output_dir)
        self.validate()

    def validate(self) -> None:
        """Validate configuration settings."""
        if not (self.base_url.startswith("https://") or self.base_url.startswith("http://")):
            raise ValueError("TRELLO_BASE_URL must be an http:// or https:// URL")

        if self.download_chunk_size <= 0:
            raise ValueError("DOWNLOAD_CHUNK_SIZE must be positive")

        if self.log_backup_count < 0:
            raise ValueError("LOG_BACKUP_COUNT must be non-negative")


def get_backup_config(**overrides) -> BackupConfig:
    """
    Get backup configuration with optional overrides.

    Args:
        **overrides: Configuration values to override

    Returns:
        BackupConfig instance
    """
    config = BackupConfig()

    # Apply overrides
    for key, value in overrides.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            raise ValueError(f"Unknown configuration key: {key}")

    config.output_dir = Path(config.output_dir)
    config.validate()
    return config
