"""
Centralized settings and path configuration for the quote tool.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


DATA_DIR_ENV = "QUOTE_TOOL_DATA_DIR"
LOG_LEVEL_ENV = "QUOTE_TOOL_LOG_LEVEL"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Data files
    documents_file: Path
    price_book_file: Path
    counters_file: Path

    # Exports
    pipeline_export: Path

    log_level: str = "INFO"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings, honouring the data-dir and log-level env overrides."""
        root = get_project_root()
        env_dir = os.getenv(DATA_DIR_ENV)
        data = Path(data_dir or env_dir or root / 'data')

        return cls(
            project_root=root,
            data_dir=data,
            documents_file=data / 'documents.json',
            price_book_file=data / 'price_book.json',
            counters_file=data / 'counters.json',
            pipeline_export=data / 'exports' / 'pipeline.csv',
            log_level=os.getenv(LOG_LEVEL_ENV, 'INFO').upper(),
        )

    def ensure_dirs(self):
        """Create the data directory if it does not exist yet."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings (tests switch data dirs through the env)."""
    global _settings
    _settings = None
