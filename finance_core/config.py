"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    db_path: Path = field(
        default_factory=lambda: Path(os.getenv("FINANCE_TRACKER_DB_PATH", "data/finance.db"))
    )
    environment: str = field(
        default_factory=lambda: os.getenv("FINANCE_TRACKER_ENV", "prod").lower()
    )
    allowed_origins: List[str] = field(
        default_factory=lambda: _split_origins(os.getenv("FINANCE_TRACKER_ALLOWED_ORIGINS"))
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("FINANCE_TRACKER_LOG_LEVEL", "INFO").upper()
    )
    host: str = field(default_factory=lambda: os.getenv("FINANCE_TRACKER_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("FINANCE_TRACKER_PORT", "5000")))

    @property
    def is_dev(self) -> bool:
        return self.environment in {"dev", "development"}


def get_settings(db_path: Optional[Path] = None) -> Settings:
    settings = Settings()
    if db_path is not None:
        settings.db_path = Path(db_path)
    return settings


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout carries command output."""
    root = logging.getLogger()
    # Replace a previous handler so repeated calls rebind to the current stderr.
    for existing in [h for h in root.handlers if getattr(h, "_finance_tracker", False)]:
        root.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._finance_tracker = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
