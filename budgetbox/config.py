"""Configuration management for BudgetBox.

This module centralizes all configuration values including paths,
the remote service location, demo credentials and environment
variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in budgetbox/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Local state
DATA_DIR = Path(os.getenv("BUDGETBOX_DATA_DIR", _PROJECT_ROOT / "data"))
STORE_NAME = "budgetbox-store"
STORE_VERSION = 1
STATE_PATH = Path(
    os.getenv("BUDGETBOX_STATE_PATH", DATA_DIR / f"{STORE_NAME}.json")
).resolve()
HISTORY_LIMIT = 20

# Remote service
API_BASE = os.getenv("BUDGETBOX_API_BASE", "http://localhost:4000").rstrip("/")
SERVICE_NAME = "budgetbox-backend"
DEMO_EMAIL = os.getenv("DEMO_EMAIL", "hire-me@anshumat.org")
DEMO_PASSWORD = os.getenv("DEMO_PASSWORD", "HireMe@2025!")
PORT = int(os.getenv("PORT", "4000"))
DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL") or None


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return 10.0
    try:
        seconds = float(value)
    except ValueError:
        return 10.0
    return seconds if seconds > 0 else None


def _parse_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


# Seconds before a client request is abandoned; None waits indefinitely.
HTTP_TIMEOUT = _parse_timeout(os.getenv("BUDGETBOX_HTTP_TIMEOUT"))
REQUIRE_AUTH = _parse_flag(os.getenv("BUDGETBOX_REQUIRE_AUTH"))


def get_sqlite_path(database_url: Optional[str] = None) -> Optional[Path]:
    """Resolve a ``sqlite:///`` URL (or bare file path) to a filesystem path.

    Returns ``None`` when no database is configured, in which case the
    service keeps records in memory.
    """
    url = database_url if database_url is not None else DATABASE_URL
    if not url:
        return None
    if url.startswith("sqlite:///"):
        return Path(url[len("sqlite:///"):]).expanduser()
    if "://" in url:
        raise ValueError(f"Unsupported database URL: {url}")
    return Path(url).expanduser()
