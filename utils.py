"""
Utility functions for ShareLedger application
"""
from __future__ import annotations
import os
from datetime import date, datetime, timezone
from typing import Optional

HOME_ENV = "SHARELEDGER_HOME"


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def now_iso() -> str:
    """Current UTC timestamp in ISO-8601"""
    return datetime.now(timezone.utc).isoformat()


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def format_date_short(s: str) -> str:
    """YYYY-MM-DD -> dd/mm/yyyy"""
    return parse_date(s).strftime("%d/%m/%Y")


def format_date_long(s: str) -> str:
    """YYYY-MM-DD -> dd Mon yyyy"""
    return parse_date(s).strftime("%d %b %Y")


def safe_float(x: str, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert string to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def app_dir() -> str:
    """
    Get application data directory.
    SHARELEDGER_HOME wins; otherwise ~/Library/Application Support/ShareLedger.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get(HOME_ENV)
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "ShareLedger")
    os.makedirs(path, exist_ok=True)
    return path
