"""
Configuration and data loading/saving for ShareLedger
"""
from __future__ import annotations
import json
import os
from typing import Dict, Optional

from computations import validate_shares
from errors import ValidationError
from models import ExpenseRecord, ShareMapping
from utils import app_dir

DEFAULT_SHARES: ShareMapping = {
    "Aaqib": 0.30,
    "Nawab": 0.30,
    "Tufail Alam Sir": 0.40,
}

SHARES_FILE = "shares.json"
STORE_FILE = "store.json"
EXPENSES_FILE = "expenses.json"
DEFAULT_TABLE = "expenses"


def shares_path() -> str:
    """Location of the saved share mapping"""
    return os.path.join(app_dir(), SHARES_FILE)


def load_shares(path: str) -> ShareMapping:
    """Load share mapping from JSON file, falling back to the default split"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return dict(DEFAULT_SHARES)
    raw = data.get("shares") if isinstance(data, dict) else None
    if not isinstance(raw, dict):
        raise ValidationError(f"{path} does not contain a share mapping.")
    try:
        shares = {str(k): float(v) for k, v in raw.items()}
    except (TypeError, ValueError):
        raise ValidationError(f"{path} has a non-numeric share.") from None
    validate_shares(shares)
    return shares


def save_shares(path: str, shares: ShareMapping) -> None:
    """Save share mapping to JSON file"""
    validate_shares(shares)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"shares": shares}, f, ensure_ascii=False, indent=2)


def load_store_settings(path: Optional[str] = None) -> Dict[str, str]:
    """
    Resolve which ledger store to use.
    SUPABASE_URL / SUPABASE_KEY in the environment win over store.json.
    Returns {"backend": "supabase", "url", "key", "table"} or
    {"backend": "local", "path"}.
    """
    path = path or os.path.join(app_dir(), STORE_FILE)
    data: dict = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        pass

    sb = data.get("supabase", {}) or {}
    url = os.environ.get("SUPABASE_URL") or sb.get("url")
    key = os.environ.get("SUPABASE_KEY") or sb.get("key")
    if url and key:
        return {
            "backend": "supabase",
            "url": url,
            "key": key,
            "table": data.get("table", DEFAULT_TABLE),
        }
    return {
        "backend": "local",
        "path": data.get("path") or os.path.join(os.path.dirname(path), EXPENSES_FILE),
    }


def record_from_row(row: dict) -> ExpenseRecord:
    """Convert a store row to an ExpenseRecord"""
    return ExpenseRecord(
        id=str(row["id"]),
        description=row.get("description", ""),
        amount=float(row["amount"]),
        paid_by=row.get("paid_by", ""),
        expense_date=str(row["expense_date"])[:10],
        created_at=str(row.get("created_at") or ""),
    )


def record_to_row(record: ExpenseRecord) -> dict:
    """Convert an ExpenseRecord to a store row"""
    return {
        "id": record.id,
        "description": record.description,
        "amount": record.amount,
        "paid_by": record.paid_by,
        "expense_date": record.expense_date,
        "created_at": record.created_at,
    }
