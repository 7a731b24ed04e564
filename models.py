"""
Data models for ShareLedger application
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict

# member -> fraction of every expense (sums to 1)
ShareMapping = Dict[str, float]


@dataclass
class ExpenseRecord:
    """Stored expense, as returned by the ledger store"""
    id: str
    description: str
    amount: float
    paid_by: str
    expense_date: str  # YYYY-MM-DD
    created_at: str  # ISO timestamp assigned by the store


@dataclass
class NewExpense:
    """Validated expense that has not been stored yet"""
    description: str
    amount: float
    paid_by: str
    expense_date: str  # YYYY-MM-DD
