from __future__ import annotations
from typing import List

import pytest

from errors import StoreUnavailable
from models import ExpenseRecord, NewExpense
from store import LedgerStore


def make_record(id, amount, paid_by, expense_date="2024-03-01", created_at=None, description=None):
    return ExpenseRecord(
        id=str(id),
        description=description or f"expense {id}",
        amount=float(amount),
        paid_by=paid_by,
        expense_date=expense_date,
        created_at=created_at or f"2024-03-01T00:00:{int(id):02d}+00:00",
    )


class MemoryStore(LedgerStore):
    """In-memory store that can be switched offline"""

    def __init__(self, records: List[ExpenseRecord] = None):
        self.records = list(records or [])
        self.offline = False
        self.next_id = 100
        self.calls = []

    def _check(self, op):
        self.calls.append(op)
        if self.offline:
            raise StoreUnavailable(f"{op} failed")

    def list_expenses(self):
        self._check("list")
        return sorted(self.records, key=lambda r: r.expense_date, reverse=True)

    def insert(self, expense: NewExpense):
        self._check("insert")
        self.next_id += 1
        self.records.append(ExpenseRecord(
            id=str(self.next_id),
            description=expense.description,
            amount=expense.amount,
            paid_by=expense.paid_by,
            expense_date=expense.expense_date,
            created_at=f"2024-04-01T00:00:{self.next_id % 60:02d}+00:00",
        ))

    def delete_by_id(self, expense_id):
        self._check("delete")
        self.records = [r for r in self.records if r.id != expense_id]


@pytest.fixture
def shares():
    return {"Alice": 0.3, "Bob": 0.3, "Carol": 0.4}


@pytest.fixture
def records():
    return [
        make_record(1, 100, "Alice", "2024-03-01"),
        make_record(2, 45.5, "Bob", "2024-03-05"),
        make_record(3, 100, "Carol", "2024-02-20"),
        make_record(4, 12.25, "Alice", "2024-03-05"),
        make_record(5, 45.5, "Carol", "2024-01-10"),
    ]


@pytest.fixture
def memory_store(records):
    return MemoryStore(records)
