"""
Business logic and computations for ShareLedger
"""
from __future__ import annotations
import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from errors import ValidationError
from models import ExpenseRecord, ShareMapping

logger = logging.getLogger(__name__)

SHARE_TOLERANCE = 0.001
SETTLED_TOLERANCE = 0.005

ALL_MEMBERS = "all"
SORT_DATE = "date"
SORT_AMOUNT = "amount"
SORT_RECENT = "recent"
SORT_KEYS = (SORT_DATE, SORT_AMOUNT, SORT_RECENT)

_SORT_FIELDS = {
    SORT_DATE: lambda r: r.expense_date,
    SORT_AMOUNT: lambda r: float(r.amount),
    SORT_RECENT: lambda r: r.created_at,
}


def validate_shares(shares: ShareMapping) -> None:
    """Raise ValidationError unless every fraction is in [0, 1] and they sum to 1"""
    if not shares:
        raise ValidationError("At least one member is required.")
    for member, frac in shares.items():
        if not member or not member.strip():
            raise ValidationError("Member names cannot be blank.")
        if not math.isfinite(frac) or not (0 <= frac <= 1):
            raise ValidationError(f"Share for {member} must be between 0 and 1.")
    s = sum(shares.values())
    if not abs(s - 1.0) <= SHARE_TOLERANCE:
        raise ValidationError(f"Shares must add up to 100% (currently {s * 100:.1f}%).")


def equal_shares(members: Sequence[str]) -> ShareMapping:
    """Equal split across members"""
    n = max(1, len(members))
    return {m: 1.0 / n for m in members}


def compute_balances(records: Iterable[ExpenseRecord], shares: ShareMapping) -> Dict[str, float]:
    """
    Net balance per member.
    The payer is credited the full amount, then every member is debited
    amount * share. Positive -> gets back; negative -> owes.
    A payer missing from the mapping gets no credit (logged).
    """
    balances = {m: 0.0 for m in shares}
    for r in records:
        amount = float(r.amount)
        if r.paid_by in balances:
            balances[r.paid_by] += amount
        else:
            logger.warning("Expense %s paid by unknown member %r; credit dropped", r.id, r.paid_by)
        for member, frac in shares.items():
            balances[member] -= amount * frac
    return balances


def balance_status(balance: float) -> str:
    """Human label for a balance"""
    if balance > SETTLED_TOLERANCE:
        return "Gets back"
    if balance < -SETTLED_TOLERANCE:
        return "Owes"
    return "Settled"


def orphaned_records(records: Iterable[ExpenseRecord], shares: ShareMapping) -> List[ExpenseRecord]:
    """Records whose payer is not in the share mapping"""
    return [r for r in records if r.paid_by not in shares]


def total_amount(records: Iterable[ExpenseRecord]) -> float:
    """Sum of record amounts"""
    return sum(float(r.amount) for r in records)


def filter_records(records: Sequence[ExpenseRecord], member: Optional[str]) -> List[ExpenseRecord]:
    """Keep records paid by member; None or 'all' keeps everything"""
    if member is None or member == ALL_MEMBERS:
        return list(records)
    return [r for r in records if r.paid_by == member]


def sort_records(records: Sequence[ExpenseRecord], key: str) -> List[ExpenseRecord]:
    """Stable descending sort by date, amount or creation time"""
    try:
        field = _SORT_FIELDS[key]
    except KeyError:
        raise ValueError(f"Unknown sort key: {key!r}") from None
    # sorted() is stable with reverse=True too: ties keep store order
    return sorted(records, key=field, reverse=True)


def view_records(
    records: Sequence[ExpenseRecord],
    member: Optional[str] = None,
    key: str = SORT_DATE,
) -> List[ExpenseRecord]:
    """Filter then sort, for display and export"""
    return sort_records(filter_records(records, member), key)


def compute_transfers(net: Dict[str, float], eps: float = 1e-6) -> List[Tuple[str, str, float]]:
    """
    Compute transfers to settle debts.
    Greedy settlement: debtors pay creditors. net>0 creditor; net<0 debtor.
    Returns list of (debtor, creditor, amount) tuples.
    """
    creditors = [(p, v) for p, v in net.items() if v > eps]
    debtors = [(p, -v) for p, v in net.items() if v < -eps]
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        dname, damt = debtors[i]
        cname, camt = creditors[j]
        x = min(damt, camt)
        if x > eps:
            transfers.append((dname, cname, x))
        damt -= x
        camt -= x
        if damt <= eps:
            i += 1
        else:
            debtors[i] = (dname, damt)
        if camt <= eps:
            j += 1
        else:
            creditors[j] = (cname, camt)

    return transfers
