"""
Ledger session: the explicit state behind the ShareLedger window
(records, active shares, filter/sort selection, share editor).
"""
from __future__ import annotations
import logging
import math
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from computations import (
    ALL_MEMBERS,
    SORT_DATE,
    SORT_KEYS,
    compute_balances,
    compute_transfers,
    equal_shares,
    total_amount,
    validate_shares,
    view_records,
)
from config import save_shares
from csv_handler import export_records_to_csv
from errors import EmptySelection, StoreUnavailable, ValidationError
from models import ExpenseRecord, NewExpense, ShareMapping
from share_message import build_share_message
from store import LedgerStore
from utils import parse_date, safe_float

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]

VIEWING = "viewing"
EDITING = "editing"


def _log_notify(level: str, message: str) -> None:
    logger.log(logging.ERROR if level == "error" else logging.INFO, message)


def validate_new_expense(
    description: str,
    amount: str,
    paid_by: str,
    expense_date: str,
    shares: ShareMapping,
) -> NewExpense:
    """Check raw form input before anything reaches the store"""
    description = (description or "").strip()
    amount_text = str(amount if amount is not None else "").strip()
    paid_by = (paid_by or "").strip()
    expense_date = (expense_date or "").strip()

    if not description or not amount_text or not paid_by:
        raise ValidationError("Please fill all fields")
    amt = safe_float(amount_text, None)
    if amt is None or not math.isfinite(amt) or round(amt, 2) <= 0:
        raise ValidationError("Amount must be a positive number.")
    if paid_by not in shares:
        raise ValidationError(f"{paid_by} is not a member of the group.")
    try:
        parse_date(expense_date)
    except ValueError:
        raise ValidationError("Date must be YYYY-MM-DD.") from None
    return NewExpense(
        description=description,
        amount=round(amt, 2),
        paid_by=paid_by,
        expense_date=expense_date,
    )


def parse_share_percent(member: str, text: str) -> float:
    """Percent entry text -> fraction; typos are errors, not 0%"""
    pct = safe_float((text or "").strip(), None)
    if pct is None or not math.isfinite(pct):
        raise ValidationError(f"Share for {member} must be a number.")
    return pct / 100.0


class ShareEditor:
    """
    Draft editing of the share mapping.
    viewing -> editing (begin) -> viewing (commit or cancel).
    A failed commit leaves the editor in editing with the draft intact.
    """

    def __init__(self, session: "LedgerSession"):
        self.session = session
        self.state = VIEWING
        self.draft: Optional[ShareMapping] = None

    def _require(self, state: str) -> None:
        if self.state != state:
            raise ValidationError(f"Share editor is {self.state}, not {state}.")

    def begin(self) -> ShareMapping:
        self._require(VIEWING)
        self.draft = dict(self.session.shares)
        self.state = EDITING
        return self.draft

    def set_share(self, member: str, fraction: float) -> None:
        self._require(EDITING)
        if member not in self.draft:
            raise ValidationError(f"Unknown member: {member}")
        if not math.isfinite(fraction):
            raise ValidationError(f"Share for {member} must be a number.")
        self.draft[member] = float(fraction)

    def add_member(self, name: str, fraction: float = 0.0) -> None:
        self._require(EDITING)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Member name is required.")
        if name in self.draft:
            raise ValidationError("Name already exists.")
        self.draft[name] = float(fraction)

    def remove_member(self, name: str) -> None:
        self._require(EDITING)
        self.draft.pop(name, None)

    def equalize(self) -> None:
        self._require(EDITING)
        self.draft = equal_shares(list(self.draft))

    def commit(self) -> ShareMapping:
        """Validate the draft and make it the active mapping"""
        self._require(EDITING)
        validate_shares(self.draft)
        orphaned = sorted({r.paid_by for r in self.session.records if r.paid_by not in self.draft})
        if orphaned:
            raise ValidationError(
                "Cannot remove members who paid recorded expenses: " + ", ".join(orphaned)
            )
        self.session._replace_shares(self.draft)
        self.draft = None
        self.state = VIEWING
        return self.session.shares

    def cancel(self) -> None:
        self._require(EDITING)
        self.draft = None
        self.state = VIEWING


class LedgerSession:
    """Records, shares and view selection, with store round-trips"""

    def __init__(
        self,
        store: LedgerStore,
        shares: ShareMapping,
        notify: Optional[Notify] = None,
        shares_path: Optional[str] = None,
    ):
        validate_shares(shares)
        self.store = store
        self._shares: ShareMapping = dict(shares)
        self.notify: Notify = notify or _log_notify
        self.shares_path = shares_path
        self.records: List[ExpenseRecord] = []
        self.filter_member: str = ALL_MEMBERS
        self.sort_key: str = SORT_DATE
        self.editor = ShareEditor(self)

    # ---------- Shares ----------
    @property
    def shares(self) -> ShareMapping:
        return dict(self._shares)

    @property
    def members(self) -> List[str]:
        return list(self._shares)

    def _replace_shares(self, shares: ShareMapping) -> None:
        self._shares = dict(shares)
        if self.filter_member != ALL_MEMBERS and self.filter_member not in self._shares:
            self.filter_member = ALL_MEMBERS
        if self.shares_path:
            try:
                save_shares(self.shares_path, self._shares)
            except OSError:
                logger.exception("Error saving shares to %s", self.shares_path)
                self.notify("error", "Shares updated but could not be saved")
        logger.info("Share mapping updated: %s", self._shares)

    # ---------- Store round-trips ----------
    def refresh(self) -> bool:
        """Re-fetch all records; on failure keep what we had"""
        try:
            self.records = self.store.list_expenses()
        except StoreUnavailable:
            logger.exception("Error fetching expenses")
            self.notify("error", "Failed to load expenses")
            return False
        return True

    def add_expense(self, description: str, amount: str, paid_by: str, expense_date: str) -> bool:
        """Validate, insert, then re-fetch"""
        try:
            expense = validate_new_expense(description, amount, paid_by, expense_date, self._shares)
        except ValidationError as ex:
            self.notify("error", str(ex))
            return False
        try:
            self.store.insert(expense)
        except StoreUnavailable:
            logger.exception("Error adding expense")
            self.notify("error", "Failed to add expense")
            return False
        self.notify("info", "Expense added successfully!")
        self.refresh()
        return True

    def delete_expenses(self, expense_ids: Iterable[str]) -> int:
        """Delete by id, then re-fetch once; returns how many were deleted"""
        deleted = 0
        for expense_id in expense_ids:
            try:
                self.store.delete_by_id(expense_id)
            except StoreUnavailable:
                logger.exception("Error deleting expense %s", expense_id)
                self.notify("error", "Failed to delete expense")
                break
            deleted += 1
        if deleted:
            self.notify("info", "Expense deleted" if deleted == 1 else f"{deleted} expenses deleted")
            self.refresh()
        return deleted

    def delete_expense(self, expense_id: str) -> bool:
        """Delete one expense, then re-fetch"""
        return self.delete_expenses([expense_id]) == 1

    # ---------- Derived views ----------
    def set_filter(self, member: Optional[str]) -> None:
        if member and member != ALL_MEMBERS and member not in self._shares:
            raise ValidationError(f"Unknown member: {member}")
        self.filter_member = member or ALL_MEMBERS

    def set_sort(self, key: str) -> None:
        if key not in SORT_KEYS:
            raise ValidationError(f"Unknown sort: {key}")
        self.sort_key = key

    def balances(self) -> Dict[str, float]:
        return compute_balances(self.records, self._shares)

    def transfers(self) -> List[Tuple[str, str, float]]:
        return compute_transfers(self.balances())

    def visible_records(self) -> List[ExpenseRecord]:
        return view_records(self.records, self.filter_member, self.sort_key)

    def total(self, records: Optional[Iterable[ExpenseRecord]] = None) -> float:
        return total_amount(self.records if records is None else records)

    def selected_records(self, ids: Iterable[str]) -> List[ExpenseRecord]:
        """Selected records in the order they are displayed"""
        wanted = set(ids)
        return [r for r in self.visible_records() if r.id in wanted]

    # ---------- Export ----------
    def export_csv(self, ids: Iterable[str], filepath: str) -> Optional[int]:
        """Write the selection to CSV; returns the row count or None"""
        records = self.selected_records(ids)
        try:
            export_records_to_csv(records, filepath)
        except EmptySelection:
            self.notify("error", "No expenses selected")
            return None
        self.notify("info", f"Exported {len(records)} expenses")
        return len(records)

    def share_message(self, ids: Iterable[str]) -> Optional[str]:
        """Share text for the selection, or None if nothing is selected"""
        try:
            return build_share_message(self.selected_records(ids))
        except EmptySelection:
            self.notify("error", "No expenses selected")
            return None
