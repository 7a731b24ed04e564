"""
Share-text message and share link for ShareLedger
"""
from __future__ import annotations
from typing import Sequence
from urllib.parse import quote

from computations import total_amount
from errors import EmptySelection
from models import ExpenseRecord
from utils import format_date_long

SHARE_BASE_URL = "https://wa.me/?text="
CURRENCY = "₹"


def _record_block(r: ExpenseRecord) -> str:
    return "\n".join([
        f"📅 {format_date_long(r.expense_date)}",
        f"💰 {CURRENCY}{float(r.amount):.2f}",
        f"📝 {r.description}",
        f"👤 Paid by: {r.paid_by}",
    ])


def build_share_message(records: Sequence[ExpenseRecord], title: str = "Expense Details") -> str:
    """
    One block per record (date, amount, description, payer) followed by
    the total of the selection.
    """
    if not records:
        raise EmptySelection("No expenses selected")

    blocks = [f"*{title}*"]
    blocks.extend(_record_block(r) for r in records)
    blocks.append(f"*Total: {CURRENCY}{total_amount(records):.2f}*")
    return "\n\n".join(blocks)


def build_share_url(message: str, base_url: str = SHARE_BASE_URL) -> str:
    """Pre-filled share link carrying the message"""
    return base_url + quote(message, safe="")
