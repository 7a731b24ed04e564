"""
CSV export for ShareLedger
"""
from __future__ import annotations
import csv
import io
from typing import Sequence

from errors import EmptySelection
from models import ExpenseRecord
from utils import format_date_short

CSV_HEADER = ["Date", "Description", "Amount", "Paid By"]


def records_to_csv(records: Sequence[ExpenseRecord]) -> str:
    """
    Render records as CSV text.
    Columns: Date (dd/mm/yyyy), Description, Amount (2 decimals), Paid By.
    Every field is quoted; rows joined with \\n, no trailing newline.
    """
    if not records:
        raise EmptySelection("No expenses selected")

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow([
            format_date_short(r.expense_date),
            r.description,
            f"{float(r.amount):.2f}",
            r.paid_by,
        ])
    return buf.getvalue().rstrip("\n")


def export_records_to_csv(records: Sequence[ExpenseRecord], filepath: str) -> None:
    """Write selected records to a CSV file; nothing is written for an empty selection"""
    text = records_to_csv(records)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        f.write(text)
