"""
Excel export functionality for ShareLedger
"""
from __future__ import annotations
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from computations import balance_status, compute_balances, compute_transfers, total_amount
from errors import EmptySelection
from models import ExpenseRecord, ShareMapping
from utils import parse_date


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def export_excel(
    records: Sequence[ExpenseRecord],
    shares: ShareMapping,
    filepath: str,
) -> None:
    """
    Export to an Excel workbook with three sheets:
    - Expenses: the given records plus a SUM total row
    - Balances: every member's share, balance and status
    - Transfers: who pays whom to settle
    Balances are computed over the exported records only.
    """
    if not records:
        raise EmptySelection("No expenses selected")

    wb = Workbook()
    wb.remove(wb.active)

    # Expenses
    ws = wb.create_sheet("Expenses")
    ws.append(["Date", "Description", "Amount", "Paid By"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for r in records:
        ws.append([parse_date(r.expense_date), r.description, float(r.amount), r.paid_by])
    last = ws.max_row
    ws.append(["TOTAL", "", f"=SUM(C2:C{last})", ""])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    for row in range(2, ws.max_row + 1):
        ws.cell(row, 1).number_format = "DD/MM/YYYY"
        ws.cell(row, 3).number_format = "0.00"
    _autosize_columns(ws)

    # Balances
    ws = wb.create_sheet("Balances")
    ws.append(["Member", "Share", "Balance", "Status"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    balances = compute_balances(records, shares)
    for member, frac in shares.items():
        b = balances[member]
        ws.append([member, frac, round(b, 2), balance_status(b)])
    for row in range(2, ws.max_row + 1):
        ws.cell(row, 2).number_format = "0%"
        ws.cell(row, 3).number_format = "0.00"
    ws.append([])
    ws.append(["Total spent", "", round(total_amount(records), 2), ""])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    ws.cell(ws.max_row, 3).number_format = "0.00"
    _autosize_columns(ws)

    # Transfers
    ws = wb.create_sheet("Transfers")
    ws.append(["From (Owes)", "To (Gets back)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for a, b, amt in compute_transfers(balances):
        ws.append([a, b, round(amt, 2)])
    for row in range(2, ws.max_row + 1):
        ws.cell(row, 3).number_format = "0.00"
    _autosize_columns(ws)

    wb.save(filepath)
