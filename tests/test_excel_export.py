import pytest
from openpyxl import load_workbook

from errors import EmptySelection
from excel_export import export_excel
from conftest import make_record


def test_export_excel_sheets(tmp_path, shares):
    recs = [make_record(1, 100, "Alice", "2024-03-01"), make_record(2, 50, "Bob", "2024-03-02")]
    fp = tmp_path / "report.xlsx"
    export_excel(recs, shares, str(fp))

    wb = load_workbook(str(fp))
    assert wb.sheetnames == ["Expenses", "Balances", "Transfers"]

    ws = wb["Expenses"]
    assert [c.value for c in ws[1]] == ["Date", "Description", "Amount", "Paid By"]
    assert ws.cell(2, 3).value == 100
    assert ws.cell(4, 3).value == "=SUM(C2:C3)"

    ws = wb["Balances"]
    rows = {ws.cell(r, 1).value: (ws.cell(r, 3).value, ws.cell(r, 4).value) for r in range(2, 5)}
    assert rows == {
        "Alice": (pytest.approx(55.0), "Gets back"),
        "Bob": (pytest.approx(5.0), "Gets back"),
        "Carol": (pytest.approx(-60.0), "Owes"),
    }

    ws = wb["Transfers"]
    transfers = [tuple(c.value for c in row) for row in ws.iter_rows(min_row=2)]
    assert transfers == [("Carol", "Alice", 55.0), ("Carol", "Bob", 5.0)]


def test_export_excel_empty(tmp_path, shares):
    fp = tmp_path / "report.xlsx"
    with pytest.raises(EmptySelection):
        export_excel([], shares, str(fp))
    assert not fp.exists()
