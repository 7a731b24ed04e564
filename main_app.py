"""
Main application window for ShareLedger GUI
"""
from __future__ import annotations
import webbrowser

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None

from computations import ALL_MEMBERS, SORT_AMOUNT, SORT_DATE, SORT_RECENT, balance_status
from errors import EmptySelection
from excel_export import export_excel
from gui_dialogs import SharesDialog
from session import LedgerSession
from share_message import build_share_url
from utils import format_date_long, today_str

SORT_LABELS = {
    "Date (newest)": SORT_DATE,
    "Amount (highest)": SORT_AMOUNT,
    "Recently added": SORT_RECENT,
}


class ShareLedgerApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk, session: LedgerSession):
        super().__init__(master, padding=8)
        self.master = master
        self.master.title("ShareLedger")
        self.master.geometry("1000x650")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)

        self.session = session
        self.session.notify = self._notify

        self._build_menu()
        self._build_ui()
        self.reload()

    def _notify(self, level: str, message: str):
        """Show a session notification"""
        if level == "error":
            messagebox.showerror("ShareLedger", message, parent=self.master)
        else:
            messagebox.showinfo("ShareLedger", message, parent=self.master)

    # ---------- Menu ----------
    def _build_menu(self):
        """Build application menu bar"""
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="Refresh", command=self.reload)
        filem.add_separator()
        filem.add_command(label="Export CSV…", command=self.export_csv_dialog)
        filem.add_command(label="Export Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Exit", command=self.master.destroy)
        menubar.add_cascade(label="File", menu=filem)

        settingsm = tk.Menu(menubar, tearoff=0)
        settingsm.add_command(label="Edit Shares…", command=self.edit_shares)
        menubar.add_cascade(label="Settings", menu=settingsm)

        self.master.config(menu=menubar)

    # ---------- UI ----------
    def _build_ui(self):
        """Build main UI with tabs"""
        nb = ttk.Notebook(self)
        nb.grid(row=0, column=0, sticky="nsew")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.tab_expenses = ttk.Frame(nb, padding=8)
        self.tab_balances = ttk.Frame(nb, padding=8)
        nb.add(self.tab_expenses, text="Expenses")
        nb.add(self.tab_balances, text="Balances")

        self._build_expenses_tab()
        self._build_balances_tab()

    def _build_expenses_tab(self):
        """Build expenses tab: add form, filter/sort, list"""
        tab = self.tab_expenses
        tab.columnconfigure(0, weight=1)

        form = ttk.LabelFrame(tab, text="Add New Expense", padding=6)
        form.grid(row=0, column=0, columnspan=2, sticky="ew")
        self.v_description = tk.StringVar()
        self.v_amount = tk.StringVar()
        self.v_paid_by = tk.StringVar()
        self.v_date = tk.StringVar(value=today_str())

        ttk.Label(form, text="Description").grid(row=0, column=0, sticky="w")
        ttk.Entry(form, textvariable=self.v_description, width=28).grid(row=1, column=0, sticky="w", padx=(0, 6))
        ttk.Label(form, text="Amount (₹)").grid(row=0, column=1, sticky="w")
        ttk.Entry(form, textvariable=self.v_amount, width=12).grid(row=1, column=1, sticky="w", padx=(0, 6))
        ttk.Label(form, text="Paid By").grid(row=0, column=2, sticky="w")
        self.payer_box = ttk.Combobox(form, textvariable=self.v_paid_by, width=18, state="readonly")
        self.payer_box.grid(row=1, column=2, sticky="w", padx=(0, 6))
        ttk.Label(form, text="Date (YYYY-MM-DD)").grid(row=0, column=3, sticky="w")
        ttk.Entry(form, textvariable=self.v_date, width=12).grid(row=1, column=3, sticky="w", padx=(0, 6))
        ttk.Button(form, text="Add Expense", command=self.add_expense).grid(row=1, column=4, padx=6)

        bar = ttk.Frame(tab)
        bar.grid(row=1, column=0, columnspan=2, sticky="ew", pady=(8, 0))
        ttk.Label(bar, text="Paid by").pack(side="left")
        self.v_filter = tk.StringVar(value=ALL_MEMBERS)
        self.filter_box = ttk.Combobox(bar, textvariable=self.v_filter, width=16, state="readonly")
        self.filter_box.pack(side="left", padx=4)
        self.filter_box.bind("<<ComboboxSelected>>", lambda _e: self._on_view_change())
        ttk.Label(bar, text="Sort").pack(side="left", padx=(8, 0))
        self.v_sort = tk.StringVar(value=next(iter(SORT_LABELS)))
        sort_box = ttk.Combobox(bar, textvariable=self.v_sort, values=list(SORT_LABELS),
                                width=16, state="readonly")
        sort_box.pack(side="left", padx=4)
        sort_box.bind("<<ComboboxSelected>>", lambda _e: self._on_view_change())

        ttk.Button(bar, text="Delete", command=self.delete_selected_expenses).pack(side="left", padx=(12, 3))
        ttk.Button(bar, text="Export CSV…", command=self.export_csv_dialog).pack(side="left", padx=3)
        ttk.Button(bar, text="Export Excel…", command=self.export_excel_dialog).pack(side="left", padx=3)
        ttk.Button(bar, text="Copy Share Message", command=self.copy_share_message).pack(side="left", padx=3)
        ttk.Button(bar, text="Open Share Link", command=self.open_share_link).pack(side="left", padx=3)

        cols = ("date", "description", "amount", "paid_by")
        self.exp_tree = ttk.Treeview(tab, columns=cols, show="headings", height=18, selectmode="extended")
        for c, w in zip(cols, [110, 380, 110, 160]):
            self.exp_tree.heading(c, text=c.replace("_", " ").title())
            self.exp_tree.column(c, width=w, anchor="w")
        self.exp_tree.grid(row=2, column=0, sticky="nsew", pady=6)
        tab.rowconfigure(2, weight=1)

        yscroll = ttk.Scrollbar(tab, orient="vertical", command=self.exp_tree.yview)
        self.exp_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=2, column=1, sticky="ns", pady=6)

        self.total_var = tk.StringVar(value="")
        ttk.Label(tab, textvariable=self.total_var).grid(row=3, column=0, sticky="w")

    def _build_balances_tab(self):
        """Build balances tab"""
        tab = self.tab_balances
        tab.columnconfigure(0, weight=1)

        top = ttk.Frame(tab)
        top.grid(row=0, column=0, sticky="ew")
        ttk.Button(top, text="Edit Shares…", command=self.edit_shares).pack(side="left")

        cols = ("member", "share", "amount", "status")
        self.bal_tree = ttk.Treeview(tab, columns=cols, show="headings", height=8)
        for c, w in zip(cols, [200, 90, 140, 120]):
            self.bal_tree.heading(c, text=c.title())
            self.bal_tree.column(c, width=w, anchor="w")
        self.bal_tree.grid(row=1, column=0, sticky="nsew", pady=6)
        tab.rowconfigure(1, weight=1)

        ttk.Label(tab, text="Suggested settlement:").grid(row=2, column=0, sticky="w", pady=(10, 0))
        tcols = ("from", "to", "amount")
        self.tr_tree = ttk.Treeview(tab, columns=tcols, show="headings", height=8)
        for c, w in zip(tcols, [200, 200, 140]):
            self.tr_tree.heading(c, text=c.title())
            self.tr_tree.column(c, width=w, anchor="w")
        self.tr_tree.grid(row=3, column=0, sticky="nsew")
        tab.rowconfigure(3, weight=1)

    # ---------- Expenses ----------
    def add_expense(self):
        """Submit the add form"""
        ok = self.session.add_expense(
            self.v_description.get(), self.v_amount.get(), self.v_paid_by.get(), self.v_date.get()
        )
        if ok:
            self.v_description.set("")
            self.v_amount.set("")
            self.v_paid_by.set("")
            self.v_date.set(today_str())
        self.refresh_all()

    def delete_selected_expenses(self):
        """Delete selected expenses"""
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Delete", "Select an expense row first.")
            return
        if not messagebox.askyesno("Delete", f"Delete {len(sel)} selected expense(s)?"):
            return
        self.session.delete_expenses(sel)
        self.refresh_all()

    def _on_view_change(self):
        self.session.set_filter(self.v_filter.get())
        self.session.set_sort(SORT_LABELS[self.v_sort.get()])
        self.refresh_expenses()

    # ---------- Shares ----------
    def edit_shares(self):
        """Open the share editor"""
        dlg = SharesDialog(self.master, self.session.editor)
        self.master.wait_window(dlg)
        if dlg.saved:
            self.refresh_all()

    # ---------- Export ----------
    def export_csv_dialog(self):
        """Export selected expenses to CSV"""
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Export CSV", "No expenses selected")
            return
        fp = filedialog.asksaveasfilename(
            title="Export Expenses to CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            self.session.export_csv(sel, fp)
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def export_excel_dialog(self):
        """Export selected (or all visible) expenses to Excel"""
        sel = self.exp_tree.selection()
        records = self.session.selected_records(sel) if sel else self.session.visible_records()
        fp = filedialog.asksaveasfilename(
            title="Export Excel",
            defaultextension=".xlsx",
            filetypes=[("Excel Workbook", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_excel(records, self.session.shares, fp)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except EmptySelection as ex:
            messagebox.showinfo("Export", str(ex))
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def copy_share_message(self):
        """Copy the share text of the selection to the clipboard"""
        msg = self.session.share_message(self.exp_tree.selection())
        if msg is None:
            return
        self.master.clipboard_clear()
        self.master.clipboard_append(msg)
        messagebox.showinfo("Share", "Message copied to clipboard.")

    def open_share_link(self):
        """Open the pre-filled share link in a browser"""
        msg = self.session.share_message(self.exp_tree.selection())
        if msg is None:
            return
        webbrowser.open(build_share_url(msg))

    # ---------- Refresh ----------
    def reload(self):
        """Re-fetch from the store, then redraw"""
        self.session.refresh()
        self.refresh_all()

    def refresh_all(self):
        """Refresh all UI elements"""
        members = self.session.members
        self.payer_box.configure(values=members)
        self.filter_box.configure(values=[ALL_MEMBERS] + members)
        self.v_filter.set(self.session.filter_member)
        self.refresh_expenses()
        self.refresh_balances()

    def refresh_expenses(self):
        """Refresh expenses tree view"""
        for iid in self.exp_tree.get_children():
            self.exp_tree.delete(iid)
        records = self.session.visible_records()
        for r in records:
            values = (format_date_long(r.expense_date), r.description, f"₹{r.amount:.2f}", r.paid_by)
            self.exp_tree.insert("", "end", iid=r.id, values=values)
        self.total_var.set(
            f"Showing {len(records)} of {len(self.session.records)}   "
            f"Total: ₹{self.session.total(records):.2f}   "
            f"All expenses: ₹{self.session.total():.2f}"
        )

    def refresh_balances(self):
        """Refresh balances and transfers"""
        for iid in self.bal_tree.get_children():
            self.bal_tree.delete(iid)
        shares = self.session.shares
        for member, b in self.session.balances().items():
            self.bal_tree.insert("", "end", values=(
                member, f"{shares[member] * 100:g}%", f"₹{abs(b):.2f}", balance_status(b),
            ))

        for iid in self.tr_tree.get_children():
            self.tr_tree.delete(iid)
        for a, b, amt in self.session.transfers():
            self.tr_tree.insert("", "end", values=(a, b, f"₹{amt:.2f}"))
