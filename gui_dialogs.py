"""
Dialog windows for ShareLedger GUI
"""
from __future__ import annotations
import math
from typing import Dict

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from errors import ValidationError
from session import ShareEditor, parse_share_percent
from utils import safe_float


class SharesDialog(tk.Toplevel):
    """Edit the group's share percentages on a draft; Save commits, Cancel discards"""

    def __init__(self, master, editor: ShareEditor):
        super().__init__(master)
        self.title("Edit Shares")
        self.resizable(False, False)
        self.editor = editor
        self.saved = False
        self.vars: Dict[str, tk.StringVar] = {}

        editor.begin()

        self.frm = ttk.Frame(self, padding=10)
        self.frm.grid(row=0, column=0, sticky="nsew")
        self.rows = ttk.Frame(self.frm)
        self.rows.grid(row=1, column=0, columnspan=3, sticky="ew")

        ttk.Label(self.frm, text="Enter each member's share in percent (must total 100).").grid(
            row=0, column=0, columnspan=3, sticky="w", pady=(0, 8)
        )

        self.sum_var = tk.StringVar(value="")
        ttk.Label(self.frm, textvariable=self.sum_var).grid(row=2, column=0, columnspan=3, sticky="w", pady=(6, 0))

        add = ttk.Frame(self.frm)
        add.grid(row=3, column=0, columnspan=3, sticky="ew", pady=(8, 0))
        self.new_member_var = tk.StringVar()
        ttk.Entry(add, textvariable=self.new_member_var, width=18).pack(side="left")
        ttk.Button(add, text="Add Member", command=self._add_member).pack(side="left", padx=4)

        btns = ttk.Frame(self.frm)
        btns.grid(row=4, column=0, columnspan=3, sticky="ew", pady=(10, 0))
        ttk.Button(btns, text="Equal", command=self._equal).grid(row=0, column=0, padx=3)
        ttk.Button(btns, text="Save", command=self._save).grid(row=0, column=1, padx=12)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=2, padx=3)

        self.protocol("WM_DELETE_WINDOW", self._cancel)
        self._render_rows()

        self.grab_set()
        self.transient(master)

    def _render_rows(self):
        """Rebuild one row per draft member"""
        for child in self.rows.winfo_children():
            child.destroy()
        self.vars = {}
        for i, (member, frac) in enumerate(self.editor.draft.items()):
            ttk.Label(self.rows, text=member).grid(row=i, column=0, sticky="w")
            v = tk.StringVar(value=f"{frac * 100:g}")
            v.trace_add("write", lambda *_: self._update_sum())
            self.vars[member] = v
            ttk.Entry(self.rows, textvariable=v, width=8).grid(row=i, column=1, sticky="w", padx=4)
            ttk.Label(self.rows, text="%").grid(row=i, column=2, sticky="w")
            ttk.Button(self.rows, text="Remove",
                       command=lambda m=member: self._remove_member(m)).grid(row=i, column=3, padx=4)
        self._update_sum()

    def _push_draft(self, skip: str = None):
        """Copy entry values into the editor draft; raises ValidationError on a bad entry"""
        for member, v in self.vars.items():
            if member != skip:
                self.editor.set_share(member, parse_share_percent(member, v.get()))

    def _update_sum(self):
        """Update total label"""
        values = [safe_float(v.get().strip(), None) for v in self.vars.values()]
        if any(x is None or not math.isfinite(x) for x in values):
            self.sum_var.set("Total: invalid entry")
            return
        self.sum_var.set(f"Total: {sum(values):.1f}%")

    def _add_member(self):
        try:
            self._push_draft()
            self.editor.add_member(self.new_member_var.get())
        except ValidationError as ex:
            messagebox.showerror("Invalid", str(ex), parent=self)
            return
        self.new_member_var.set("")
        self._render_rows()

    def _remove_member(self, member: str):
        try:
            self._push_draft(skip=member)
        except ValidationError as ex:
            messagebox.showerror("Invalid", str(ex), parent=self)
            return
        self.editor.remove_member(member)
        self._render_rows()

    def _equal(self):
        self.editor.equalize()
        self._render_rows()

    def _save(self):
        """Validate and commit the draft"""
        try:
            self._push_draft()
            self.editor.commit()
        except ValidationError as ex:
            messagebox.showerror("Invalid shares", str(ex), parent=self)
            return
        self.saved = True
        self.destroy()

    def _cancel(self):
        """Discard the draft and close"""
        self.editor.cancel()
        self.destroy()
