"""
ShareLedger GUI
- Log shared group expenses (local JSON file or a Supabase `expenses` table).
- Each member's balance under an editable percentage split.
- Export selected expenses to CSV / Excel, or as a share message.

Run:
  python share_ledger_gui.py

Remote store (optional):
  export SUPABASE_URL=... SUPABASE_KEY=...
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations
import logging

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None

from config import load_shares, load_store_settings, shares_path
from session import LedgerSession
from store import make_store


def main():
    """Main entry point for the application"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )

    from main_app import ShareLedgerApp

    path = shares_path()
    session = LedgerSession(make_store(load_store_settings()), load_shares(path), shares_path=path)
    root = tk.Tk()
    ShareLedgerApp(root, session)
    root.mainloop()


if __name__ == "__main__":
    main()
