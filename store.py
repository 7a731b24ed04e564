"""
Ledger stores for ShareLedger: a Supabase table or a local JSON file.
Both list by expense date (newest first), insert and delete by id.
"""
from __future__ import annotations
import json
import logging
import os
import random
import time
import uuid
from dataclasses import asdict
from typing import Dict, List, Optional

import httpx
from supabase import Client, create_client

from config import record_from_row, DEFAULT_TABLE
from errors import StoreUnavailable
from models import ExpenseRecord, NewExpense
from utils import now_iso

logger = logging.getLogger(__name__)

_TRANSIENT = (
    httpx.RemoteProtocolError,
    httpx.ReadTimeout,
    httpx.ConnectTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
    httpx.ConnectError,
)


class LedgerStore:
    """Contract every ledger store implements"""

    def list_expenses(self) -> List[ExpenseRecord]:
        raise NotImplementedError

    def insert(self, expense: NewExpense) -> None:
        raise NotImplementedError

    def delete_by_id(self, expense_id: str) -> None:
        raise NotImplementedError


class SupabaseStore(LedgerStore):
    """Expenses kept in a Supabase (PostgREST) table"""

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        table: str = DEFAULT_TABLE,
        client: Optional[Client] = None,
        tries: int = 3,
        base_sleep: float = 0.35,
    ):
        if client is None:
            if not url or not key:
                raise StoreUnavailable("Supabase url and key are required")
            try:
                client = create_client(url, key)
            except Exception as exc:
                logger.error("Cannot create Supabase client: %s", exc)
                raise StoreUnavailable("Cannot connect to Supabase") from exc
        self.client = client
        self.table = table
        self.tries = max(1, tries)
        self.base_sleep = base_sleep

    def _execute(self, query, action: str):
        """Run a query, retrying transient transport errors"""
        last_exc: Optional[Exception] = None
        for i in range(self.tries):
            try:
                resp = query.execute()
            except _TRANSIENT as exc:
                last_exc = exc
                logger.warning("Supabase %s failed (attempt %d/%d): %s", action, i + 1, self.tries, exc)
                if i + 1 < self.tries:
                    time.sleep(self.base_sleep * (2 ** i) + random.uniform(0.0, 0.2))
                continue
            except Exception as exc:
                logger.error("Supabase %s failed: %s", action, exc)
                raise StoreUnavailable(f"Failed to {action}") from exc
            err = getattr(resp, "error", None)
            if err:
                logger.error("Supabase %s failed: %s", action, err)
                raise StoreUnavailable(f"Failed to {action}: {err}")
            return resp
        raise StoreUnavailable(f"Failed to {action}") from last_exc

    def list_expenses(self) -> List[ExpenseRecord]:
        q = self.client.table(self.table).select("*").order("expense_date", desc=True)
        resp = self._execute(q, "load expenses")
        rows = resp.data or []
        try:
            records = [record_from_row(r) for r in rows]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed expense row in %s: %s", self.table, exc)
            raise StoreUnavailable(f"Malformed data in {self.table}") from exc
        logger.info("Loaded %d expenses from %s", len(records), self.table)
        return records

    def insert(self, expense: NewExpense) -> None:
        q = self.client.table(self.table).insert(asdict(expense))
        self._execute(q, "add expense")
        logger.info("Inserted expense %r", expense.description)

    def delete_by_id(self, expense_id: str) -> None:
        q = self.client.table(self.table).delete().eq("id", expense_id)
        self._execute(q, "delete expense")
        logger.info("Deleted expense %s", expense_id)


class JsonFileStore(LedgerStore):
    """Expenses kept in a local JSON file: {"expenses": [row, ...]}"""

    def __init__(self, path: str):
        self.path = path

    def _read_rows(self) -> List[Dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Cannot read %s: %s", self.path, exc)
            raise StoreUnavailable(f"Cannot read {self.path}") from exc
        return list(data.get("expenses", []))

    def _write_rows(self, rows: List[Dict]) -> None:
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump({"expenses": rows}, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.error("Cannot write %s: %s", self.path, exc)
            raise StoreUnavailable(f"Cannot write {self.path}") from exc

    def list_expenses(self) -> List[ExpenseRecord]:
        try:
            records = [record_from_row(r) for r in self._read_rows()]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed expense row in %s: %s", self.path, exc)
            raise StoreUnavailable(f"Malformed data in {self.path}") from exc
        records.sort(key=lambda r: r.expense_date, reverse=True)
        return records

    def insert(self, expense: NewExpense) -> None:
        rows = self._read_rows()
        row = asdict(expense)
        row["id"] = str(uuid.uuid4())
        row["created_at"] = now_iso()
        rows.append(row)
        self._write_rows(rows)
        logger.info("Inserted expense %s (%r)", row["id"], expense.description)

    def delete_by_id(self, expense_id: str) -> None:
        rows = self._read_rows()
        kept = [r for r in rows if str(r.get("id")) != expense_id]
        self._write_rows(kept)
        logger.info("Deleted expense %s", expense_id)


def make_store(settings: Dict[str, str]) -> LedgerStore:
    """Build the store described by config.load_store_settings()"""
    if settings.get("backend") == "supabase":
        return SupabaseStore(settings["url"], settings["key"], settings.get("table", DEFAULT_TABLE))
    return JsonFileStore(settings["path"])
