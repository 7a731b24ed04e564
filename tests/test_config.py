import json

import pytest

from config import (
    DEFAULT_SHARES,
    load_shares,
    load_store_settings,
    record_from_row,
    record_to_row,
    save_shares,
    shares_path,
)
from errors import ValidationError
from models import ExpenseRecord


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SHARELEDGER_HOME", str(tmp_path))
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)


def test_default_shares_is_30_30_40():
    assert sorted(DEFAULT_SHARES.values()) == [0.3, 0.3, 0.4]
    assert len(DEFAULT_SHARES) == 3


def test_load_shares_missing_file_gives_default(tmp_path):
    shares = load_shares(str(tmp_path / "nope.json"))
    assert shares == DEFAULT_SHARES
    assert shares is not DEFAULT_SHARES


def test_save_and_load_shares(tmp_path):
    fp = tmp_path / "shares.json"
    save_shares(str(fp), {"Ann": 0.5, "Ben": 0.5})
    assert load_shares(str(fp)) == {"Ann": 0.5, "Ben": 0.5}


def test_load_shares_rejects_bad_file(tmp_path):
    fp = tmp_path / "shares.json"
    fp.write_text(json.dumps({"shares": {"Ann": 0.5, "Ben": 0.6}}), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_shares(str(fp))


def test_save_shares_rejects_bad_mapping(tmp_path):
    fp = tmp_path / "shares.json"
    with pytest.raises(ValidationError):
        save_shares(str(fp), {"Ann": 0.9})
    assert not fp.exists()


def test_shares_path_under_home(tmp_path):
    assert shares_path() == str(tmp_path / "shares.json")


def test_store_settings_default_local(tmp_path):
    settings = load_store_settings()
    assert settings == {"backend": "local", "path": str(tmp_path / "expenses.json")}


def test_store_settings_from_file(tmp_path):
    (tmp_path / "store.json").write_text(json.dumps({
        "supabase": {"url": "https://x.supabase.co", "key": "anon"},
        "table": "office_expenses",
    }), encoding="utf-8")
    assert load_store_settings() == {
        "backend": "supabase",
        "url": "https://x.supabase.co",
        "key": "anon",
        "table": "office_expenses",
    }


def test_store_settings_env_wins(tmp_path, monkeypatch):
    (tmp_path / "store.json").write_text(json.dumps({
        "supabase": {"url": "https://file.supabase.co", "key": "file"},
    }), encoding="utf-8")
    monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "env")
    settings = load_store_settings()
    assert settings["url"] == "https://env.supabase.co"
    assert settings["key"] == "env"
    assert settings["table"] == "expenses"


def test_row_conversion():
    rec = record_from_row({
        "id": 7,
        "description": "Chai",
        "amount": "15.00",
        "paid_by": "Nawab",
        "expense_date": "2024-05-06",
        "created_at": "2024-05-06T08:00:00+00:00",
    })
    assert rec == ExpenseRecord("7", "Chai", 15.0, "Nawab", "2024-05-06", "2024-05-06T08:00:00+00:00")
    assert record_from_row(record_to_row(rec)) == rec


@pytest.mark.parametrize("payload", [
    ["Ann", "Ben"],
    "Ann",
    {"shares": ["Ann"]},
    {"shares": {"Ann": "half", "Ben": 0.5}},
])
def test_load_shares_rejects_wrong_shape(tmp_path, payload):
    fp = tmp_path / "shares.json"
    fp.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_shares(str(fp))
