"""Shared fixtures: an app bound to a throwaway workbook."""

import pytest

from app import create_app
from utils.cache import cache

PIN = "2580"


class RecordingStore:
    """Stand-in store that records every call in order."""

    def __init__(self, rows=None, headers=None, missing=()):
        self.rows = rows or {}
        self.header_rows = headers or {}
        self.missing = set(missing)
        self.calls = []

    def list_rows(self, table):
        self.calls.append(("list_rows", table))
        return list(self.rows.get(table, []))

    def headers(self, table):
        self.calls.append(("headers", table))
        return list(self.header_rows.get(table, []))

    def append_row(self, table, mapping):
        self.calls.append(("append_row", table, mapping))
        return 99

    def delete_row(self, table, row_id):
        self.calls.append(("delete_row", table, row_id))
        return row_id not in self.missing


@pytest.fixture
def sheet_path(tmp_path):
    return tmp_path / "household.xlsx"


@pytest.fixture
def app(sheet_path):
    app = create_app({
        "TESTING": True,
        "SHEET_PATH": str(sheet_path),
        "ACCESS_PIN": PIN,
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length",
    })
    yield app
    cache.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    res = client.post("/api/auth", json={"pin": PIN})
    assert res.status_code == 200
    return client


@pytest.fixture
def recording_store(monkeypatch):
    """Replace the sheet store in every model module."""
    fake = RecordingStore()
    import models.asset_model
    import models.comment_model

    monkeypatch.setattr(models.asset_model, "store", fake)
    monkeypatch.setattr(models.comment_model, "store", fake)
    cache.clear()
    yield fake
    cache.clear()
