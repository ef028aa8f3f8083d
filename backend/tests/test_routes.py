import pytest

import models.comment_model
from database import StoreError

SNAPSHOT = {
    "date": "2024-01-01",
    "owner": "Husband",
    "net_cash": 100,
    "savings": "0",
    "stock_krw": 0,
    "fixed_asset": 0,
    "long_loan": 0,
    "total_asset": 100,
    "net_worth": 100,
    "memo": "first",
}


def test_health_is_public(client):
    assert client.get("/health").get_json() == {"status": "ok"}


@pytest.mark.parametrize("method, path", [
    ("get", "/api/assets"),
    ("post", "/api/assets"),
    ("delete", "/api/assets"),
    ("get", "/api/comments"),
    ("post", "/api/comments"),
    ("get", "/api/dashboard"),
])
def test_routes_require_session(client, method, path):
    assert getattr(client, method)(path, json={}).status_code == 401


def test_wrong_pin_is_rejected(client):
    res = client.post("/api/auth", json={"pin": "0000"})
    assert res.status_code == 401
    assert client.get("/api/assets").status_code == 401


def test_login_sets_long_lived_cookie(client):
    res = client.post("/api/auth", json={"pin": "2580"})
    assert res.status_code == 200
    cookie = next(h for h in res.headers.getlist("Set-Cookie") if h.startswith("auth_token="))
    assert "HttpOnly" in cookie
    assert "Expires" in cookie or "Max-Age" in cookie


def test_login_refused_without_configured_pin(app, client):
    app.config["ACCESS_PIN"] = ""
    assert client.post("/api/auth", json={}).status_code == 401
    assert client.post("/api/auth", json={"pin": ""}).status_code == 401


def test_logout_clears_session(auth_client):
    auth_client.post("/api/auth/logout")
    assert auth_client.get("/api/assets").status_code == 401


def test_asset_roundtrip_through_workbook(auth_client):
    res = auth_client.post("/api/assets", json=SNAPSHOT)
    assert res.status_code == 201
    assert res.get_json()["row_id"] == 2

    auth_client.post("/api/assets", json=dict(SNAPSHOT, date="2024-02-01", net_cash=150, total_asset=150, net_worth=150))

    items = auth_client.get("/api/assets").get_json()
    assert [x["date"] for x in items] == ["2024-01-01", "2024-02-01"]
    assert items[0]["memo"] == "first"
    assert items[1]["net_worth"] == 150

    board = auth_client.get("/api/dashboard?view=Husband").get_json()
    assert [p["change"] for p in board["periods"]] == [0, 50]
    assert [p["change_pct"] for p in board["periods"]] == [0, 50]
    assert board["delta"] == 50
    assert board["distribution"] == [{"name": "Cash", "value": 150}]


def test_totals_are_stored_as_sent(auth_client):
    auth_client.post("/api/assets", json=dict(SNAPSHOT, net_worth=999))
    assert auth_client.get("/api/assets").get_json()[0]["net_worth"] == 999


def test_totals_are_derived_when_absent(auth_client):
    payload = {"date": "2024-01-01", "owner": "Wife", "net_cash": 10, "savings": 20, "long_loan": 50}
    auth_client.post("/api/assets", json=payload)
    item = auth_client.get("/api/assets").get_json()[0]
    assert (item["total_asset"], item["net_worth"]) == (30, -20)


@pytest.mark.parametrize("payload, missing", [
    ({"owner": "Husband"}, ["date"]),
    ({"date": "2024-01-01"}, ["owner"]),
    ({}, ["date", "owner"]),
])
def test_asset_missing_fields(auth_client, payload, missing):
    res = auth_client.post("/api/assets", json=payload)
    assert res.status_code == 400
    assert res.get_json()["missing"] == missing


@pytest.mark.parametrize("override", [
    {"owner": "Dog"},
    {"date": "01/02/2024"},
    {"net_cash": -5},
    {"savings": "lots"},
])
def test_asset_invalid_values(auth_client, override):
    res = auth_client.post("/api/assets", json=dict(SNAPSHOT, **override))
    assert res.status_code == 400
    assert auth_client.get("/api/assets").get_json() == []


def test_delete_assets(auth_client):
    for day in ("2024-01-01", "2024-02-01", "2024-03-01"):
        auth_client.post("/api/assets", json=dict(SNAPSHOT, date=day))

    res = auth_client.delete("/api/assets", json={"rows": [2, 4, 42]})
    assert res.status_code == 200
    assert res.get_json()["deleted"] == [4, 2]
    assert [x["date"] for x in auth_client.get("/api/assets").get_json()] == ["2024-02-01"]


@pytest.mark.parametrize("body", [{}, {"rows": "2"}, {"rows": []}, {"rows": [True]}])
def test_delete_assets_rejects_bad_body(auth_client, body):
    assert auth_client.delete("/api/assets", json=body).status_code == 400


def test_comment_roundtrip(auth_client):
    res = auth_client.post("/api/comments", json={"date": "2024-01-01", "owner": "Wife", "message": "hello"})
    assert res.status_code == 201
    auth_client.post("/api/comments", json={"date": "2024-02-01", "owner": "Husband", "message": "later"})

    items = auth_client.get("/api/comments").get_json()
    assert [c["message"] for c in items] == ["later", "hello"]

    assert auth_client.delete(f"/api/comments/{items[1]['row_id']}").status_code == 200
    assert [c["message"] for c in auth_client.get("/api/comments").get_json()] == ["later"]
    assert auth_client.delete("/api/comments/77").status_code == 404


def test_comment_missing_message_never_reaches_store(auth_client, recording_store):
    res = auth_client.post("/api/comments", json={"date": "2024-01-01", "owner": "Wife"})
    assert res.status_code == 400
    assert res.get_json()["missing"] == ["message"]
    assert recording_store.calls == []


def test_store_failure_is_reported(auth_client, monkeypatch):
    def broken(*args, **kwargs):
        raise StoreError("network down")

    monkeypatch.setattr(models.comment_model.store, "append_row", broken)
    res = auth_client.post("/api/comments", json={"date": "2024-01-01", "owner": "Wife", "message": "x"})
    assert res.status_code == 500
    assert "network down" not in res.get_data(as_text=True)


def test_dashboard_rejects_unknown_view(auth_client):
    assert auth_client.get("/api/dashboard?view=Cat").status_code == 400


def test_dashboard_empty(auth_client):
    board = auth_client.get("/api/dashboard").get_json()
    assert board["view"] == "All"
    assert board["periods"] == []
    assert board["latest"]["net_worth"] == 0
