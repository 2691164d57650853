from __future__ import annotations

from notesia.db import get_conn


def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"

    v = client.get("/version")
    assert v.status_code == 200
    assert v.json().get("app") == "notesia-api"


def test_list_empty(client):
    res = client.get("/api/timers")
    assert res.status_code == 200
    assert res.json() == {"total": 0, "items": []}


def test_create_then_list(client):
    res = client.post("/api/timers", json={"name": "Tea", "duration": "00:03:00"})
    assert res.status_code == 201
    body = res.json()
    assert body["name"] == "Tea" and body["duration"] == "00:03:00"
    assert isinstance(body["id"], int)

    client.post("/api/timers", json={"name": "Eggs", "duration": "00:07:00"})

    lst = client.get("/api/timers").json()
    assert lst["total"] == 2
    assert [(it["name"], it["duration"]) for it in lst["items"]] == [
        ("Tea", "00:03:00"),
        ("Eggs", "00:07:00"),
    ]

    # Stored under the on-disk column name `timer`
    with get_conn() as conn:
        row = conn.execute("SELECT name, timer FROM items WHERE id=?", (body["id"],)).fetchone()
        assert row["name"] == "Tea" and row["timer"] == "00:03:00"


def test_create_defaults(client):
    res = client.post("/api/timers", json={})
    assert res.status_code == 201
    assert res.json()["name"] == "" and res.json()["duration"] == "00:00:00"


def test_create_is_logged(client):
    res = client.post("/api/timers", json={"name": "Logged", "duration": "00:00:10"})
    assert res.status_code == 201

    logs = client.get("/api/logs/search", params={"action": "TIMER_CREATE", "query": "Logged"}).json()
    assert logs["total"] >= 1
    entry = logs["items"][0]
    assert entry["result"] == "OK"
    assert entry["timer_id"] == res.json()["id"]


def test_keypad_carry(client):
    res = client.post("/api/keypad/press", json={"current": "00:00:09", "digit": "0"})
    assert res.status_code == 200
    assert res.json() == {"value": "00:01:30", "mode": "carry"}


def test_keypad_default_start(client):
    res = client.post("/api/keypad/press", json={"digit": "5"})
    assert res.json()["value"] == "00:00:05"


def test_keypad_raw_mode(client):
    res = client.post("/api/keypad/press", json={"current": "123", "digit": "4", "mode": "raw"})
    assert res.status_code == 200
    assert res.json()["value"] == "1234"

    res = client.post("/api/keypad/press", json={"digit": "7", "mode": "raw"})
    assert res.json()["value"] == "7"


def test_keypad_rejects_bad_input(client):
    assert client.post("/api/keypad/press", json={"current": "00:00:00", "digit": "x"}).status_code == 400
    assert client.post("/api/keypad/press", json={"current": "nope", "digit": "1"}).status_code == 400
    assert client.post("/api/keypad/press", json={"digit": "1", "mode": "hex"}).status_code == 400


def test_store_failure_maps_to_500(client, monkeypatch, tmp_path):
    monkeypatch.setenv("NOTESIA_DB_PATH", str(tmp_path / "no-such-dir" / "x.db"))
    # get_db_path creates missing parents; make the parent a file instead
    (tmp_path / "no-such-dir").write_text("not a directory")
    res = client.get("/api/timers")
    assert res.status_code == 500

    logs = client.get("/api/logs/search", params={"action": "TIMER_LIST"}).json()
    assert logs["total"] >= 1
    assert logs["items"][0]["result"] == "ERROR"
    assert "x.db" in logs["items"][0]["err_msg"]


def test_create_succeeds_when_log_db_is_broken(client, monkeypatch, tmp_path):
    (tmp_path / "blocker").write_text("file, not a directory")
    monkeypatch.setenv("NOTESIA_LOG_DB_PATH", str(tmp_path / "blocker" / "log.db"))

    res = client.post("/api/timers", json={"name": "Tea", "duration": "00:03:00"})
    assert res.status_code == 201
    assert res.json()["name"] == "Tea"

    with get_conn() as conn:
        rows = conn.execute("SELECT name, timer FROM items").fetchall()
        assert [(r["name"], r["timer"]) for r in rows] == [("Tea", "00:03:00")]
