import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    base = tmp_path_factory.mktemp("db")
    path = base / "notesia_test.db"
    # Point the app at temp files and away from any developer config.yaml
    os.environ["NOTESIA_DB_PATH"] = str(path)
    os.environ["NOTESIA_LOG_DB_PATH"] = str(base / "notesia_log_test.db")
    os.environ["NOTESIA_CONFIG"] = str(base / "missing-config.yaml")
    from notesia.services.timer_svc import TimerStore
    TimerStore.open(str(path))
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    from notesia.logs import ensure_log_schema
    ensure_log_schema()
    from notesia.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture()
def store(tmp_path):
    from notesia.services.timer_svc import TimerStore
    return TimerStore.open(str(tmp_path / "store.db"))


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("NOTESIA_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("DELETE FROM items")
        conn.commit()
    finally:
        conn.close()
    yield
