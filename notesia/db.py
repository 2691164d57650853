from __future__ import annotations

# notesia/db.py
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator
import os
import yaml

from .errors import OpenFailure

# DB path resolution order:
# 1) env NOTESIA_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: <project root>/notesia.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "notesia.db")
_LOG_DB_NAME = "notesia_log.db"

# Serializes every connection to the store file across threads.
STORE_LOCK = threading.RLock()


def config_path() -> str:
    return os.environ.get("NOTESIA_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")


def read_config_yaml() -> dict:
    cfg_path = config_path()
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def _path_setting(cfg: dict, key: str) -> str | None:
    v = cfg.get(key)
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def _is_test_env() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def _ensure_parent(path: str):
    dirn = os.path.dirname(path) or "."
    try:
        os.makedirs(dirn, exist_ok=True)
    except OSError as e:
        raise OpenFailure(f"cannot create directory for {path}: {e}") from e


def get_db_path() -> str:
    env_path = os.environ.get("NOTESIA_DB_PATH")
    cfg = read_config_yaml()
    cfg_db = _path_setting(cfg, "db_path")
    cfg_test = _path_setting(cfg, "test_db_path")

    if env_path:
        path = env_path
    elif _is_test_env() and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    _ensure_parent(path)
    return path


def get_log_db_path() -> str:
    env_path = os.environ.get("NOTESIA_LOG_DB_PATH")
    cfg_log = _path_setting(read_config_yaml(), "log_db_path")
    if env_path:
        path = env_path
    elif cfg_log:
        path = cfg_log
    else:
        path = os.path.join(os.path.dirname(get_db_path()) or ".", _LOG_DB_NAME)

    _ensure_parent(path)
    return path


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open a SQLite connection for the duration of one operation.

    Uses the explicit db_path when given, otherwise get_db_path(). The
    connection is always closed on exit and the process-wide lock is held
    while it is open. Failure to open raises OpenFailure.
    """
    with STORE_LOCK:
        path = db_path or get_db_path()
        try:
            conn = sqlite3.connect(
                path,
                detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
                check_same_thread=False,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise OpenFailure(f"cannot open database {path}: {e}") from e
        try:
            conn.row_factory = sqlite3.Row
            yield conn
        finally:
            conn.close()
