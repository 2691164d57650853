"""
Operation log for timer actions.

Entries live in their own SQLite file (see get_log_db_path) so the store file
keeps only `items`. One row per action: the request payload, the timer record
it produced (if any), the outcome and how long it took.
"""
from __future__ import annotations

import json, logging, sqlite3, time, uuid, datetime as dt
from typing import Optional

from .db import get_conn, get_log_db_path
from .errors import StoreError

logger = logging.getLogger(__name__)

DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  action TEXT NOT NULL,
  request_id TEXT,
  timer_id INTEGER,
  payload_json TEXT,
  record_json TEXT,
  result TEXT NOT NULL,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_log_action ON operation_log(action);
CREATE INDEX IF NOT EXISTS idx_log_timer ON operation_log(timer_id);
"""


def ensure_log_schema():
    with get_conn(get_log_db_path()) as conn:
        conn.executescript(DDL)


def _dumps(obj) -> Optional[str]:
    return None if obj is None else json.dumps(obj, ensure_ascii=False)


class LogContext:
    """Collects what one timer action touched, then writes it as a single log row."""

    def __init__(self, action: str):
        self.action = action
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.payload = None
        self.record = None

    def set_payload(self, obj): self.payload = obj

    def set_record(self, record: dict):
        self.record = record

    @property
    def timer_id(self) -> Optional[int]:
        return None if not self.record else self.record.get("id")

    def write(self, result: str = "OK", err: Optional[str] = None):
        rec = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(),
            "action": self.action,
            "request_id": self.request_id,
            "timer_id": self.timer_id,
            "payload_json": _dumps(self.payload),
            "record_json": _dumps(self.record),
            "result": result,
            "err_msg": err,
            "latency_ms": int((time.perf_counter() - self.start) * 1000),
        }
        with get_conn(get_log_db_path()) as conn:
            conn.executescript(DDL)
            conn.execute(
                """INSERT INTO operation_log
                (ts,action,request_id,timer_id,payload_json,record_json,result,err_msg,latency_ms)
                VALUES(:ts,:action,:request_id,:timer_id,:payload_json,:record_json,:result,:err_msg,:latency_ms)""",
                rec,
            )

    def write_safe(self, result: str = "OK", err: Optional[str] = None) -> bool:
        """Like write(), but a broken log database is reported to the module logger instead of raised."""
        try:
            self.write(result, err)
            return True
        except (StoreError, sqlite3.Error):
            logger.exception("operation log write failed: action=%s result=%s", self.action, result)
            return False


def search_logs(q: str|None, action: str|None, ts_from: str|None, ts_to: str|None, page:int, size:int):
    where = []
    params = {}
    if q:
        where.append("(payload_json LIKE :q OR record_json LIKE :q OR err_msg LIKE :q)")
        params["q"] = f"%{q}%"
    if action:
        where.append("action = :action")
        params["action"] = action
    if ts_from:
        where.append("ts >= :from")
        params["from"] = ts_from
    if ts_to:
        where.append("ts <= :to")
        params["to"] = ts_to
    wh = " WHERE " + " AND ".join(where) if where else ""
    with get_conn(get_log_db_path()) as conn:
        conn.executescript(DDL)
        total = conn.execute(f"SELECT COUNT(1) AS cnt FROM operation_log{wh}", params).fetchone()["cnt"]
        rows = conn.execute(
            f"SELECT * FROM operation_log{wh} ORDER BY id DESC LIMIT :limit OFFSET :offset",
            {**params, "limit": size, "offset": (max(page, 1) - 1) * size},
        ).fetchall()
        return total, [dict(r) for r in rows]
