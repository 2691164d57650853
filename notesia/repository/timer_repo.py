from sqlite3 import Connection

TABLE = "items"

DDL = """
CREATE TABLE IF NOT EXISTS items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    timer TEXT
)
"""


def ensure_schema(conn: Connection):
    conn.execute(DDL)


def drop(conn: Connection):
    conn.execute("DROP TABLE IF EXISTS items")


def column_names(conn: Connection) -> list[str]:
    return [r[1] for r in conn.execute("PRAGMA table_info(items)").fetchall()]


def insert(conn: Connection, name: str | None, timer: str | None) -> int:
    cur = conn.execute("INSERT INTO items(name, timer) VALUES(?, ?)", (name, timer))
    return cur.lastrowid


def list_all(conn: Connection):
    return conn.execute("SELECT id, name, timer FROM items ORDER BY id").fetchall()


def count_all(conn: Connection) -> int:
    return conn.execute("SELECT COUNT(1) AS cnt FROM items").fetchone()["cnt"]
