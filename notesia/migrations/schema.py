"""
Schema versioning for the timer store.

The version lives in SQLite's ``PRAGMA user_version``. Upgrades are additive by
default: each version step runs a registered migration. The destructive policy
(drop ``items`` and recreate it empty) is opt-in.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Mapping

from ..errors import OpenFailure
from ..repository import timer_repo

SCHEMA_VERSION = 1

Migration = Callable[[sqlite3.Connection], None]

logger = logging.getLogger(__name__)


def get_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def set_version(conn: sqlite3.Connection, version: int):
    # PRAGMA does not accept bound parameters
    conn.execute(f"PRAGMA user_version = {int(version)}")


def add_column_step(column: str, decl: str = "TEXT") -> Migration:
    """Migration that adds a nullable column to ``items`` unless it already exists."""

    def step(conn: sqlite3.Connection):
        if column not in timer_repo.column_names(conn):
            conn.execute(f"ALTER TABLE items ADD COLUMN {column} {decl}")

    return step


def create(conn: sqlite3.Connection, version: int = SCHEMA_VERSION):
    timer_repo.ensure_schema(conn)
    set_version(conn, version)


def upgrade(
    conn: sqlite3.Connection,
    old_version: int,
    new_version: int,
    destructive: bool = False,
    migrations: Mapping[int, Migration] | None = None,
):
    """Bring ``items`` from old_version to new_version inside one transaction."""
    migrations = migrations or {}
    try:
        conn.execute("BEGIN")
        if destructive:
            logger.warning(
                "destructive upgrade %s -> %s: dropping table %s", old_version, new_version, timer_repo.TABLE
            )
            timer_repo.drop(conn)
            timer_repo.ensure_schema(conn)
        elif new_version < old_version:
            raise OpenFailure(f"cannot downgrade database from version {old_version} to {new_version}")
        else:
            timer_repo.ensure_schema(conn)
            for v in range(old_version + 1, new_version + 1):
                step = migrations.get(v)
                if step is None:
                    raise OpenFailure(f"no migration registered for version {v}")
                step(conn)
                logger.info("applied migration to version %s", v)
        set_version(conn, new_version)
        conn.commit()
    except OpenFailure:
        conn.rollback()
        raise
    except sqlite3.Error as e:
        conn.rollback()
        raise OpenFailure(f"upgrade {old_version} -> {new_version} failed: {e}") from e


def ensure(
    conn: sqlite3.Connection,
    version: int = SCHEMA_VERSION,
    destructive: bool = False,
    migrations: Mapping[int, Migration] | None = None,
) -> int:
    """Create or upgrade the schema so the file is at ``version``; returns the version found on disk."""
    current = get_version(conn)
    if current == 0:
        create(conn, version)
    elif current != version:
        upgrade(conn, current, version, destructive=destructive, migrations=migrations)
    else:
        timer_repo.ensure_schema(conn)
    return current
