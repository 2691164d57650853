from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Mapping

from ..db import STORE_LOCK, get_conn, get_db_path
from ..domain.models import TimerRecord
from ..errors import OpenFailure, ReadFailure, StoreError, WriteFailure
from ..migrations import schema
from ..repository import timer_repo
from .config_svc import get_config

logger = logging.getLogger(__name__)

Listener = Callable[[list[TimerRecord]], None]


class TimerStore:
    """
    Append-only store of named timers backed by one SQLite file.

    Every operation opens and closes its own connection; nothing is held
    between calls. Listeners registered with subscribe() receive the fresh item
    list after each successful add_item() and refresh().
    """

    def __init__(
        self,
        location: str,
        version: int = schema.SCHEMA_VERSION,
        destructive_upgrade: bool = False,
        migrations: Mapping[int, schema.Migration] | None = None,
    ):
        if not location:
            raise OpenFailure("store location must not be empty")
        self.location = str(location)
        self.version = version
        self.destructive_upgrade = destructive_upgrade
        self.migrations = dict(migrations or {})
        self._listeners: list[Listener] = []

    @classmethod
    def open(
        cls,
        location,
        version: int = schema.SCHEMA_VERSION,
        destructive_upgrade: bool = False,
        migrations: Mapping[int, schema.Migration] | None = None,
    ) -> "TimerStore":
        store = cls(location, version, destructive_upgrade, migrations)
        store._ensure_schema()
        return store

    def _ensure_schema(self):
        with get_conn(self.location) as conn:
            try:
                found = schema.ensure(
                    conn, self.version, destructive=self.destructive_upgrade, migrations=self.migrations
                )
            except sqlite3.Error as e:
                raise OpenFailure(f"cannot initialize {self.location}: {e}") from e
        if found == 0:
            logger.info("created table %s in %s (version %s)", timer_repo.TABLE, self.location, self.version)
        elif found != self.version:
            logger.info("upgraded %s from version %s to %s", self.location, found, self.version)

    def schema_version(self) -> int:
        with get_conn(self.location) as conn:
            try:
                return schema.get_version(conn)
            except sqlite3.Error as e:
                raise ReadFailure(str(e)) from e

    def upgrade(self, old_version: int, new_version: int):
        """Run the configured upgrade policy from old_version to new_version."""
        with get_conn(self.location) as conn:
            schema.upgrade(
                conn, old_version, new_version, destructive=self.destructive_upgrade, migrations=self.migrations
            )
        self.version = new_version
        self._notify()

    def add_item(self, name: str | None, duration: str | None) -> TimerRecord:
        with get_conn(self.location) as conn:
            try:
                item_id = timer_repo.insert(conn, name, duration)
                conn.commit()
            except sqlite3.Error as e:
                logger.error("insert into %s failed: %s", self.location, e)
                raise WriteFailure(f"cannot add timer: {e}") from e
        record = TimerRecord(id=item_id, name=name, duration=duration)
        self._notify()
        return record

    def get_all_items(self) -> list[TimerRecord]:
        with get_conn(self.location) as conn:
            try:
                rows = timer_repo.list_all(conn)
                return [TimerRecord.from_row(r) for r in rows]
            except (sqlite3.Error, IndexError, KeyError, TypeError, ValueError) as e:
                logger.error("read from %s failed: %s", self.location, e)
                raise ReadFailure(f"cannot list timers: {e}") from e

    def count(self) -> int:
        with get_conn(self.location) as conn:
            try:
                return timer_repo.count_all(conn)
            except sqlite3.Error as e:
                raise ReadFailure(f"cannot count timers: {e}") from e

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with STORE_LOCK:
            self._listeners.append(listener)

        def unsubscribe():
            with STORE_LOCK:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def refresh(self) -> list[TimerRecord]:
        """Re-read every item and hand the list to each listener; raises ReadFailure if the read fails."""
        items = self.get_all_items()
        self._deliver(items)
        return items

    def _deliver(self, items: list[TimerRecord]):
        with STORE_LOCK:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(items)
            except Exception:
                logger.exception("timer listener %r failed", listener)

    def _notify(self):
        # runs after a committed change, so failures here are logged and never raised
        with STORE_LOCK:
            if not self._listeners:
                return
        try:
            items = self.get_all_items()
        except StoreError:
            logger.exception("re-read of %s after change failed", self.location)
            return
        self._deliver(items)


class TimerListView:
    """Cached snapshot of the store for a list screen, kept current through subscribe()."""

    def __init__(self, store: TimerStore):
        self.store = store
        self.items: list[TimerRecord] = []
        self._unsubscribe = store.subscribe(self._on_change)
        self.refresh()

    def _on_change(self, items: list[TimerRecord]):
        self.items = list(items)

    def refresh(self) -> list[TimerRecord]:
        return self.store.refresh()

    def close(self):
        self._unsubscribe()


def open_default_store() -> TimerStore:
    """Open the store at the configured location with the configured upgrade policy."""
    cfg = get_config()
    return TimerStore.open(get_db_path(), destructive_upgrade=cfg["destructive_upgrade"])
