"""SQLite-backed durable store.

A single ``kv`` table holds every record.  ``set_multiple`` and
``remove_multiple`` run inside one transaction, so a batch either lands
completely or not at all.  All database work runs in a worker thread via
``run_sync()``; each call opens its own connection.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Mapping
from pathlib import Path

from ..core.async_utils import run_sync
from ..errors import StorageFailure
from .base import DurableStore

logger = logging.getLogger(__name__)

DB_FILENAME = "content_sync.db"


class SqliteStore(DurableStore):
    """Durable store in a single SQLite database file.

    Args:
        db_path: Database file.  Parent directories are created on first use.
    """

    name = "sqlite"

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._initialized = False

    def _get_connection(self) -> sqlite3.Connection:
        if not self._initialized:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        if not self._initialized:
            with conn:
                conn.execute(
                    "CREATE TABLE IF NOT EXISTS kv ("
                    " key TEXT PRIMARY KEY,"
                    " value TEXT NOT NULL,"
                    " updated_at TEXT DEFAULT CURRENT_TIMESTAMP"
                    ")"
                )
            self._initialized = True
            logger.debug("SQLite store initialized at %s", self.db_path)
        return conn

    def _run(self, operation, *args):
        try:
            conn = self._get_connection()
        except (sqlite3.Error, OSError) as exc:
            raise StorageFailure(
                f"cannot open {self.db_path}: {exc}"
            ) from exc
        try:
            with conn:
                return operation(conn, *args)
        except sqlite3.Error as exc:
            raise StorageFailure(f"sqlite error: {exc}") from exc
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Synchronous operations (run in a worker thread)
    # ------------------------------------------------------------------

    @staticmethod
    def _get(conn: sqlite3.Connection, key: str) -> str | None:
        row = conn.execute(
            "SELECT value FROM kv WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    @staticmethod
    def _upsert(
        conn: sqlite3.Connection, items: list[tuple[str, str]]
    ) -> None:
        conn.executemany(
            "INSERT INTO kv (key, value, updated_at)"
            " VALUES (?, ?, CURRENT_TIMESTAMP)"
            " ON CONFLICT(key) DO UPDATE SET"
            " value = excluded.value, updated_at = excluded.updated_at",
            items,
        )

    @staticmethod
    def _delete(conn: sqlite3.Connection, keys: list[str]) -> None:
        conn.executemany(
            "DELETE FROM kv WHERE key = ?", [(key,) for key in keys]
        )

    # ------------------------------------------------------------------
    # DurableStore
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        return await run_sync(self._run, self._get, key)

    async def set(self, key: str, value: str) -> None:
        await run_sync(self._run, self._upsert, [(key, value)])

    async def remove(self, key: str) -> None:
        await run_sync(self._run, self._delete, [key])

    async def set_multiple(self, items: Mapping[str, str]) -> None:
        await run_sync(self._run, self._upsert, list(items.items()))
        logger.debug("SQLite store wrote %d keys", len(items))

    async def remove_multiple(self, keys: Iterable[str]) -> None:
        await run_sync(self._run, self._delete, list(keys))
