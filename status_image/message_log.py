"""SQLite message log used as the aggregation source by the standalone host.

One row per (date number, type, platform, self_id) with a running count.
All calls are pushed to a worker thread so the event loop never blocks on
disk.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from .host import MessageCountRow
from .message_cache import date_number

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS analytics_message (
    date INTEGER NOT NULL,
    type TEXT NOT NULL,
    platform TEXT NOT NULL,
    self_id TEXT NOT NULL,
    count INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (date, type, platform, self_id)
)
"""


class MessageLog:
    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        with self._cursor() as cursor:
            cursor.execute(_SCHEMA)
        logger.info("Message log opened at %s", self._path)

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            cursor = self._conn.cursor()
            try:
                yield cursor
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            finally:
                cursor.close()

    def close(self) -> None:
        self._conn.close()

    # --- sync core ---

    def _record(self, type_: str, platform: str, self_id: str, date: int) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO analytics_message (date, type, platform, self_id, count)
                VALUES (?, ?, ?, ?, 1)
                ON CONFLICT (date, type, platform, self_id)
                DO UPDATE SET count = count + 1
                """,
                (date, type_, platform, self_id),
            )

    def _aggregate(self, start: int, end: int) -> list[MessageCountRow]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT type, platform, self_id, SUM(count)
                FROM analytics_message
                WHERE date >= ? AND date < ?
                GROUP BY type, platform, self_id
                """,
                (start, end),
            )
            return [
                MessageCountRow(type=t, platform=p, self_id=s, count=c)
                for t, p, s, c in cursor.fetchall()
            ]

    # --- async API ---

    async def record(
        self,
        type_: str,
        platform: str,
        self_id: str,
        when: datetime | None = None,
    ) -> None:
        await asyncio.to_thread(self._record, type_, platform, self_id, date_number(when))

    async def aggregate(self, start: int, end: int) -> list[MessageCountRow]:
        return await asyncio.to_thread(self._aggregate, start, end)
