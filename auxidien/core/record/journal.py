"""DuckDB-backed journal of record events."""

from __future__ import annotations

import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import duckdb

from .events import RecordEvent, event_payload

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS record_events (
    seq BIGINT PRIMARY KEY,
    event VARCHAR NOT NULL,
    payload VARCHAR NOT NULL,
    recorded_at TIMESTAMP NOT NULL
)
"""


class DuckDBEventJournal:
    """Append every record event to the ``record_events`` table.

    Subscribe an instance to :meth:`PriceRecord.subscribe`; it is called
    once per event after the record has committed the change.
    """

    def __init__(self, database: str | Path = ":memory:") -> None:
        self._lock = threading.Lock()
        self._connection = duckdb.connect(str(database))
        self._connection.execute(_CREATE_TABLE)
        row = self._connection.execute("SELECT COALESCE(MAX(seq), 0) FROM record_events").fetchone()
        self._seq = int(row[0]) if row else 0

    def __call__(self, event: RecordEvent) -> None:
        payload = json.dumps(event_payload(event))
        with self._lock:
            self._seq += 1
            self._connection.execute(
                "INSERT INTO record_events (seq, event, payload, recorded_at) VALUES (?, ?, ?, ?)",
                [self._seq, event.name, payload, datetime.now(UTC).replace(tzinfo=None)],
            )

    def entries(self, event: str | None = None, limit: int | None = None) -> list[dict[str, Any]]:
        """Journal rows oldest first, optionally filtered by event name."""
        query = "SELECT seq, event, payload, recorded_at FROM record_events"
        params: list[Any] = []
        if event is not None:
            query += " WHERE event = ?"
            params.append(event)
        query += " ORDER BY seq"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with self._lock:
            rows = self._connection.execute(query, params).fetchall()
        return [
            {"seq": seq, "event": name, "payload": json.loads(payload), "recorded_at": recorded_at}
            for seq, name, payload, recorded_at in rows
        ]

    def close(self) -> None:
        with self._lock:
            self._connection.close()


__all__ = ["DuckDBEventJournal"]
