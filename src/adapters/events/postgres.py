"""
PostgreSQL event journal adapter - Implements EventSink protocol.

This module provides a PostgreSQL implementation of the domain's event
sink port using psycopg3 with raw SQL. Every committed registrar event is
appended to the `registrar_events` table for external indexers.

Events are an append-only narration: the journal never updates or deletes
rows, and a failed insert is reported to the caller (the registrar logs it)
without affecting the operation that produced the event.
"""

import logging
from pathlib import Path
from typing import Any

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from src.domain.ports import EventKind, RegistrarEvent

logger = logging.getLogger(__name__)

# src/adapters/events/postgres.py -> <repo>/migrations
MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


class PostgresEventJournal:
    """
    Implements EventSink protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize journal with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def emit(self, event: RegistrarEvent) -> None:
        """
        Append an event to the journal.

        Args:
            event: Committed registrar event
        """
        sql = """
            INSERT INTO registrar_events (kind, at, data)
            VALUES (%s, %s, %s)
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (event.kind.value, event.at, Jsonb(event.data)))
            conn.commit()

    def recent(self, limit: int = 100, kind: EventKind | None = None) -> list[RegistrarEvent]:
        """
        Read the most recent events, newest first.

        Args:
            limit: Maximum number of events to return
            kind: Only return events of this kind

        Returns:
            List of RegistrarEvent
        """
        sql = """
            SELECT kind, at, data
            FROM registrar_events
            WHERE %(kind)s::text IS NULL OR kind = %(kind)s
            ORDER BY id DESC
            LIMIT %(limit)s
        """
        params: dict[str, Any] = {"kind": kind.value if kind else None, "limit": limit}

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            rows = cursor.fetchall()

        return [RegistrarEvent(kind=EventKind(row[0]), at=row[1], data=row[2]) for row in rows]


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """
    Apply the journal's SQL migrations in filename order.

    Every file must be idempotent (CREATE ... IF NOT EXISTS) since the
    whole set is replayed on each startup. All files run on one connection
    and commit together, so a failing file leaves no partial schema.

    Returns:
        Names of the files that were applied

    Raises:
        RuntimeError: A migration file failed to execute
    """
    if not migrations_dir.is_dir():
        logger.warning("No migrations directory at %s; event table must already exist", migrations_dir)
        return []

    sql_files = sorted(migrations_dir.glob("*.sql"))
    applied: list[str] = []
    with pool.connection() as conn:
        for sql_file in sql_files:
            try:
                conn.execute(sql_file.read_text())
            except (OSError, psycopg.Error) as e:
                logger.exception("Migration %s failed", sql_file.name)
                raise RuntimeError(f"Event journal migration failed: {sql_file.name}") from e
            applied.append(sql_file.name)

    logger.info("Event journal schema ready (%d migration file(s))", len(applied))
    return applied
