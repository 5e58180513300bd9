"""Event sink adapters - Console and database implementations."""

from .console import LoggingEventSink
from .postgres import PostgresEventJournal, run_migrations

__all__ = ["LoggingEventSink", "PostgresEventJournal", "run_migrations"]
