"""
Unit tests for LoggingEventSink adapter.

Tests verify the console event sink implements EventSink protocol
and logs events in the correct format.
"""

import logging

import pytest

from src.adapters.events.console import LoggingEventSink
from src.adapters.ledger.memory import InMemoryLedger
from src.domain.ports import EventKind, EventSink, RegistrarEvent
from src.domain.registrar import RegistrarConfig, RegistrarService
from tests.conftest import ADMIN, ALICE, STARTING_BALANCE, make_fee_config


class TestLoggingEventSinkProtocol:
    """Tests for EventSink protocol compliance."""

    def test_implements_event_sink_protocol(self) -> None:
        sink = LoggingEventSink()
        assert callable(sink.emit)

        def accepts_event_sink(s: EventSink) -> None:
            pass

        accepts_event_sink(sink)

    def test_no_explicit_inheritance(self) -> None:
        """LoggingEventSink uses structural subtyping, not inheritance."""
        assert LoggingEventSink.__bases__ == (object,)


class TestEmit:
    """Tests for emit method."""

    def test_emit_logs_at_info(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            LoggingEventSink().emit(RegistrarEvent(kind=EventKind.NAME_RENEWED, at=7))

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO

    def test_emit_format(self, caplog: pytest.LogCaptureFixture) -> None:
        """Log format: [EVENT] <kind> at=<clock> <sorted json data>"""
        event = RegistrarEvent(
            kind=EventKind.NAME_REGISTERED,
            at=12,
            data={"owner": "wallet_1", "label": "alice"},
        )
        with caplog.at_level(logging.INFO):
            LoggingEventSink().emit(event)

        assert '[EVENT] NameRegistered at=12 {"label": "alice", "owner": "wallet_1"}' in caplog.text

    def test_emit_serializes_nested_snapshot(self, caplog: pytest.LogCaptureFixture) -> None:
        event = RegistrarEvent(
            kind=EventKind.CONFIG_CHANGED,
            at=0,
            data={"field": "base_fee", "config": {"base_fee": 1}},
        )
        with caplog.at_level(logging.INFO):
            LoggingEventSink().emit(event)

        assert '"config": {"base_fee": 1}' in caplog.text

    def test_emit_returns_none(self) -> None:
        assert LoggingEventSink().emit(RegistrarEvent(kind=EventKind.NAME_RENEWED, at=0)) is None


class TestSinkFailureIsolation:
    """A failing sink never undoes a committed operation."""

    def test_failing_sink_is_logged_and_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        class BrokenSink:
            def emit(self, event: RegistrarEvent) -> None:
                raise RuntimeError("indexer down")

        registrar = RegistrarService(
            RegistrarConfig(admin=ADMIN),
            make_fee_config(),
            InMemoryLedger(starting_balance=STARTING_BALANCE),
            BrokenSink(),
        )

        with caplog.at_level(logging.ERROR):
            result = registrar.register("alice", ALICE, now=0)

        assert result.name_id == 1
        assert registrar.get_owner("alice") == ALICE
        assert "Event sink failed for NameRegistered" in caplog.text
