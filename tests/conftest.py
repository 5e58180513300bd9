"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory ledger funding the test accounts
- A recording event sink
- A registrar service wired to both, with the default fee configuration
"""

import pytest

from src.adapters.ledger.memory import InMemoryLedger
from src.domain.fees import FeeConfig
from src.domain.ports import EventKind, RegistrarEvent
from src.domain.registrar import RegistrarConfig, RegistrarService

ADMIN = "deployer"
ALICE = "wallet_1"
BOB = "wallet_2"
CAROL = "wallet_3"

BASE_FEE = 10_000_000
RENEW_FEE = 5_000_000
PREMIUM_MULTIPLIER = 5
REGISTRATION_PERIOD = 52_560
GRACE_PERIOD = 1_008
STARTING_BALANCE = 100_000_000_000


class RecordingEventSink:
    """EventSink that keeps every emitted event in memory."""

    def __init__(self) -> None:
        self.events: list[RegistrarEvent] = []

    def emit(self, event: RegistrarEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[RegistrarEvent]:
        return [event for event in self.events if event.kind is kind]


def make_fee_config() -> FeeConfig:
    return FeeConfig(
        base_fee=BASE_FEE,
        renew_fee=RENEW_FEE,
        premium_multiplier=PREMIUM_MULTIPLIER,
        fee_recipient=ADMIN,
        protocol_treasury=ADMIN,
        protocol_fee_percent=10,
    )


@pytest.fixture
def ledger() -> InMemoryLedger:
    """Ledger where every account starts well funded."""
    return InMemoryLedger(starting_balance=STARTING_BALANCE)


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def registrar(ledger: InMemoryLedger, events: RecordingEventSink) -> RegistrarService:
    """Registrar with the deploy-time defaults and ADMIN as admin identity."""
    return RegistrarService(
        config=RegistrarConfig(admin=ADMIN),
        fees=make_fee_config(),
        value_transfer=ledger,
        event_sink=events,
    )
