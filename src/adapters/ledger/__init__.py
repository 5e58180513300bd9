"""Ledger adapters - Value transfer and clock implementations."""

from .clock import BlockClock
from .memory import InMemoryLedger, ManualClock

__all__ = ["BlockClock", "InMemoryLedger", "ManualClock"]
