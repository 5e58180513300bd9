"""
In-memory ledger adapter - Implements ValueTransfer and Clock protocols.

Stands in for the ledger substrate: account balances for fee payments
and a manually advanced logical clock. Used by the demo host and tests.
"""

import logging
from collections import defaultdict

from src.domain.ports import TransferFailed

logger = logging.getLogger(__name__)


class InMemoryLedger:
    """
    Implements ValueTransfer protocol with in-process balances.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Accounts not seen before start with `starting_balance`.
    """

    def __init__(self, starting_balance: int = 0) -> None:
        self._starting_balance = starting_balance
        self._balances: defaultdict[str, int] = defaultdict(lambda: self._starting_balance)

    def balance_of(self, account: str) -> int:
        return self._balances[account]

    def credit(self, account: str, amount: int) -> None:
        """Mint amount into account (test/demo funding)."""
        self._balances[account] += amount

    def transfer(self, amount: int, sender: str, recipient: str) -> None:
        """
        Move amount from sender to recipient.

        Raises:
            TransferFailed: Non-positive amount or insufficient balance
        """
        if amount <= 0:
            raise TransferFailed(f"invalid amount: {amount}")
        if self._balances[sender] < amount:
            raise TransferFailed(f"insufficient balance: {sender} has {self._balances[sender]}, needs {amount}")

        self._balances[sender] -= amount
        self._balances[recipient] += amount
        logger.debug("Transferred %s from %s to %s", amount, sender, recipient)


class ManualClock:
    """Implements Clock protocol with a counter advanced by the host."""

    def __init__(self, start: int = 0) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, ticks: int = 1) -> int:
        if ticks < 0:
            raise ValueError("clock is monotonic")
        self._now += ticks
        return self._now
