"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the registrar requires
from its host. Adapters implement these protocols.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Protocol


class NameState(str, Enum):
    """
    Lifecycle states of a name record, derived from the clock.

    State Transitions (driven only by the clock or a renewal):
    - ACTIVE -> GRACE (now passes expires_at)
    - GRACE -> FULLY_EXPIRED (now passes expires_at + grace_period)
    - GRACE -> ACTIVE (owner renews)

    Permissions:
    - ACTIVE: owner may transfer, set/clear resolver, set primary name;
      anyone may renew (gift renewal)
    - GRACE: only the owner may renew, nothing else is permitted
    - FULLY_EXPIRED: label is available for anyone to register fresh
    """

    ACTIVE = "ACTIVE"
    GRACE = "GRACE"
    FULLY_EXPIRED = "FULLY_EXPIRED"


class ErrorCode(IntEnum):
    """
    Discrete error codes returned by registrar operations.

    Values are stable wire codes shared with external clients.
    """

    NAME_TAKEN = 1001
    NAME_EXPIRED = 1002
    NOT_OWNER = 1003
    NOT_ADMIN = 1004
    INVALID_LABEL = 1005
    LABEL_TOO_LONG = 1006
    EMPTY_LABEL = 1007
    PAYMENT_FAILED = 1008
    NAME_NOT_FOUND = 1009
    IN_GRACE_PERIOD = 1010
    ZERO_FEE = 1011
    PERCENT_TOO_HIGH = 1012
    TRANSFER_TO_SELF = 1013
    RESOLVER_INVALID = 1014
    NOT_NAME_OWNER = 1015
    BATCH_TOO_LARGE = 1016


class EventKind(str, Enum):
    """Kinds of events narrated to the event sink."""

    NAME_REGISTERED = "NameRegistered"
    NAME_RENEWED = "NameRenewed"
    NAME_TRANSFERRED = "NameTransferred"
    RESOLVER_SET = "ResolverSet"
    RESOLVER_CLEARED = "ResolverCleared"
    PRIMARY_NAME_SET = "PrimaryNameSet"
    PRIMARY_NAME_CLEARED = "PrimaryNameCleared"
    CONFIG_CHANGED = "ConfigChanged"


@dataclass(frozen=True)
class RegistrarEvent:
    """Structured event emitted after a state-changing operation commits."""

    kind: EventKind
    at: int
    data: dict[str, Any] = field(default_factory=dict)


class TransferFailed(Exception):
    """Raised by a ValueTransfer adapter when a value transfer cannot be executed."""


class Clock(Protocol):
    """Port interface for the host's monotonic logical clock."""

    def now(self) -> int:
        """Return the current clock value (e.g. block height)."""
        ...


class ValueTransfer(Protocol):
    """Port interface for moving value between accounts."""

    def transfer(self, amount: int, sender: str, recipient: str) -> None:
        """
        Move amount from sender to recipient.

        Args:
            amount: Positive amount in the smallest currency unit
            sender: Paying account identifier
            recipient: Receiving account identifier

        Raises:
            TransferFailed: If the transfer cannot be executed
        """
        ...


class ResolverCapability(Protocol):
    """
    Port interface for an external resolver a name owner may delegate to.

    The registrar stores only the resolver's identity; callers hand in the
    capability itself and the registrar verifies the identity matches.
    """

    identity: str

    def resolve(self, label: str, owner: str) -> bytes | None:
        """
        Resolve a label to its payload.

        Args:
            label: Registered label (without suffix)
            owner: Current owner of the label

        Returns:
            Resolved payload, or None if the resolver has nothing for the label
        """
        ...


class EventSink(Protocol):
    """Port interface for narrating committed operations to indexers."""

    def emit(self, event: RegistrarEvent) -> None:
        """
        Publish an event.

        Emission is best-effort: failures must not affect the committed operation.
        """
        ...
