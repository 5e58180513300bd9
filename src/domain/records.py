"""
Name records and the registry's in-memory indices.

- NameStore: label -> NameRecord, name_id -> label (reverse), id counter
- OwnerIndex: account -> name_ids currently owned (bounded)
- PrimaryNames: account -> chosen display label

Reverse entries are never deleted. When a label is re-registered after
full expiry it gets a new name_id; the old id keeps pointing at the label
even though it may now belong to someone else.
"""

import logging
from dataclasses import dataclass, replace

from .ports import NameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NameRecord:
    """A registered label and its ownership/expiry state."""

    name_id: int
    label: str
    full_name: str
    owner: str
    resolver: str | None
    expires_at: int
    is_premium: bool
    created_at: int
    last_renewed_at: int


def evaluate_lifecycle(now: int, expires_at: int, grace_period: int) -> NameState:
    """
    Classify a record against the clock.

    ACTIVE while now <= expires_at, GRACE up to and including
    expires_at + grace_period, FULLY_EXPIRED afterwards.
    """
    if now <= expires_at:
        return NameState.ACTIVE
    if now <= expires_at + grace_period:
        return NameState.GRACE
    return NameState.FULLY_EXPIRED


class NameStore:
    """Authoritative map from label to record, plus the reverse id map."""

    def __init__(self) -> None:
        self._records: dict[str, NameRecord] = {}
        self._labels_by_id: dict[int, str] = {}
        self._last_id = 0

    def get(self, label: str) -> NameRecord | None:
        return self._records.get(label)

    def label_for(self, name_id: int) -> str | None:
        return self._labels_by_id.get(name_id)

    @property
    def last_id(self) -> int:
        return self._last_id

    def next_id(self) -> int:
        """Allocate a new, never reused name_id."""
        self._last_id += 1
        return self._last_id

    def put(self, record: NameRecord) -> None:
        """Insert or overwrite the record for its label and index its id."""
        self._records[record.label] = record
        self._labels_by_id[record.name_id] = record.label

    def update(self, label: str, **changes: object) -> NameRecord:
        record = replace(self._records[label], **changes)
        self._records[label] = record
        return record


class OwnerIndex:
    """
    Per-account set of owned name_ids, in insertion order.

    Capacity is bounded; an insertion beyond capacity is skipped with a
    warning and the operation that triggered it still succeeds.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._ids: dict[str, list[int]] = {}

    def names_of(self, account: str) -> list[int]:
        return list(self._ids.get(account, ()))

    def add(self, account: str, name_id: int) -> bool:
        """Add name_id to account; returns False if skipped (duplicate or full)."""
        ids = self._ids.setdefault(account, [])
        if name_id in ids:
            return False
        if len(ids) >= self._capacity:
            logger.warning(
                "Owner index full for %s (%d names); name_id %d not indexed",
                account,
                self._capacity,
                name_id,
            )
            return False
        ids.append(name_id)
        return True

    def remove(self, account: str, name_id: int) -> None:
        ids = self._ids.get(account)
        if ids and name_id in ids:
            ids.remove(name_id)

    def move(self, name_id: int, old_owner: str, new_owner: str) -> None:
        self.remove(old_owner, name_id)
        self.add(new_owner, name_id)


class PrimaryNames:
    """Per-account primary (display) label with the auto-assign/clear helpers."""

    def __init__(self) -> None:
        self._labels: dict[str, str] = {}

    def get(self, account: str) -> str | None:
        return self._labels.get(account)

    def set(self, account: str, label: str) -> None:
        self._labels[account] = label

    def clear(self, account: str) -> str | None:
        """Remove account's primary label, returning it if one was set."""
        return self._labels.pop(account, None)

    def assign_if_missing(self, account: str, label: str) -> bool:
        if account in self._labels:
            return False
        self._labels[account] = label
        return True

    def clear_if_points_at(self, account: str, label: str) -> bool:
        if self._labels.get(account) != label:
            return False
        del self._labels[account]
        return True
