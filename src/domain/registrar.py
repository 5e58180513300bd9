"""
Registrar domain service - Name lifecycle and fee engine.

This module contains the core business logic of the name registrar:
registration, renewal, transfer, resolver binding, primary names and the
admin-gated fee configuration.

Operation Pipeline
==================

Every mutating operation runs the same stages, in order:

    validate label -> lifecycle gate -> fee collection -> store mutation
    -> owner index -> primary names -> event

All checks and the fee collection happen before the first mutation, and
nothing after the fee collection can fail. An operation therefore either
commits completely or raises a RegistrarError with no state changed.

Lifecycle Gate
==============

    ACTIVE         now <= expires_at
    GRACE          expires_at < now <= expires_at + grace_period
    FULLY_EXPIRED  now > expires_at + grace_period

GRACE is a renewal-only, owner-only window. FULLY_EXPIRED labels are
available to anyone; the stale record is overwritten by the next
registration and receives a brand-new name_id.

The clock value (`now`) and the acting account (`caller`) are explicit
arguments of every operation.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .exceptions import (
    BatchTooLarge,
    InGracePeriod,
    NameExpired,
    NameNotFound,
    NameTaken,
    NotAdmin,
    NotNameOwner,
    NotOwner,
    PercentTooHigh,
    RegistrarError,
    ResolverInvalid,
    TransferToSelf,
    ZeroFee,
)
from .fees import FeeConfig, FeeDistributor, registration_fee, renewal_fee
from .labels import PremiumClassifier, Subdomain, parse_label
from .ports import (
    ErrorCode,
    EventKind,
    EventSink,
    NameState,
    RegistrarEvent,
    ResolverCapability,
    ValueTransfer,
)
from .records import NameRecord, NameStore, OwnerIndex, PrimaryNames, evaluate_lifecycle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrarConfig:
    """Fixed, deploy-time registrar parameters."""

    admin: str
    tld: str = "sBTC"
    registration_period: int = 52_560
    grace_period: int = 1_008
    premium_length_threshold: int = 4
    max_label_length: int = 32
    max_full_name_length: int = 64
    max_names_per_owner: int = 100
    max_batch_size: int = 10


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a successful registration."""

    name_id: int
    full_name: str
    expires_at: int
    fee_paid: int


@dataclass(frozen=True)
class RenewalResult:
    """Outcome of a successful renewal."""

    new_expires_at: int
    fee_paid: int


class RegistrarService:
    """
    Domain service for the name registrar.

    Holds the name store and its indices, the premium overrides and the
    fee configuration. Value transfers and event delivery go through the
    injected ports.
    """

    def __init__(
        self,
        config: RegistrarConfig,
        fees: FeeConfig,
        value_transfer: ValueTransfer,
        event_sink: EventSink,
    ) -> None:
        self.config = config
        self._fees = fees
        self._event_sink = event_sink
        self._distributor = FeeDistributor(fees, value_transfer)
        self._store = NameStore()
        self._owners = OwnerIndex(config.max_names_per_owner)
        self._primary = PrimaryNames()
        self._premium_overrides: dict[str, bool] = {}
        self._premium = PremiumClassifier(config.premium_length_threshold, self._premium_overrides)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, label: str, caller: str, now: int) -> RegistrationResult:
        """
        Register a label (or a ``child.parent`` subdomain) for caller.

        Args:
            label: Requested label without the top-level suffix
            caller: Registering (and paying) account
            now: Current clock value

        Returns:
            RegistrationResult with the new name_id, full name, expiry and fee

        Raises:
            EmptyLabel, LabelTooLong, InvalidLabel: Malformed label
            NameNotFound, NotOwner, NameExpired: Subdomain parent check failed
            NameTaken: Label is registered and not fully expired
            ZeroFee: Fee configuration yields a zero fee
            PaymentFailed: Fee could not be collected
        """
        parsed = parse_label(
            label,
            self.config.tld,
            max_length=self.config.max_label_length,
            max_full_name_length=self.config.max_full_name_length,
        )
        if isinstance(parsed, Subdomain):
            self._require_parent(parsed.parent, caller, now)

        key = parsed.key
        previous = self._store.get(key)
        if previous is not None and self._state(previous, now) is not NameState.FULLY_EXPIRED:
            raise NameTaken(key)

        is_premium = self._premium.is_premium(key)
        fee = registration_fee(self._fees, is_premium)
        self._distributor.collect(fee, caller)

        if previous is not None:
            self._release(previous, now)

        record = NameRecord(
            name_id=self._store.next_id(),
            label=key,
            full_name=parsed.full_name(self.config.tld),
            owner=caller,
            resolver=None,
            expires_at=now + self.config.registration_period,
            is_premium=is_premium,
            created_at=now,
            last_renewed_at=now,
        )
        self._store.put(record)
        self._owners.add(caller, record.name_id)
        primary_set = self._primary.assign_if_missing(caller, key)

        self._emit(
            EventKind.NAME_REGISTERED,
            now,
            name_id=record.name_id,
            label=key,
            full_name=record.full_name,
            owner=caller,
            expires_at=record.expires_at,
            fee_paid=fee,
            is_premium=is_premium,
        )
        if primary_set:
            self._emit(EventKind.PRIMARY_NAME_SET, now, account=caller, label=key)
        return RegistrationResult(
            name_id=record.name_id,
            full_name=record.full_name,
            expires_at=record.expires_at,
            fee_paid=fee,
        )

    def register_many(
        self, labels: Iterable[str], caller: str, now: int
    ) -> list[RegistrationResult | ErrorCode]:
        """
        Register several labels independently, in order.

        Each slot holds either the RegistrationResult or the ErrorCode of
        that label's failure. A failure never rolls back earlier slots and
        never stops later ones; the caller must inspect every element.

        Raises:
            BatchTooLarge: More labels than max_batch_size (nothing is attempted)
        """
        labels = list(labels)
        if len(labels) > self.config.max_batch_size:
            raise BatchTooLarge(f"{len(labels)} > {self.config.max_batch_size}")

        results: list[RegistrationResult | ErrorCode] = []
        for label in labels:
            try:
                results.append(self.register(label, caller, now))
            except RegistrarError as e:
                results.append(e.code)
        return results

    def renew(self, label: str, caller: str, now: int) -> RenewalResult:
        """
        Extend a name by one registration period from its current expiry.

        Anyone may renew an ACTIVE name (gift renewal). During GRACE only
        the owner may renew.

        Raises:
            NameNotFound: No record for label
            NameExpired: Record is fully expired
            InGracePeriod: Non-owner renewal during grace
            PaymentFailed: Fee could not be collected
        """
        record = self._require(label)
        state = self._state(record, now)
        if state is NameState.FULLY_EXPIRED:
            raise NameExpired(label)
        if state is NameState.GRACE and caller != record.owner:
            raise InGracePeriod(label)

        fee = renewal_fee(self._fees)
        self._distributor.collect(fee, caller)

        record = self._store.update(
            label,
            expires_at=record.expires_at + self.config.registration_period,
            last_renewed_at=now,
        )
        self._emit(
            EventKind.NAME_RENEWED,
            now,
            name_id=record.name_id,
            label=label,
            renewed_by=caller,
            expires_at=record.expires_at,
            fee_paid=fee,
        )
        return RenewalResult(new_expires_at=record.expires_at, fee_paid=fee)

    # ------------------------------------------------------------------
    # Ownership and resolver
    # ------------------------------------------------------------------

    def transfer(self, label: str, new_owner: str, caller: str, now: int) -> None:
        """
        Hand an ACTIVE name to another account.

        Raises:
            NameNotFound, NotOwner, TransferToSelf, NameExpired
        """
        record = self._require(label)
        if caller != record.owner:
            raise NotOwner(label)
        if new_owner == caller:
            raise TransferToSelf(label)
        self._require_active(record, now)

        self._store.update(label, owner=new_owner)
        self._owners.move(record.name_id, caller, new_owner)
        primary_cleared = self._primary.clear_if_points_at(caller, label)
        primary_set = self._primary.assign_if_missing(new_owner, label)

        self._emit(
            EventKind.NAME_TRANSFERRED,
            now,
            name_id=record.name_id,
            label=label,
            from_owner=caller,
            to_owner=new_owner,
        )
        if primary_cleared:
            self._emit(EventKind.PRIMARY_NAME_CLEARED, now, account=caller, label=label)
        if primary_set:
            self._emit(EventKind.PRIMARY_NAME_SET, now, account=new_owner, label=label)

    def set_resolver(self, label: str, resolver: str, caller: str, now: int) -> None:
        """Bind a resolver identity to an ACTIVE name owned by caller."""
        record = self._require(label)
        if caller != record.owner:
            raise NotOwner(label)
        self._require_active(record, now)

        self._store.update(label, resolver=resolver)
        self._emit(EventKind.RESOLVER_SET, now, label=label, resolver=resolver)

    def clear_resolver(self, label: str, caller: str, now: int) -> None:
        """Unbind the resolver. Unlike set_resolver this has no expiry guard."""
        record = self._require(label)
        if caller != record.owner:
            raise NotOwner(label)

        self._store.update(label, resolver=None)
        self._emit(EventKind.RESOLVER_CLEARED, now, label=label)

    def resolve(self, label: str, resolver: ResolverCapability, now: int) -> bytes | None:
        """
        Dispatch a lookup to the resolver bound to an ACTIVE name.

        Raises:
            NameNotFound: No record for label
            NameExpired: Name is not ACTIVE
            ResolverInvalid: resolver is not the one bound to the name
        """
        record = self._require(label)
        self._require_active(record, now)
        if record.resolver is None or resolver.identity != record.resolver:
            raise ResolverInvalid(label)
        return resolver.resolve(label, record.owner)

    # ------------------------------------------------------------------
    # Primary names
    # ------------------------------------------------------------------

    def set_primary_name(self, label: str, caller: str, now: int) -> None:
        """Make an ACTIVE name owned by caller its primary (display) name."""
        record = self._require(label)
        if caller != record.owner:
            raise NotNameOwner(label)
        self._require_active(record, now)

        self._primary.set(caller, label)
        self._emit(EventKind.PRIMARY_NAME_SET, now, account=caller, label=label)

    def clear_primary_name(self, caller: str, now: int) -> None:
        """Remove caller's primary name, if any."""
        label = self._primary.clear(caller)
        if label is not None:
            self._emit(EventKind.PRIMARY_NAME_CLEARED, now, account=caller, label=label)

    # ------------------------------------------------------------------
    # Admin configuration
    # ------------------------------------------------------------------

    def set_base_fee(self, amount: int, caller: str, now: int) -> None:
        self._require_admin(caller)
        if amount == 0:
            raise ZeroFee("base fee")
        self._fees.base_fee = amount
        self._config_changed(now, "base_fee")

    def set_renew_fee(self, amount: int, caller: str, now: int) -> None:
        self._require_admin(caller)
        if amount == 0:
            raise ZeroFee("renew fee")
        self._fees.renew_fee = amount
        self._config_changed(now, "renew_fee")

    def set_premium_multiplier(self, multiplier: int, caller: str, now: int) -> None:
        self._require_admin(caller)
        if multiplier == 0:
            raise ZeroFee("premium multiplier")
        self._fees.premium_multiplier = multiplier
        self._config_changed(now, "premium_multiplier")

    def set_fee_recipient(self, recipient: str, caller: str, now: int) -> None:
        self._require_admin(caller)
        self._fees.fee_recipient = recipient
        self._config_changed(now, "fee_recipient")

    def set_protocol_treasury(self, treasury: str, caller: str, now: int) -> None:
        self._require_admin(caller)
        self._fees.protocol_treasury = treasury
        self._config_changed(now, "protocol_treasury")

    def set_protocol_fee_percent(self, percent: int, caller: str, now: int) -> None:
        self._require_admin(caller)
        if percent > 100:
            raise PercentTooHigh(str(percent))
        self._fees.protocol_fee_percent = percent
        self._config_changed(now, "protocol_fee_percent")

    def set_premium_label(self, label: str, is_premium: bool, caller: str, now: int) -> None:
        """Override the length rule for one label."""
        self._require_admin(caller)
        self._premium_overrides[label] = is_premium
        self._config_changed(now, "premium_label", label=label, is_premium=is_premium)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_name(self, label: str) -> NameRecord | None:
        return self._store.get(label)

    def get_owner(self, label: str) -> str | None:
        record = self._store.get(label)
        return record.owner if record else None

    def get_expiry(self, label: str) -> int | None:
        record = self._store.get(label)
        return record.expires_at if record else None

    def get_state(self, label: str, now: int) -> NameState | None:
        record = self._store.get(label)
        return self._state(record, now) if record else None

    def is_available(self, label: str, now: int) -> bool:
        return self.get_state(label, now) in (None, NameState.FULLY_EXPIRED)

    def is_in_grace_period(self, label: str, now: int) -> bool:
        return self.get_state(label, now) is NameState.GRACE

    def is_fully_expired(self, label: str, now: int) -> bool:
        return self.get_state(label, now) is NameState.FULLY_EXPIRED

    def is_premium(self, label: str) -> bool:
        return self._premium.is_premium(label)

    def get_registration_fee(self, label: str) -> int:
        return registration_fee(self._fees, self._premium.is_premium(label))

    def get_renewal_fee(self) -> int:
        return renewal_fee(self._fees)

    def get_fee_config(self) -> FeeConfig:
        return FeeConfig(**self._fees.snapshot())

    def get_names_by_owner(self, account: str) -> list[int]:
        return self._owners.names_of(account)

    def get_label_by_id(self, name_id: int) -> str | None:
        return self._store.label_for(name_id)

    def total_names(self) -> int:
        return self._store.last_id

    def total_fees_collected(self) -> int:
        return self._fees.total_fees_collected

    def is_admin(self, account: str) -> bool:
        return account == self.config.admin

    def get_primary_name(self, account: str) -> str | None:
        return self._primary.get(account)

    def get_primary_record(self, account: str) -> NameRecord | None:
        label = self._primary.get(account)
        return self._store.get(label) if label is not None else None

    def get_primary_full_name(self, account: str) -> str | None:
        label = self._primary.get(account)
        if label is None:
            return None
        return f"{label}.{self.config.tld}"

    def display_name(self, account: str) -> str:
        """Primary full name of account, or the raw account identifier."""
        return self.get_primary_full_name(account) or account

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _state(self, record: NameRecord, now: int) -> NameState:
        return evaluate_lifecycle(now, record.expires_at, self.config.grace_period)

    def _require(self, label: str) -> NameRecord:
        record = self._store.get(label)
        if record is None:
            raise NameNotFound(label)
        return record

    def _require_active(self, record: NameRecord, now: int) -> None:
        if self._state(record, now) is not NameState.ACTIVE:
            raise NameExpired(record.label)

    def _require_parent(self, parent: str, caller: str, now: int) -> None:
        record = self._require(parent)
        if record.owner != caller:
            raise NotOwner(parent)
        self._require_active(record, now)

    def _require_admin(self, caller: str) -> None:
        if not self.is_admin(caller):
            raise NotAdmin(caller)

    def _release(self, previous: NameRecord, now: int) -> None:
        """Detach a fully expired record's owner before the label is recycled."""
        self._owners.remove(previous.owner, previous.name_id)
        if self._primary.clear_if_points_at(previous.owner, previous.label):
            self._emit(
                EventKind.PRIMARY_NAME_CLEARED, now, account=previous.owner, label=previous.label
            )

    def _config_changed(self, now: int, field: str, **extra: object) -> None:
        self._emit(EventKind.CONFIG_CHANGED, now, field=field, config=self._fees.snapshot(), **extra)

    def _emit(self, kind: EventKind, now: int, **data: object) -> None:
        event = RegistrarEvent(kind=kind, at=now, data=dict(data))
        try:
            self._event_sink.emit(event)
        except Exception:
            logger.exception("Event sink failed for %s", kind.value)
