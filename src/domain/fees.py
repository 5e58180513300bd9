"""
Fee policy and fee distribution.

Fee Policy computes what an operation costs; the FeeDistributor collects
it through the ValueTransfer port, splitting it between the protocol
treasury and the fee recipient.

Payment Atomicity
=================

A registration or renewal must never commit without payment, and payment
must never be kept without the registration or renewal it paid for.
The distributor therefore runs before any registry mutation and, when the
second leg of a split payment fails, refunds the first leg before raising
PaymentFailed.
"""

import logging
from dataclasses import asdict, dataclass

from .exceptions import PaymentFailed, ZeroFee
from .ports import TransferFailed, ValueTransfer

logger = logging.getLogger(__name__)


@dataclass
class FeeConfig:
    """Mutable fee parameters, owned by the admin config store."""

    base_fee: int
    renew_fee: int
    premium_multiplier: int
    fee_recipient: str
    protocol_treasury: str
    protocol_fee_percent: int
    total_fees_collected: int = 0

    def snapshot(self) -> dict[str, int | str]:
        return asdict(self)


@dataclass(frozen=True)
class FeeReceipt:
    """How a collected fee was split."""

    total: int
    protocol_share: int
    recipient_share: int


def registration_fee(config: FeeConfig, is_premium: bool) -> int:
    """Registration fee: base fee, times the premium multiplier for premium labels."""
    fee = config.base_fee * (config.premium_multiplier if is_premium else 1)
    if fee == 0:
        raise ZeroFee("registration fee is zero")
    return fee


def renewal_fee(config: FeeConfig) -> int:
    """Flat renewal fee, independent of premium status."""
    if config.renew_fee == 0:
        raise ZeroFee("renewal fee is zero")
    return config.renew_fee


def split_fee(total: int, protocol_fee_percent: int) -> tuple[int, int]:
    """Return (protocol_share, recipient_share); the protocol share rounds down."""
    protocol_share = total * protocol_fee_percent // 100
    return protocol_share, total - protocol_share


class FeeDistributor:
    """Collects fees from payers and accumulates the running fee total."""

    def __init__(self, config: FeeConfig, value_transfer: ValueTransfer) -> None:
        self._config = config
        self._value_transfer = value_transfer

    def collect(self, total: int, payer: str) -> FeeReceipt:
        """
        Collect a fee from payer and split it between treasury and recipient.

        Args:
            total: Fee to collect
            payer: Account paying the fee

        Returns:
            FeeReceipt describing the split

        Raises:
            PaymentFailed: If any leg of the transfer fails (completed legs are refunded)
        """
        protocol_share, recipient_share = split_fee(total, self._config.protocol_fee_percent)
        legs = [
            (protocol_share, self._config.protocol_treasury),
            (recipient_share, self._config.fee_recipient),
        ]

        completed: list[tuple[int, str]] = []
        for amount, recipient in legs:
            if amount == 0:
                continue
            try:
                self._value_transfer.transfer(amount, payer, recipient)
            except TransferFailed as e:
                self._refund(completed, payer)
                raise PaymentFailed(f"transfer of {amount} from {payer} failed") from e
            completed.append((amount, recipient))

        self._config.total_fees_collected += total
        return FeeReceipt(total=total, protocol_share=protocol_share, recipient_share=recipient_share)

    def _refund(self, completed: list[tuple[int, str]], payer: str) -> None:
        for amount, recipient in reversed(completed):
            logger.warning("Refunding %s from %s to %s after failed payment", amount, recipient, payer)
            try:
                self._value_transfer.transfer(amount, recipient, payer)
            except TransferFailed:
                logger.exception("Refund of %s from %s to %s failed; amount is stranded", amount, recipient, payer)
