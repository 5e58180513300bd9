"""
Domain exceptions - Semantic error types for the registrar.

Each exception carries exactly one ErrorCode so that every failed
operation reports a single discrete code to its caller.
"""

from .ports import ErrorCode


class RegistrarError(Exception):
    """Base class for registrar domain errors."""

    code: ErrorCode

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.code.name)
        self.detail = detail


# Input validation


class EmptyLabel(RegistrarError):
    """Label is empty, or one side of a subdomain label is empty."""

    code = ErrorCode.EMPTY_LABEL


class LabelTooLong(RegistrarError):
    """Label (or rendered full name) exceeds its length limit."""

    code = ErrorCode.LABEL_TOO_LONG


class InvalidLabel(RegistrarError):
    """Malformed dot placement in a label."""

    code = ErrorCode.INVALID_LABEL


class BatchTooLarge(RegistrarError):
    """Too many labels submitted in a single batch registration."""

    code = ErrorCode.BATCH_TOO_LARGE


# State conflicts


class NameTaken(RegistrarError):
    """Label is registered and not yet fully expired."""

    code = ErrorCode.NAME_TAKEN


class NameNotFound(RegistrarError):
    """No record exists for the label."""

    code = ErrorCode.NAME_NOT_FOUND


class NameExpired(RegistrarError):
    """Record is past its expiry for the requested operation."""

    code = ErrorCode.NAME_EXPIRED


class InGracePeriod(RegistrarError):
    """Only the owner may renew a name in its grace period."""

    code = ErrorCode.IN_GRACE_PERIOD


class TransferToSelf(RegistrarError):
    """Transfer recipient is the current owner."""

    code = ErrorCode.TRANSFER_TO_SELF


# Authorization


class NotOwner(RegistrarError):
    """Caller does not own the name (or the parent of a subdomain)."""

    code = ErrorCode.NOT_OWNER


class NotAdmin(RegistrarError):
    """Caller is not the admin identity."""

    code = ErrorCode.NOT_ADMIN


class NotNameOwner(RegistrarError):
    """Caller cannot use a name it does not own as its primary name."""

    code = ErrorCode.NOT_NAME_OWNER


# Configuration


class ZeroFee(RegistrarError):
    """Fee, renewal fee or multiplier would be zero."""

    code = ErrorCode.ZERO_FEE


class PercentTooHigh(RegistrarError):
    """Protocol fee percentage above 100."""

    code = ErrorCode.PERCENT_TOO_HIGH


# Payment and resolver


class PaymentFailed(RegistrarError):
    """Fee could not be collected from the payer."""

    code = ErrorCode.PAYMENT_FAILED


class ResolverInvalid(RegistrarError):
    """Supplied resolver does not match the one bound to the name."""

    code = ErrorCode.RESOLVER_INVALID
