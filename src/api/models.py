"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.

The label character set (lowercase ascii letters, digits and inner hyphens,
optionally one `child.parent` level) is enforced here, at the presentation
layer. Length and shape rules are left to the registrar so that they are
reported with their registrar error codes.
"""

import re
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

LABEL_PATTERN = r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)?$"
LABEL_PART_PATTERN = re.compile(r"[a-z0-9]([a-z0-9-]*[a-z0-9])?")

Label = Annotated[str, StringConstraints(pattern=LABEL_PATTERN)]
Account = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]


def has_label_charset(label: str) -> bool:
    """
    True if every non-empty dot-separated part uses the label character set.

    Empty parts pass so the registrar can report them as shape errors.
    """
    return all(LABEL_PART_PATTERN.fullmatch(part) for part in label.split(".") if part)


class RegisterRequest(BaseModel):
    """Request model for name registration."""

    label: Label = Field(..., description="Label without suffix, e.g. 'alice' or 'sub.alice'")


class BatchRegisterRequest(BaseModel):
    """
    Request model for registering several names in one call.

    Labels are not pattern-checked here: a bad label fails its own slot
    (see `has_label_charset`) instead of rejecting the whole batch.
    """

    labels: list[str]


class TransferRequest(BaseModel):
    """Request model for name transfer."""

    new_owner: Account


class ResolverRequest(BaseModel):
    """Request model for binding a resolver."""

    resolver: Account


class PrimaryNameRequest(BaseModel):
    """Request model for choosing a primary name."""

    label: Label


class AmountRequest(BaseModel):
    """Request model for numeric admin settings."""

    value: int = Field(..., ge=0)


class AccountRequest(BaseModel):
    """Request model for account-valued admin settings."""

    account: Account


class PremiumLabelRequest(BaseModel):
    """Request model for a premium override."""

    is_premium: bool


class RegistrationResponse(BaseModel):
    """Response model for a successful registration."""

    name_id: int
    full_name: str
    expires_at: int
    fee_paid: int


class BatchItemResponse(BaseModel):
    """One slot of a batch registration: either a result or an error code."""

    label: str
    ok: bool
    result: RegistrationResponse | None = None
    error_code: int | None = None
    error: str | None = None


class RenewalResponse(BaseModel):
    """Response model for a successful renewal."""

    new_expires_at: int
    fee_paid: int


class NameResponse(BaseModel):
    """Response model for a name lookup."""

    name_id: int
    label: str
    full_name: str
    owner: str
    resolver: str | None
    expires_at: int
    is_premium: bool
    created_at: int
    last_renewed_at: int
    state: str


class AvailabilityResponse(BaseModel):
    """Response model for availability and price checks."""

    label: str
    available: bool
    is_premium: bool
    registration_fee: int
    in_grace_period: bool


class FeeConfigResponse(BaseModel):
    """Response model for the current fee configuration."""

    base_fee: int
    renew_fee: int
    premium_multiplier: int
    fee_recipient: str
    protocol_treasury: str
    protocol_fee_percent: int
    total_fees_collected: int


class OwnerNamesResponse(BaseModel):
    """Response model for an owner's name ids."""

    account: str
    name_ids: list[int]


class LabelResponse(BaseModel):
    """Response model for a reverse (id -> label) lookup."""

    name_id: int
    label: str


class PrimaryNameResponse(BaseModel):
    """Response model for an account's primary name."""

    account: str
    label: str | None
    full_name: str | None
    display_name: str


class StatsResponse(BaseModel):
    """Response model for registrar counters and periods."""

    now: int
    total_names: int
    total_fees_collected: int
    registration_period: int
    grace_period: int
    admin: str


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
