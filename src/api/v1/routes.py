"""
API v1 routes.

Defines REST endpoints for the name registrar. Every route reads the clock
once and passes it, with the caller from the X-Account header, to the
registrar service. Registrar errors are mapped to HTTP statuses; the error
code name is the `detail` and its numeric value the `X-Error-Code` header.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_caller, get_now, get_registrar
from src.api.models import (
    AccountRequest,
    AmountRequest,
    AvailabilityResponse,
    BatchItemResponse,
    BatchRegisterRequest,
    ErrorResponse,
    FeeConfigResponse,
    LabelResponse,
    MessageResponse,
    NameResponse,
    OwnerNamesResponse,
    PremiumLabelRequest,
    PrimaryNameRequest,
    PrimaryNameResponse,
    RegisterRequest,
    RegistrationResponse,
    RenewalResponse,
    ResolverRequest,
    StatsResponse,
    TransferRequest,
    has_label_charset,
)
from src.domain.exceptions import BatchTooLarge, RegistrarError
from src.domain.ports import ErrorCode
from src.domain.registrar import RegistrarService, RegistrationResult

router = APIRouter(tags=["v1"])

_STATUS_BY_CODE = {
    ErrorCode.EMPTY_LABEL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.LABEL_TOO_LONG: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_LABEL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.BATCH_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ZERO_FEE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PERCENT_TOO_HIGH: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_FAILED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_ADMIN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_NAME_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorCode.NAME_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NAME_TAKEN: status.HTTP_409_CONFLICT,
    ErrorCode.IN_GRACE_PERIOD: status.HTTP_409_CONFLICT,
    ErrorCode.TRANSFER_TO_SELF: status.HTTP_409_CONFLICT,
    ErrorCode.RESOLVER_INVALID: status.HTTP_409_CONFLICT,
    ErrorCode.NAME_EXPIRED: status.HTTP_410_GONE,
}

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid label or configuration value"},
    401: {"model": ErrorResponse, "description": "Missing X-Account header"},
    422: {"description": "Validation error"},
}


def _http_error(error: RegistrarError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.code.name,
        headers={"X-Error-Code": str(error.code.value)},
    )


def _registration_response(result: RegistrationResult) -> RegistrationResponse:
    return RegistrationResponse(
        name_id=result.name_id,
        full_name=result.full_name,
        expires_at=result.expires_at,
        fee_paid=result.fee_paid,
    )


# ----------------------------------------------------------------------
# Names
# ----------------------------------------------------------------------


@router.post(
    "/names",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_ERROR_RESPONSES,
        402: {"model": ErrorResponse, "description": "Fee could not be collected"},
        403: {"model": ErrorResponse, "description": "Subdomain parent not owned"},
        404: {"model": ErrorResponse, "description": "Subdomain parent not found"},
        409: {"model": ErrorResponse, "description": "Name already taken"},
    },
    summary="Register a name",
    description="Register a label (or a `child.parent` subdomain of a name you own) "
    "for one registration period. The registration fee is charged to the caller.",
)
async def register_name(
    request_data: RegisterRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> RegistrationResponse:
    """
    Register a name for the caller.

    - **label**: label without suffix, e.g. `alice` or `blog.alice`
    """
    try:
        result = registrar.register(request_data.label, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return _registration_response(result)


@router.post(
    "/names/batch",
    response_model=list[BatchItemResponse],
    responses=_ERROR_RESPONSES,
    summary="Register several names",
    description="Register each label independently. Failures are reported per "
    "label and never undo the other registrations in the batch. A label outside "
    "the character set fails its own slot with INVALID_LABEL.",
)
async def register_names(
    request_data: BatchRegisterRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> list[BatchItemResponse]:
    labels = request_data.labels
    try:
        if len(labels) > registrar.config.max_batch_size:
            raise BatchTooLarge(f"{len(labels)} > {registrar.config.max_batch_size}")
        accepted = [label for label in labels if has_label_charset(label)]
        registered = iter(registrar.register_many(accepted, caller, now))
    except RegistrarError as e:
        raise _http_error(e) from None

    items = []
    for label in labels:
        outcome = next(registered) if has_label_charset(label) else ErrorCode.INVALID_LABEL
        if isinstance(outcome, ErrorCode):
            items.append(
                BatchItemResponse(label=label, ok=False, error_code=outcome.value, error=outcome.name)
            )
        else:
            items.append(BatchItemResponse(label=label, ok=True, result=_registration_response(outcome)))
    return items


@router.get(
    "/names/{label}",
    response_model=NameResponse,
    responses={404: {"model": ErrorResponse, "description": "Name not found"}},
    summary="Look up a name",
)
async def get_name(
    label: str,
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> NameResponse:
    record = registrar.get_name(label)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ErrorCode.NAME_NOT_FOUND.name)
    return NameResponse(
        name_id=record.name_id,
        label=record.label,
        full_name=record.full_name,
        owner=record.owner,
        resolver=record.resolver,
        expires_at=record.expires_at,
        is_premium=record.is_premium,
        created_at=record.created_at,
        last_renewed_at=record.last_renewed_at,
        state=registrar.get_state(label, now).value,
    )


@router.get(
    "/names/{label}/availability",
    response_model=AvailabilityResponse,
    summary="Check availability and price",
)
async def get_availability(
    label: str,
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> AvailabilityResponse:
    try:
        fee = registrar.get_registration_fee(label)
    except RegistrarError as e:
        raise _http_error(e) from None
    return AvailabilityResponse(
        label=label,
        available=registrar.is_available(label, now),
        is_premium=registrar.is_premium(label),
        registration_fee=fee,
        in_grace_period=registrar.is_in_grace_period(label, now),
    )


@router.post(
    "/names/{label}/renew",
    response_model=RenewalResponse,
    responses={
        **_ERROR_RESPONSES,
        402: {"model": ErrorResponse, "description": "Fee could not be collected"},
        404: {"model": ErrorResponse, "description": "Name not found"},
        409: {"model": ErrorResponse, "description": "Grace period renewal by non-owner"},
        410: {"model": ErrorResponse, "description": "Name fully expired"},
    },
    summary="Renew a name",
    description="Extend a name by one registration period from its current expiry. "
    "Anyone may renew an active name; during the grace period only its owner may.",
)
async def renew_name(
    label: str,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> RenewalResponse:
    try:
        result = registrar.renew(label, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return RenewalResponse(new_expires_at=result.new_expires_at, fee_paid=result.fee_paid)


@router.post(
    "/names/{label}/transfer",
    response_model=MessageResponse,
    responses={
        **_ERROR_RESPONSES,
        403: {"model": ErrorResponse, "description": "Caller does not own the name"},
        404: {"model": ErrorResponse, "description": "Name not found"},
        409: {"model": ErrorResponse, "description": "Transfer to self"},
        410: {"model": ErrorResponse, "description": "Name not active"},
    },
    summary="Transfer a name",
)
async def transfer_name(
    label: str,
    request_data: TransferRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> MessageResponse:
    try:
        registrar.transfer(label, request_data.new_owner, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return MessageResponse(message="Name transferred")


@router.put(
    "/names/{label}/resolver",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Bind a resolver",
)
async def set_resolver(
    label: str,
    request_data: ResolverRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> MessageResponse:
    try:
        registrar.set_resolver(label, request_data.resolver, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return MessageResponse(message="Resolver set")


@router.delete(
    "/names/{label}/resolver",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Unbind the resolver",
)
async def clear_resolver(
    label: str,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> MessageResponse:
    try:
        registrar.clear_resolver(label, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return MessageResponse(message="Resolver cleared")


@router.get(
    "/ids/{name_id}",
    response_model=LabelResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown name id"}},
    summary="Reverse lookup by name id",
)
async def get_label_by_id(
    name_id: int,
    registrar: RegistrarService = Depends(get_registrar),
) -> LabelResponse:
    label = registrar.get_label_by_id(name_id)
    if label is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ErrorCode.NAME_NOT_FOUND.name)
    return LabelResponse(name_id=name_id, label=label)


# ----------------------------------------------------------------------
# Accounts and primary names
# ----------------------------------------------------------------------


@router.get(
    "/accounts/{account}/names",
    response_model=OwnerNamesResponse,
    summary="List an account's name ids",
)
async def get_names_by_owner(
    account: str,
    registrar: RegistrarService = Depends(get_registrar),
) -> OwnerNamesResponse:
    return OwnerNamesResponse(account=account, name_ids=registrar.get_names_by_owner(account))


@router.get(
    "/accounts/{account}/primary-name",
    response_model=PrimaryNameResponse,
    summary="Get an account's primary name",
)
async def get_primary_name(
    account: str,
    registrar: RegistrarService = Depends(get_registrar),
) -> PrimaryNameResponse:
    return PrimaryNameResponse(
        account=account,
        label=registrar.get_primary_name(account),
        full_name=registrar.get_primary_full_name(account),
        display_name=registrar.display_name(account),
    )


@router.put(
    "/primary-name",
    response_model=MessageResponse,
    responses={
        **_ERROR_RESPONSES,
        403: {"model": ErrorResponse, "description": "Caller does not own the name"},
        404: {"model": ErrorResponse, "description": "Name not found"},
        410: {"model": ErrorResponse, "description": "Name not active"},
    },
    summary="Set the caller's primary name",
)
async def set_primary_name(
    request_data: PrimaryNameRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> MessageResponse:
    try:
        registrar.set_primary_name(request_data.label, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return MessageResponse(message="Primary name set")


@router.delete(
    "/primary-name",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse, "description": "Missing X-Account header"}},
    summary="Clear the caller's primary name",
)
async def clear_primary_name(
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> MessageResponse:
    registrar.clear_primary_name(caller, now)
    return MessageResponse(message="Primary name cleared")


# ----------------------------------------------------------------------
# Fees and counters
# ----------------------------------------------------------------------


@router.get("/config", response_model=FeeConfigResponse, summary="Current fee configuration")
async def get_fee_config(registrar: RegistrarService = Depends(get_registrar)) -> FeeConfigResponse:
    return FeeConfigResponse(**registrar.get_fee_config().snapshot())


@router.get("/stats", response_model=StatsResponse, summary="Registrar counters")
async def get_stats(
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> StatsResponse:
    return StatsResponse(
        now=now,
        total_names=registrar.total_names(),
        total_fees_collected=registrar.total_fees_collected(),
        registration_period=registrar.config.registration_period,
        grace_period=registrar.config.grace_period,
        admin=registrar.config.admin,
    )


# ----------------------------------------------------------------------
# Admin
# ----------------------------------------------------------------------

_ADMIN_RESPONSES = {
    **_ERROR_RESPONSES,
    403: {"model": ErrorResponse, "description": "Caller is not the admin"},
}

_AMOUNT_SETTERS = {
    "base-fee": "set_base_fee",
    "renew-fee": "set_renew_fee",
    "premium-multiplier": "set_premium_multiplier",
    "protocol-fee-percent": "set_protocol_fee_percent",
}

_ACCOUNT_SETTERS = {
    "fee-recipient": "set_fee_recipient",
    "protocol-treasury": "set_protocol_treasury",
}


@router.put(
    "/admin/config/{setting}",
    response_model=FeeConfigResponse,
    responses={**_ADMIN_RESPONSES, 404: {"model": ErrorResponse, "description": "Unknown setting"}},
    summary="Update a numeric fee setting",
    description="One of `base-fee`, `renew-fee`, `premium-multiplier`, `protocol-fee-percent`.",
)
async def set_amount(
    setting: str,
    request_data: AmountRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> FeeConfigResponse:
    setter = _AMOUNT_SETTERS.get(setting)
    if setter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown setting: {setting}")
    try:
        getattr(registrar, setter)(request_data.value, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return FeeConfigResponse(**registrar.get_fee_config().snapshot())


@router.put(
    "/admin/accounts/{setting}",
    response_model=FeeConfigResponse,
    responses={**_ADMIN_RESPONSES, 404: {"model": ErrorResponse, "description": "Unknown setting"}},
    summary="Update a fee destination account",
    description="One of `fee-recipient`, `protocol-treasury`.",
)
async def set_account(
    setting: str,
    request_data: AccountRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> FeeConfigResponse:
    setter = _ACCOUNT_SETTERS.get(setting)
    if setter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown setting: {setting}")
    try:
        getattr(registrar, setter)(request_data.account, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return FeeConfigResponse(**registrar.get_fee_config().snapshot())


@router.put(
    "/admin/premium-labels/{label}",
    response_model=MessageResponse,
    responses=_ADMIN_RESPONSES,
    summary="Override premium pricing for a label",
)
async def set_premium_label(
    label: str,
    request_data: PremiumLabelRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_now),
    registrar: RegistrarService = Depends(get_registrar),
) -> MessageResponse:
    try:
        registrar.set_premium_label(label, request_data.is_premium, caller, now)
    except RegistrarError as e:
        raise _http_error(e) from None
    return MessageResponse(message="Premium label updated")
