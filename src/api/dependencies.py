"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the registrar
service, the host clock and the caller identity into routes, plus the
factory that wires the domain service to its adapters.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from src.config.settings import Settings
from src.domain.fees import FeeConfig
from src.domain.ports import Clock, EventSink, ValueTransfer
from src.domain.registrar import RegistrarConfig, RegistrarService


def build_registrar_service(
    settings: Settings,
    value_transfer: ValueTransfer,
    event_sink: EventSink,
) -> RegistrarService:
    """
    Create the registrar service from settings and adapters.

    Fee recipient and protocol treasury default to the admin account.
    """
    config = RegistrarConfig(
        admin=settings.admin_account,
        tld=settings.tld,
        registration_period=settings.registration_period,
        grace_period=settings.grace_period,
        premium_length_threshold=settings.premium_length_threshold,
        max_label_length=settings.max_label_length,
        max_full_name_length=settings.max_full_name_length,
        max_names_per_owner=settings.max_names_per_owner,
        max_batch_size=settings.max_batch_size,
    )
    fees = FeeConfig(
        base_fee=settings.base_fee,
        renew_fee=settings.renew_fee,
        premium_multiplier=settings.premium_multiplier,
        fee_recipient=settings.fee_recipient or settings.admin_account,
        protocol_treasury=settings.protocol_treasury or settings.admin_account,
        protocol_fee_percent=settings.protocol_fee_percent,
    )
    return RegistrarService(
        config=config,
        fees=fees,
        value_transfer=value_transfer,
        event_sink=event_sink,
    )


def get_registrar(request: Request) -> RegistrarService:
    """
    Get the registrar service from app state.

    The service is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.registrar


def get_clock(request: Request) -> Clock:
    """Get the host clock from app state."""
    return request.app.state.clock


def get_now(clock: Clock = Depends(get_clock)) -> int:
    """Read the clock once per request."""
    return clock.now()


# Caller identity header for OpenAPI documentation.
# Authenticating the caller is the transport's concern, not the registrar's.
account_header = APIKeyHeader(name="X-Account", auto_error=False)


def get_caller(account: str | None = Depends(account_header)) -> str:
    """
    Extract the acting account from the X-Account header.

    Returns:
        Stripped account identifier

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if account is None or not account.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Account header",
        )
    return account.strip()
