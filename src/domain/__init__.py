"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core of the name registrar: label validation,
premium pricing, fee policy and distribution, the registration lifecycle
state machine, the owner index and primary names. It defines its own port
interfaces for the host's clock, value transfers, resolvers and events.
"""

from .exceptions import RegistrarError
from .fees import FeeConfig, FeeReceipt
from .labels import Subdomain, TopLevel, parse_label
from .ports import (
    Clock,
    ErrorCode,
    EventKind,
    EventSink,
    NameState,
    RegistrarEvent,
    ResolverCapability,
    TransferFailed,
    ValueTransfer,
)
from .records import NameRecord
from .registrar import RegistrarConfig, RegistrarService, RegistrationResult, RenewalResult

__all__ = [
    "Clock",
    "ErrorCode",
    "EventKind",
    "EventSink",
    "FeeConfig",
    "FeeReceipt",
    "NameRecord",
    "NameState",
    "RegistrarConfig",
    "RegistrarError",
    "RegistrarEvent",
    "RegistrarService",
    "RegistrationResult",
    "RenewalResult",
    "ResolverCapability",
    "Subdomain",
    "TopLevel",
    "TransferFailed",
    "ValueTransfer",
    "parse_label",
]
