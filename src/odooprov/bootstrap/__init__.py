"""Host bootstrap helpers for odooprov."""
from __future__ import annotations

from .service_accounts import (
    ServiceAccountSpec,
    ServiceAccountStatus,
    create_account_command,
    inspect_service_account,
    operator_account,
)

__all__ = [
    "ServiceAccountSpec",
    "ServiceAccountStatus",
    "create_account_command",
    "inspect_service_account",
    "operator_account",
]
