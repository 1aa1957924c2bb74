"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for account recovery:
claim-based user resolution, recovery channel selection and the recovery
code state machine. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .accounts import AccountStatusGuard, build_account
from .channels import ChannelDefinition, ChannelSelector
from .claims import ClaimResolver
from .exceptions import RecoveryClientError, RecoveryError, RecoveryServerError
from .masking import ChannelMasker
from .models import (
    Account,
    NotificationChannel,
    NotificationChannelInfo,
    RecoveryChannelInfo,
    RecoveryRecord,
)
from .ports import (
    AccountStatusProvider,
    ChannelType,
    RecoveryDataStore,
    RecoveryScenario,
    RecoveryStep,
    TenantResolver,
    UserDirectory,
)
from .recovery import AccountRecoveryService, RecoveryCodeIssuer, RecoveryCodeValidator

__all__ = [
    "Account",
    "AccountRecoveryService",
    "AccountStatusGuard",
    "AccountStatusProvider",
    "ChannelDefinition",
    "ChannelMasker",
    "ChannelSelector",
    "ChannelType",
    "ClaimResolver",
    "NotificationChannel",
    "NotificationChannelInfo",
    "RecoveryChannelInfo",
    "RecoveryClientError",
    "RecoveryCodeIssuer",
    "RecoveryCodeValidator",
    "RecoveryDataStore",
    "RecoveryError",
    "RecoveryRecord",
    "RecoveryScenario",
    "RecoveryServerError",
    "RecoveryStep",
    "TenantResolver",
    "UserDirectory",
    "build_account",
]
