"""
Domain models - Immutable value objects for account recovery.

All models are frozen dataclasses; the recovery pipeline builds them
per request and never mutates them.
"""

from dataclasses import dataclass
from datetime import datetime

from .ports import ChannelType, RecoveryScenario, RecoveryStep


@dataclass(frozen=True)
class Account:
    """Resolved account: username without store prefix, tenant and user store."""

    username: str
    tenant_domain: str
    user_store_domain: str


@dataclass(frozen=True)
class NotificationChannel:
    """One communication channel eligible for recovery."""

    type: ChannelType
    value: str = ""
    verified: bool = False
    preferred: bool = False


@dataclass(frozen=True)
class RecoveryRecord:
    """
    Recovery data bound to an issued code.

    ``remaining_set_ids`` holds the serialized channel selection
    (see ``channels.serialize_channel_selection``). ``created_at`` is
    owned by the store and is None until the record is persisted.
    """

    account: Account
    code: str
    scenario: RecoveryScenario
    step: RecoveryStep
    remaining_set_ids: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True)
class NotificationChannelInfo:
    """Display-safe channel entry returned to the client."""

    id: int
    type: ChannelType
    value: str
    preferred: bool


@dataclass(frozen=True)
class RecoveryChannelInfo:
    """Response of a recovery initiation: username, code and masked channels."""

    username: str
    recovery_code: str
    channels: tuple[NotificationChannelInfo, ...]
