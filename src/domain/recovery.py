"""
Account recovery domain service - Recovery code issuance and validation.

This module contains the core business logic for notification-based
account recovery: resolving the user from claims, selecting the channels
the user may recover through, and the recovery code state machine.

Recovery Code State Machine
===========================

States:
- issued (step=SEND_RECOVERY_INFORMATION): record stored with a fresh code
- consumed: validated at the expected step by the next recovery stage
- invalidated: superseded by a new issuance for the same account
- expired: store-side TTL exceeded

Transitions:
    issued -> consumed     (validate_recovery_code at the expected step)
    issued -> invalidated  (issue() for the same account: invalidate, then store)
    issued -> expired      (store TTL)

Only ``issued`` is owned by this module. The store enforces invalidation
and expiry; the domain triggers invalidation and observes expiry through
load failures. Consumption belongs to the next recovery stage.
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field

from .accounts import AccountStatusGuard, build_account
from .channels import (
    ChannelSelector,
    is_notifications_internally_managed,
    serialize_channel_selection,
)
from .claims import ClaimResolver
from .exceptions import (
    ExpiredCodeError,
    ExpiredRecoveryCode,
    InvalidCodeError,
    InvalidRecoveryCode,
    NoAccountRecoveryData,
    RecoveryDataStoreError,
    RecoveryStoreError,
    RecoveryStoreFailure,
    qualify_error_code,
)
from .masking import ChannelMasker
from .models import (
    NotificationChannel,
    NotificationChannelInfo,
    RecoveryChannelInfo,
    RecoveryRecord,
)
from .ports import RecoveryDataStore, RecoveryScenario, RecoveryStep

logger = logging.getLogger(__name__)


def build_channel_info(
    channels: tuple[NotificationChannel, ...], masker: ChannelMasker
) -> tuple[NotificationChannelInfo, ...]:
    """Number channels from 1 in the given order and mask their values."""
    return tuple(
        NotificationChannelInfo(
            id=channel_id,
            type=channel.type,
            value=masker.mask(channel.type, channel.value),
            preferred=channel.preferred,
        )
        for channel_id, channel in enumerate(channels, start=1)
    )


@dataclass(frozen=True)
class RecoveryCodeIssuer:
    """Issues recovery codes and persists the bound channel selection."""

    store: RecoveryDataStore

    def issue(
        self,
        username: str,
        tenant_domain: str,
        channels: tuple[NotificationChannel, ...],
        scenario: RecoveryScenario,
    ) -> RecoveryRecord:
        """
        Generate a recovery code and store its record.

        Any existing record of the account is invalidated before the new one
        is stored.

        Raises:
            RecoveryDataStoreError: Store invalidate or store failed
        """
        record = RecoveryRecord(
            account=build_account(username, tenant_domain),
            code=self._generate_recovery_code(),
            scenario=scenario,
            step=RecoveryStep.SEND_RECOVERY_INFORMATION,
            remaining_set_ids=serialize_channel_selection(channels),
        )
        try:
            self.store.invalidate(record.account)
            self.store.store(record)
        except RecoveryStoreError as e:
            logger.error("Error storing recovery data for scenario %s: %s", scenario.value, e)
            raise RecoveryDataStoreError() from e

        logger.info(
            "Recovery code issued for scenario %s with %d channel(s)",
            scenario.value,
            len(channels),
        )
        return record

    def _generate_recovery_code(self) -> str:
        return str(uuid.uuid4())


@dataclass(frozen=True)
class RecoveryCodeValidator:
    """Validates a presented recovery code against the expected step."""

    store: RecoveryDataStore

    def validate(self, code: str, expected_step: RecoveryStep) -> RecoveryRecord:
        """
        Load the record bound to the code and check its step.

        A step mismatch raises the same error as an unknown code.

        Raises:
            InvalidRecoveryCode: Code unknown, invalidated or at another step
            ExpiredRecoveryCode: Code expired
            NoAccountRecoveryData: Store returned no record
            RecoveryStoreFailure: Any other store failure
        """
        try:
            record = self.store.load(code)
        except InvalidCodeError as e:
            raise InvalidRecoveryCode() from e
        except ExpiredCodeError as e:
            raise ExpiredRecoveryCode() from e
        except RecoveryStoreError as e:
            logger.error("Error loading recovery data: %s", e)
            raise RecoveryStoreFailure(str(e), code=qualify_error_code(e.code)) from e

        if record is None:
            raise NoAccountRecoveryData()
        if record.step != expected_step:
            logger.debug(
                "Recovery step mismatch: expected %s, stored %s",
                expected_step.value,
                record.step.value,
            )
            raise InvalidRecoveryCode()
        return record


@dataclass
class AccountRecoveryService:
    """
    Domain service for notification-based account recovery.

    Orchestrates the recovery flow: claim resolution, account status
    check, channel selection, code issuance and display masking.
    """

    claim_resolver: ClaimResolver
    status_guard: AccountStatusGuard
    channel_selector: ChannelSelector
    issuer: RecoveryCodeIssuer
    validator: RecoveryCodeValidator
    masker: ChannelMasker = field(default_factory=ChannelMasker)
    notifications_internally_managed: bool = True

    def resolve_recovery(
        self,
        claims: Mapping[str, str] | None,
        tenant_domain: str,
        scenario: RecoveryScenario,
        properties: Mapping[str, str] | None = None,
    ) -> RecoveryChannelInfo:
        """
        Initiate recovery for the user matching the claims.

        Args:
            claims: Identifying claims (claim URI -> value)
            tenant_domain: Tenant of the user
            scenario: Reason for recovery
            properties: Request meta properties (may override notification management)

        Returns:
            Username, recovery code and masked channels

        Raises:
            RecoveryClientError: Caller-fixable failure (see exceptions)
            RecoveryServerError: Collaborator failure
        """
        username = self.claim_resolver.resolve_username(claims, tenant_domain)
        self.status_guard.check(build_account(username, tenant_domain))

        internally_managed = is_notifications_internally_managed(
            properties, self.notifications_internally_managed
        )
        channels = self.channel_selector.select(username, tenant_domain, internally_managed)
        record = self.issuer.issue(username, tenant_domain, channels, scenario)

        return RecoveryChannelInfo(
            username=username,
            recovery_code=record.code,
            channels=build_channel_info(channels, self.masker),
        )

    def validate_recovery_code(self, code: str, expected_step: RecoveryStep) -> RecoveryRecord:
        return self.validator.validate(code, expected_step)
