"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import Account, RecoveryRecord


class ChannelType(str, Enum):
    """Notification channel types available for account recovery."""

    EMAIL = "EMAIL"
    SMS = "SMS"
    EXTERNAL = "EXTERNAL"


class RecoveryScenario(str, Enum):
    """Reason the recovery flow was initiated."""

    USERNAME_RECOVERY = "USERNAME_RECOVERY"
    NOTIFICATION_BASED_PW_RECOVERY = "NOTIFICATION_BASED_PW_RECOVERY"
    QUESTION_BASED_PWD_RECOVERY = "QUESTION_BASED_PWD_RECOVERY"


class RecoveryStep(str, Enum):
    """
    Position in the multi-step recovery protocol a code is valid for.

    Recovery Record Lifecycle:
    - issued (SEND_RECOVERY_INFORMATION) -> consumed (validated at expected step)
    - issued -> invalidated (new issuance for the same account)
    - issued -> expired (store-side TTL exceeded)

    Only the issued transition is owned by the domain. Invalidation and
    expiry are enforced by the recovery data store; consumption belongs to
    the next recovery stage.
    """

    SEND_RECOVERY_INFORMATION = "SEND_RECOVERY_INFORMATION"
    RESEND_CONFIRMATION_CODE = "RESEND_CONFIRMATION_CODE"
    UPDATE_PASSWORD = "UPDATE_PASSWORD"
    VALIDATE_CHALLENGE_QUESTION = "VALIDATE_CHALLENGE_QUESTION"


class UserDirectory(Protocol):
    """Port interface for the user directory (claim-based lookup)."""

    def find_users_by_claim(self, tenant_id: int, claim_key: str, claim_value: str) -> list[str]:
        """
        Find all users in the tenant whose claim matches the value.

        Args:
            tenant_id: Tenant identifier
            claim_key: Claim URI to search
            claim_value: Value to match

        Returns:
            Raw usernames (may carry a user-store domain prefix)

        Raises:
            DirectoryError: If the lookup fails
        """
        ...

    def get_claim_values(
        self, tenant_id: int, username: str, claim_keys: list[str]
    ) -> dict[str, str]:
        """
        Fetch the requested claim values of a user in one call.

        Claims the user does not have are omitted from the result.

        Raises:
            DirectoryError: If the claims cannot be loaded
        """
        ...

    def secondary_store_exists(self, tenant_id: int, domain: str) -> bool:
        """Return True if the tenant has a secondary user store named ``domain``."""
        ...


class AccountStatusProvider(Protocol):
    """Port interface for account lock/disable status."""

    def is_disabled(self, account: "Account") -> bool: ...

    def is_locked(self, account: "Account") -> bool: ...


class RecoveryDataStore(Protocol):
    """Port interface for recovery record persistence."""

    def load(self, code: str) -> "RecoveryRecord | None":
        """
        Load the recovery record bound to a code.

        Raises:
            InvalidCodeError: Code unknown or invalidated
            ExpiredCodeError: Code validity window has passed
            RecoveryStoreError: Any other store failure
        """
        ...

    def store(self, record: "RecoveryRecord") -> None:
        """
        Persist a new recovery record.

        Implementations must keep at most one record per (account, scenario)
        even under concurrent calls.
        """
        ...

    def invalidate(self, account: "Account") -> None:
        """Invalidate every recovery record of the account."""
        ...


class TenantResolver(Protocol):
    """Port interface for tenant domain resolution."""

    def get_tenant_id(self, tenant_domain: str) -> int:
        """
        Resolve a tenant domain to its numeric id.

        Raises:
            InvalidTenantDomain: If the tenant is unknown
        """
        ...
