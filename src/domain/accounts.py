"""
Account helpers - Account construction and status guard.

Raw usernames returned by the directory may carry a user-store domain
prefix (``SECONDARY/alice``). ``build_account`` splits that prefix off;
accounts without one live in the primary user store.
"""

import logging
from dataclasses import dataclass

from .exceptions import (
    AccountDisabled,
    AccountLocked,
    AccountStatusCheckError,
    AccountStatusError,
)
from .models import Account
from .ports import AccountStatusProvider

logger = logging.getLogger(__name__)

DOMAIN_SEPARATOR = "/"
PRIMARY_USER_STORE_DOMAIN = "PRIMARY"


def extract_domain(name: str) -> str:
    """Return the upper-cased user-store domain of a name, or PRIMARY."""
    domain, separator, _ = name.partition(DOMAIN_SEPARATOR)
    if not separator or not domain:
        return PRIMARY_USER_STORE_DOMAIN
    return domain.upper()


def remove_domain(name: str) -> str:
    """Strip a leading ``DOMAIN/`` prefix from a name."""
    domain, separator, rest = name.partition(DOMAIN_SEPARATOR)
    if not separator or not domain:
        return name
    return rest


def build_account(username: str, tenant_domain: str) -> Account:
    return Account(
        username=remove_domain(username),
        tenant_domain=tenant_domain,
        user_store_domain=extract_domain(username),
    )


@dataclass(frozen=True)
class AccountStatusGuard:
    """Rejects recovery for disabled or locked accounts."""

    status_provider: AccountStatusProvider

    def check(self, account: Account) -> None:
        """
        Raise if the account may not recover.

        Disabled is checked before locked.

        Raises:
            AccountDisabled: Account is disabled
            AccountLocked: Account is locked
            AccountStatusCheckError: Status provider failed
        """
        try:
            disabled = self.status_provider.is_disabled(account)
            locked = not disabled and self.status_provider.is_locked(account)
        except AccountStatusError as e:
            logger.debug("Status check failed for user in %s", account.tenant_domain)
            raise AccountStatusCheckError(account.username) from e

        if disabled:
            raise AccountDisabled(account.username)
        if locked:
            raise AccountLocked(account.username)
