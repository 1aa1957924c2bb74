"""
Claim resolver - Finds the single account matching a set of claims.

Each usable claim is looked up in the directory on its own and the
results are intersected. Resolution never guesses: zero candidates is
NoUserFound, more than one is MultipleUsersMatched.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .accounts import DOMAIN_SEPARATOR, extract_domain
from .exceptions import (
    DirectoryError,
    MultipleUsersMatched,
    NoClaimsProvided,
    NoUserFound,
    UserClaimRetrievalError,
)
from .ports import TenantResolver, UserDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimResolver:
    """Resolves exactly one username from identifying claims."""

    directory: UserDirectory
    tenant_resolver: TenantResolver

    def resolve_username(self, claims: Mapping[str, str] | None, tenant_domain: str) -> str:
        """
        Resolve the username matching every supplied claim.

        Claims with an empty key or value are ignored. Lookup stops at the
        first claim that matches nobody or empties the candidate set.

        Args:
            claims: Claim URI -> value
            tenant_domain: Tenant to search in

        Returns:
            Raw username of the only matching user

        Raises:
            NoClaimsProvided: claims is empty
            NoUserFound: No user matches all claims
            MultipleUsersMatched: More than one user matches all claims
            UserClaimRetrievalError: Directory lookup failed
        """
        if not claims:
            raise NoClaimsProvided()

        tenant_id = self.tenant_resolver.get_tenant_id(tenant_domain)
        candidates: set[str] | None = None

        for key, value in claims.items():
            if not key or not value:
                continue

            logger.debug("Searching users by claim: %s", key)
            matched = self._find_users(tenant_id, key, value)
            if not matched:
                logger.debug("No users matched for claim: %s", key)
                raise NoUserFound()

            if candidates is None:
                candidates = matched
            else:
                candidates &= matched
                if not candidates:
                    logger.debug(
                        "No common users for claim: %s with the previously filtered users", key
                    )
                    raise NoUserFound()
            logger.debug("%d candidate(s) remaining after claim: %s", len(candidates), key)

        if not candidates:
            raise NoUserFound()
        if len(candidates) > 1:
            logger.debug("Multiple users matched for the given claims: %d", len(candidates))
            raise MultipleUsersMatched()
        return next(iter(candidates))

    def _find_users(self, tenant_id: int, key: str, value: str) -> set[str]:
        try:
            # Values such as birth dates may contain the domain separator. Unless the
            # leading segment names a real secondary store, force a primary lookup.
            if DOMAIN_SEPARATOR in value:
                domain = extract_domain(value)
                if not self.directory.secondary_store_exists(tenant_id, domain):
                    value = DOMAIN_SEPARATOR + value
            return set(self.directory.find_users_by_claim(tenant_id, key, value))
        except DirectoryError as e:
            logger.debug("Unable to retrieve the claim: %s for tenant: %s", key, tenant_id)
            raise UserClaimRetrievalError(key) from e
