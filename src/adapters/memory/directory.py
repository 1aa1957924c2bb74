"""
In-memory directory adapters - Implement UserDirectory, AccountStatusProvider
and TenantResolver protocols.

For demo/development purposes and tests. Users of a secondary user store
are keyed ``DOMAIN/username``, the same shape a real directory returns.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from src.domain.accounts import DOMAIN_SEPARATOR
from src.domain.exceptions import InvalidTenantDomain
from src.domain.models import Account

logger = logging.getLogger(__name__)


class InMemoryUserDirectory:
    """
    Implements UserDirectory protocol over a nested dict.

    Uses structural subtyping - no explicit inheritance from Protocol.

    Layout: ``{tenant_id: {raw_username: {claim_uri: value}}}``.
    """

    def __init__(
        self,
        users: Mapping[int, Mapping[str, Mapping[str, str]]],
        secondary_domains: Mapping[int, Iterable[str]] | None = None,
    ) -> None:
        self._users = {
            tenant_id: {username: dict(claims) for username, claims in tenant_users.items()}
            for tenant_id, tenant_users in users.items()
        }
        self._secondary_domains = {
            tenant_id: frozenset(domain.upper() for domain in domains)
            for tenant_id, domains in (secondary_domains or {}).items()
        }

    @classmethod
    def from_seed_file(cls, path: str | Path) -> "InMemoryUserDirectory":
        """
        Load a directory from a JSON seed file.

        Format::

            {"-1234": {"users": {"alice": {"claim": "value"}},
                       "secondary_domains": ["PARTNERS"]}}
        """
        seed = json.loads(Path(path).read_text())
        users = {int(tenant_id): tenant.get("users", {}) for tenant_id, tenant in seed.items()}
        domains = {
            int(tenant_id): tenant.get("secondary_domains", []) for tenant_id, tenant in seed.items()
        }
        logger.info(f"Loaded in-memory directory with {len(users)} tenant(s) from {path}")
        return cls(users, domains)

    def find_users_by_claim(self, tenant_id: int, claim_key: str, claim_value: str) -> list[str]:
        candidates = self._users.get(tenant_id, {})
        domain, separator, rest = claim_value.partition(DOMAIN_SEPARATOR)
        if separator and not domain:
            # Leading separator: primary store, literal value.
            candidates = {u: c for u, c in candidates.items() if DOMAIN_SEPARATOR not in u}
            claim_value = rest
        elif separator and self.secondary_store_exists(tenant_id, domain):
            prefix = domain.upper() + DOMAIN_SEPARATOR
            candidates = {u: c for u, c in candidates.items() if u.upper().startswith(prefix)}
            claim_value = rest

        return [username for username, claims in candidates.items() if claims.get(claim_key) == claim_value]

    def get_claim_values(
        self, tenant_id: int, username: str, claim_keys: list[str]
    ) -> dict[str, str]:
        claims = self._users.get(tenant_id, {}).get(username, {})
        return {key: claims[key] for key in claim_keys if key in claims}

    def secondary_store_exists(self, tenant_id: int, domain: str) -> bool:
        return domain.upper() in self._secondary_domains.get(tenant_id, frozenset())


class InMemoryAccountStatusProvider:
    """Implements AccountStatusProvider protocol with fixed sets of accounts."""

    def __init__(
        self,
        disabled: Iterable[Account] = (),
        locked: Iterable[Account] = (),
    ) -> None:
        self._disabled = frozenset(disabled)
        self._locked = frozenset(locked)

    def is_disabled(self, account: Account) -> bool:
        return account in self._disabled

    def is_locked(self, account: Account) -> bool:
        return account in self._locked


class StaticTenantResolver:
    """Implements TenantResolver protocol from a fixed domain -> id mapping."""

    def __init__(self, tenant_ids: Mapping[str, int]) -> None:
        self._tenant_ids = dict(tenant_ids)

    def get_tenant_id(self, tenant_domain: str) -> int:
        try:
            return self._tenant_ids[tenant_domain]
        except KeyError:
            raise InvalidTenantDomain(tenant_domain) from None
