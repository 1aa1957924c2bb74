"""In-memory adapters - Directory, status, tenant and store implementations for development and tests."""

from .directory import InMemoryAccountStatusProvider, InMemoryUserDirectory, StaticTenantResolver
from .store import InMemoryRecoveryDataStore

__all__ = [
    "InMemoryAccountStatusProvider",
    "InMemoryRecoveryDataStore",
    "InMemoryUserDirectory",
    "StaticTenantResolver",
]
