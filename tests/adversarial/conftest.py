"""
Shared fixtures for adversarial tests.

Provides a recovery service wired to in-memory adapters, and an API client
serving it, for race condition and code guessing tests.
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.memory import (
    InMemoryAccountStatusProvider,
    InMemoryRecoveryDataStore,
    InMemoryUserDirectory,
    StaticTenantResolver,
)
from src.api.dependencies import get_recovery_service
from src.api.v1.routes import router
from src.domain.accounts import AccountStatusGuard
from src.domain.channels import ChannelSelector
from src.domain.claims import ClaimResolver
from src.domain.recovery import AccountRecoveryService, RecoveryCodeIssuer, RecoveryCodeValidator
from tests.conftest import TENANT_DOMAIN, TENANT_ID, channel_claims

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial

VICTIM_EMAIL = "victim@example.com"


@pytest.fixture
def store() -> InMemoryRecoveryDataStore:
    """Recovery store shared by the service under attack."""
    return InMemoryRecoveryDataStore()


@pytest.fixture
def service(store: InMemoryRecoveryDataStore) -> AccountRecoveryService:
    """Recovery service for a tenant with a single recoverable user."""
    directory = InMemoryUserDirectory(
        {TENANT_ID: {"victim": channel_claims(email=VICTIM_EMAIL, mobile="+15550199")}}
    )
    tenant_resolver = StaticTenantResolver({TENANT_DOMAIN: TENANT_ID})
    return AccountRecoveryService(
        claim_resolver=ClaimResolver(directory=directory, tenant_resolver=tenant_resolver),
        status_guard=AccountStatusGuard(status_provider=InMemoryAccountStatusProvider()),
        channel_selector=ChannelSelector(directory=directory, tenant_resolver=tenant_resolver),
        issuer=RecoveryCodeIssuer(store=store),
        validator=RecoveryCodeValidator(store=store),
    )


@pytest.fixture
def client(service: AccountRecoveryService) -> Generator[TestClient, None, None]:
    """API client whose routes use the in-memory service."""
    app = FastAPI()
    app.include_router(router, prefix="/v1")
    app.dependency_overrides[get_recovery_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
