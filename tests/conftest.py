"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Claim URIs and tenant constants
- Mock factories for the domain ports
"""

from unittest.mock import Mock

import pytest

from src.domain.channels import (
    EMAIL_CLAIM,
    EMAIL_VERIFIED_CLAIM,
    MOBILE_CLAIM,
    MOBILE_VERIFIED_CLAIM,
    PREFERRED_CHANNEL_CLAIM,
    ROLES_CLAIM,
)

TENANT_DOMAIN = "carbon.super"
TENANT_ID = -1234


def channel_claims(
    email: str | None = None,
    email_verified: str | None = None,
    mobile: str | None = None,
    mobile_verified: str | None = None,
    preferred: str | None = None,
    roles: str | None = None,
) -> dict[str, str]:
    """Build a claim-values dict, omitting claims given as None."""
    values = {
        EMAIL_CLAIM: email,
        EMAIL_VERIFIED_CLAIM: email_verified,
        MOBILE_CLAIM: mobile,
        MOBILE_VERIFIED_CLAIM: mobile_verified,
        PREFERRED_CHANNEL_CLAIM: preferred,
        ROLES_CLAIM: roles,
    }
    return {key: value for key, value in values.items() if value is not None}


@pytest.fixture
def tenant_resolver() -> Mock:
    """Tenant resolver mock returning the super tenant id."""
    resolver = Mock()
    resolver.get_tenant_id.return_value = TENANT_ID
    return resolver


@pytest.fixture
def directory() -> Mock:
    """Directory mock with no secondary user stores."""
    directory = Mock()
    directory.secondary_store_exists.return_value = False
    return directory
