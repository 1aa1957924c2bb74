"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.memory.directory import (
    InMemoryAccountStatusProvider,
    InMemoryUserDirectory,
    StaticTenantResolver,
)
from src.adapters.repository.postgres import PostgresRecoveryDataStore
from src.config.settings import Settings, get_settings
from src.domain.accounts import AccountStatusGuard
from src.domain.channels import ChannelDefinition, ChannelSelector
from src.domain.claims import ClaimResolver
from src.domain.masking import ChannelMasker
from src.domain.ports import ChannelType
from src.domain.recovery import AccountRecoveryService, RecoveryCodeIssuer, RecoveryCodeValidator


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_recovery_store(request: Request) -> PostgresRecoveryDataStore:
    """Create recovery store with connection pool from app state."""
    pool = get_pool(request)
    return PostgresRecoveryDataStore(pool, ttl_seconds=get_settings().recovery_code_ttl_seconds)


@lru_cache
def get_directory() -> InMemoryUserDirectory:
    """Get the demo directory (singleton), seeded from settings if configured."""
    settings = get_settings()
    if settings.directory_seed_file:
        return InMemoryUserDirectory.from_seed_file(settings.directory_seed_file)
    return InMemoryUserDirectory({})


@lru_cache
def get_status_provider() -> InMemoryAccountStatusProvider:
    """Get account status provider (singleton)."""
    return InMemoryAccountStatusProvider()


@lru_cache
def get_tenant_resolver() -> StaticTenantResolver:
    """Get tenant resolver (singleton) from configured tenant ids."""
    return StaticTenantResolver(get_settings().tenant_ids)


def build_channel_selector(
    settings: Settings, directory: InMemoryUserDirectory, tenant_resolver: StaticTenantResolver
) -> ChannelSelector:
    return ChannelSelector(
        directory=directory,
        tenant_resolver=tenant_resolver,
        channels=(
            ChannelDefinition(ChannelType.EMAIL, settings.email_claim, settings.email_verified_claim),
            ChannelDefinition(ChannelType.SMS, settings.mobile_claim, settings.mobile_verified_claim),
        ),
        preferred_channel_claim=settings.preferred_channel_claim,
        roles_claim=settings.roles_claim,
        self_signup_role=settings.self_signup_role,
        role_separator=settings.role_separator,
    )


def get_recovery_service(request: Request) -> AccountRecoveryService:
    """
    Create account recovery service with injected dependencies.

    Wires together the directory, status provider, tenant resolver and
    recovery store for the domain service.
    """
    settings = get_settings()
    store = get_recovery_store(request)
    directory = get_directory()
    tenant_resolver = get_tenant_resolver()

    return AccountRecoveryService(
        claim_resolver=ClaimResolver(directory=directory, tenant_resolver=tenant_resolver),
        status_guard=AccountStatusGuard(status_provider=get_status_provider()),
        channel_selector=build_channel_selector(settings, directory, tenant_resolver),
        issuer=RecoveryCodeIssuer(store=store),
        validator=RecoveryCodeValidator(store=store),
        masker=get_masker(),
        notifications_internally_managed=settings.notifications_internally_managed,
    )


@lru_cache
def get_masker() -> ChannelMasker:
    """Get channel masker (singleton) with configured patterns."""
    settings = get_settings()
    return ChannelMasker(
        email_pattern=settings.email_masking_regex,
        mobile_pattern=settings.mobile_masking_regex,
        masking_character=settings.masking_character,
    )
