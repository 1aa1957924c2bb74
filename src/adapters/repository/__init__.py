"""Repository adapters - Database implementations."""

from .postgres import PostgresRecoveryDataStore, run_migrations

__all__ = ["PostgresRecoveryDataStore", "run_migrations"]
