"""
PostgreSQL recovery store adapter - Implements RecoveryDataStore protocol.

This module provides the PostgreSQL implementation of the domain's
recovery store port using psycopg3 with raw SQL.

Concurrency Design - At Most One Active Record:
----------------------------------------------
The domain invalidates an account's records and then stores the new one,
in two calls. Two concurrent issuances for the same account could
interleave those calls. The store closes that gap itself:

1. **UNIQUE (tenant_domain, user_store_domain, username, scenario)**: the
   table cannot hold two records for the same account and scenario.

2. **INSERT ... ON CONFLICT DO UPDATE**: store() is an atomic upsert, so
   the later of two racing issuances replaces the earlier record instead
   of failing or adding a second row.

3. **Database time**: created_at and the TTL check both use NOW(), so
   expiry does not depend on application server clocks.
"""

import logging
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import ExpiredCodeError, InvalidCodeError, RecoveryStoreError
from src.domain.models import Account, RecoveryRecord
from src.domain.ports import RecoveryScenario, RecoveryStep

logger = logging.getLogger(__name__)


class PostgresRecoveryDataStore:
    """
    Implements RecoveryDataStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool, ttl_seconds: int = 900) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            ttl_seconds: Validity window of a recovery code
        """
        self._pool = pool
        self._ttl_seconds = ttl_seconds

    def load(self, code: str) -> RecoveryRecord | None:
        """
        Load the record bound to a recovery code.

        Expired records are deleted on read (lazy expiry).

        Raises:
            InvalidCodeError: No record for the code
            ExpiredCodeError: Record older than the TTL
            RecoveryStoreError: Database failure
        """
        select_sql = """
            SELECT username, tenant_domain, user_store_domain, scenario, step,
                   remaining_set_ids, created_at,
                   created_at > NOW() - (%s * INTERVAL '1 second') AS fresh
            FROM recovery_data
            WHERE code = %s
        """

        delete_sql = "DELETE FROM recovery_data WHERE code = %s"

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(select_sql, (self._ttl_seconds, code))
                row = cursor.fetchone()

                if row is None:
                    conn.commit()
                    raise InvalidCodeError("Invalid recovery code")

                if not row[7]:
                    cursor.execute(delete_sql, (code,))
                    conn.commit()
                    raise ExpiredCodeError("Expired recovery code")

                conn.commit()
        except psycopg.Error as e:
            raise RecoveryStoreError(f"Error loading recovery data: {e}") from e

        return RecoveryRecord(
            account=Account(username=row[0], tenant_domain=row[1], user_store_domain=row[2]),
            code=code,
            scenario=RecoveryScenario(row[3]),
            step=RecoveryStep(row[4]),
            remaining_set_ids=row[5],
            created_at=row[6],
        )

    def store(self, record: RecoveryRecord) -> None:
        """
        Store a recovery record, replacing any record for the same account and scenario.

        Raises:
            RecoveryStoreError: Database failure
        """
        sql = """
            INSERT INTO recovery_data
                (code, username, tenant_domain, user_store_domain, scenario, step, remaining_set_ids, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, NOW())
            ON CONFLICT (tenant_domain, user_store_domain, username, scenario) DO UPDATE
            SET code = EXCLUDED.code,
                step = EXCLUDED.step,
                remaining_set_ids = EXCLUDED.remaining_set_ids,
                created_at = NOW()
        """

        account = record.account
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(
                    sql,
                    (
                        record.code,
                        account.username,
                        account.tenant_domain,
                        account.user_store_domain,
                        record.scenario.value,
                        record.step.value,
                        record.remaining_set_ids,
                    ),
                )
                conn.commit()
        except psycopg.Error as e:
            raise RecoveryStoreError(f"Error storing recovery data: {e}") from e

    def invalidate(self, account: Account) -> None:
        """
        Delete every recovery record of the account.

        Raises:
            RecoveryStoreError: Database failure
        """
        sql = """
            DELETE FROM recovery_data
            WHERE username = %s AND tenant_domain = %s AND user_store_domain = %s
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (account.username, account.tenant_domain, account.user_store_domain))
                conn.commit()
        except psycopg.Error as e:
            raise RecoveryStoreError(f"Error invalidating recovery data: {e}") from e


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Find migrations directory relative to this file
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
