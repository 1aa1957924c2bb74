"""
In-memory recovery store adapter - Implements RecoveryDataStore protocol.

Mirrors the PostgreSQL adapter's semantics: unknown or invalidated codes
raise InvalidCodeError, codes older than the TTL are purged and raise
ExpiredCodeError, and at most one record exists per (account, scenario).
"""

import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from src.domain.exceptions import ExpiredCodeError, InvalidCodeError
from src.domain.models import Account, RecoveryRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecoveryDataStore:
    """
    Implements RecoveryDataStore protocol with a lock-guarded dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, ttl_seconds: int = 900, clock: Callable[[], datetime] = _utcnow) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._records: dict[str, RecoveryRecord] = {}
        self._lock = threading.Lock()

    def load(self, code: str) -> RecoveryRecord | None:
        with self._lock:
            record = self._records.get(code)
            if record is None:
                raise InvalidCodeError("Invalid recovery code")
            if record.created_at is not None and self._clock() - record.created_at > self._ttl:
                del self._records[code]
                raise ExpiredCodeError("Expired recovery code")
            return record

    def store(self, record: RecoveryRecord) -> None:
        with self._lock:
            # Replace rather than add: one record per (account, scenario).
            for code, existing in list(self._records.items()):
                if existing.account == record.account and existing.scenario == record.scenario:
                    del self._records[code]
            self._records[record.code] = replace(record, created_at=self._clock())

    def invalidate(self, account: Account) -> None:
        with self._lock:
            for code, existing in list(self._records.items()):
                if existing.account == account:
                    del self._records[code]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
