"""
Progress ledger: the durable record that makes batch runs resumable.
"""

import hashlib
import json
import logging
import os
from typing import List, Optional, Set

from .models import (
    IdempotencyKey,
    ProgressEntry,
    ProgressFile,
    ProgressStatus,
    utc_now,
)

logger = logging.getLogger(__name__)


LEDGER_VERSION = 1


def sha256(value: str) -> str:
    """Hex SHA-256 of a UTF-8 string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


class ProgressLedger:
    """
    Ordered list of progress entries, keyed by idempotency key.

    A success entry is never removed or duplicated. Failed entries for a key
    are replaced on every new failure. Only one runner may own a ledger file.
    """

    def __init__(self, entries: Optional[List[ProgressEntry]] = None):
        self.version = LEDGER_VERSION
        self.entries: List[ProgressEntry] = list(entries or [])
        self._success: Set[IdempotencyKey] = {
            e.idempotency_key for e in self.entries
            if e.status == ProgressStatus.SUCCESS
        }

    @classmethod
    def load(cls, path: str) -> "ProgressLedger":
        """Load a ledger file, or start empty if it does not exist."""
        if not os.path.exists(path):
            return cls()

        with open(path, "r", encoding="utf-8") as fh:
            progress = ProgressFile.model_validate(json.load(fh))

        if progress.version != LEDGER_VERSION:
            raise ValueError(
                f"Unsupported ledger version {progress.version} in {path}"
            )
        return cls(progress.entries)

    def save(self, path: str) -> None:
        """Rewrite the whole ledger file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        progress = ProgressFile(version=self.version, entries=self.entries)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(
                progress.model_dump(mode="json", by_alias=True, exclude_none=True),
                fh,
                indent=2,
                ensure_ascii=False,
            )

    @property
    def success_keys(self) -> Set[IdempotencyKey]:
        return set(self._success)

    def is_done(self, key: IdempotencyKey) -> bool:
        return key in self._success

    def record_success(self, key: IdempotencyKey) -> bool:
        """
        Append a success entry unless one already exists for the key.

        Returns:
            True if an entry was appended
        """
        if key in self._success:
            return False
        self.entries.append(self._entry(key, ProgressStatus.SUCCESS))
        self._success.add(key)
        return True

    def record_failure(self, key: IdempotencyKey, error: str) -> None:
        """Replace any failed entries for the key with a fresh one."""
        self.entries = [
            e for e in self.entries
            if not (e.status == ProgressStatus.FAILED and e.idempotency_key == key)
        ]
        self.entries.append(
            self._entry(key, ProgressStatus.FAILED, error=error or "Unknown error")
        )

    def resource_ids(self, status: Optional[ProgressStatus] = None) -> Set[str]:
        """Distinct resource ids, optionally limited to one status."""
        return {
            e.resource_id for e in self.entries
            if status is None or e.status == status
        }

    def count(self, status: ProgressStatus) -> int:
        return sum(1 for e in self.entries if e.status == status)

    @staticmethod
    def _entry(
        key: IdempotencyKey, status: ProgressStatus, error: Optional[str] = None
    ) -> ProgressEntry:
        return ProgressEntry(
            resource_id=key.resource_id,
            locale=key.locale,
            key=key.key,
            digest=key.digest,
            value_hash=key.value_hash,
            timestamp=utc_now(),
            status=status,
            error=error,
        )
