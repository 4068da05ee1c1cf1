"""
Pydantic models for batch runs and the progress ledger.
Ledger field aliases match the JSON written by earlier runs.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProgressStatus(str, Enum):
    """Outcome recorded for one (resource, field) pair."""
    SUCCESS = "success"
    FAILED = "failed"


class IdempotencyKey(NamedTuple):
    """Identity of one submitted value; at most one success per key."""
    resource_id: str
    locale: str
    key: str
    digest: str
    value_hash: str


class ProgressEntry(BaseModel):
    """One durable record of an attempted field update."""
    model_config = ConfigDict(populate_by_name=True)

    resource_id: str = Field(alias="resourceId")
    locale: str
    key: str
    digest: str
    value_hash: str = Field(alias="valueHash")
    timestamp: datetime = Field(default_factory=utc_now, alias="translatedAt")
    status: ProgressStatus
    error: Optional[str] = None

    @property
    def idempotency_key(self) -> IdempotencyKey:
        return IdempotencyKey(
            self.resource_id, self.locale, self.key, self.digest, self.value_hash
        )


class ProgressFile(BaseModel):
    """On-disk ledger shape."""
    version: int = 1
    entries: List[ProgressEntry] = Field(default_factory=list)


class TranslatableContent(BaseModel):
    """One field of a resource with the digest of its current content."""
    key: str
    locale: str = ""
    digest: Optional[str] = None
    value: Optional[str] = None


class TranslatableResource(BaseModel):
    """Lookup record: a remote resource and its fingerprinted fields."""
    model_config = ConfigDict(populate_by_name=True)

    resource_id: str = Field(alias="resourceId")
    translatable_content: List[TranslatableContent] = Field(
        default_factory=list, alias="translatableContent"
    )

    def find_digest(self, key: str, preferred_locale: str = "en") -> Optional[str]:
        """
        Digest of a field, preferring the reference locale when several exist.

        Returns:
            The digest, or None if the field is absent or has no digest
        """
        matches = [c for c in self.translatable_content if c.key == key]
        if not matches:
            return None
        preferred = next((c for c in matches if c.locale == preferred_locale), None)
        best = preferred or matches[0]
        return best.digest or None


class PayloadField(BaseModel):
    """A value to submit, with the digest and hash that identify it."""
    key: str
    value: str
    digest: str
    value_hash: str


class WorkItem(BaseModel):
    """All pending fields of one resource for one run."""
    model_config = ConfigDict(frozen=True)

    resource_id: str
    locale: str
    fields: Tuple[PayloadField, ...]
    row_number: int = 0

    @property
    def field_keys(self) -> List[str]:
        return [f.key for f in self.fields]


class ColumnMapping(BaseModel):
    """Maps an input column to a remote field key."""
    column: str
    field_key: str


class RunnerConfig(BaseModel):
    """Per-invocation settings for a batch run."""
    label: str = "Batch"
    locale: str = ""
    column_map: List[ColumnMapping]
    key_column: str = "GID"
    key_map: Optional[Dict[str, str]] = None
    reference_locale: str = "en"
    dry_run: bool = False
    delay_seconds: float = 0.2
    max_retries: int = Field(default=6, ge=0)
    concurrency: int = Field(default=1, ge=1)
    throttle_cooldown: float = 2.0
    adaptive_cooldown: bool = False


class RunSummary(BaseModel):
    """Counts reported at the end of a run."""
    total_rows: int = 0
    succeeded: int = 0
    skipped_done: int = 0
    skipped_missing: int = 0
    failed: int = 0
    would_send: int = 0
