"""
Processor package for checkpointed batch jobs.
"""

from .jobs import (
    MutationJob,
    collection_override_job,
    customer_delete_job,
    feature_list_job,
    handle_override_job,
    identity_resources,
    media_reorder_job,
    order_delete_job,
    product_video_job,
    seo_update_job,
    tags_add_job,
    translation_job,
)
from .ledger import ProgressLedger, sha256
from .models import (
    ColumnMapping,
    IdempotencyKey,
    ProgressEntry,
    ProgressStatus,
    RunnerConfig,
    RunSummary,
    TranslatableResource,
    WorkItem,
)
from .runner import BatchRunner

__all__ = [
    "MutationJob",
    "collection_override_job",
    "customer_delete_job",
    "feature_list_job",
    "handle_override_job",
    "identity_resources",
    "media_reorder_job",
    "order_delete_job",
    "product_video_job",
    "seo_update_job",
    "tags_add_job",
    "translation_job",
    "ProgressLedger",
    "sha256",
    "ColumnMapping",
    "IdempotencyKey",
    "ProgressEntry",
    "ProgressStatus",
    "RunnerConfig",
    "RunSummary",
    "TranslatableResource",
    "WorkItem",
    "BatchRunner",
]
