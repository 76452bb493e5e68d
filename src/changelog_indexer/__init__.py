"""
Changelog Indexer Module

This module mirrors row-level changes from PostgreSQL ``<table>_changelog``
tables into a full-text search index: it polls each configured source since
its checkpoint, extracts and chunks the changed content, writes the chunks
to the tenant's index and then advances the checkpoint.
"""

from .pipeline.sync_pipeline import SyncPipeline
from .config import SyncSettings
from .models.schemas import (
    SourceConfig,
    ChangeRow,
    IndexDocument,
    SourceResult,
    SyncRunResult
)

__all__ = [
    "SyncPipeline",
    "SyncSettings",
    "SourceConfig",
    "ChangeRow",
    "IndexDocument",
    "SourceResult",
    "SyncRunResult"
]
