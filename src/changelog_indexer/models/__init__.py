"""Pydantic models for the changelog indexer"""

from .schemas import (
    FieldType,
    ContentKind,
    SearchAction,
    SourceStatus,
    SourceConfig,
    ChangeRow,
    ChangeBatch,
    ClassifiedContent,
    ExtractionOptions,
    ExtractionResult,
    IndexDocument,
    RowBatchResult,
    SourceResult,
    SyncRunResult
)

__all__ = [
    "FieldType",
    "ContentKind",
    "SearchAction",
    "SourceStatus",
    "SourceConfig",
    "ChangeRow",
    "ChangeBatch",
    "ClassifiedContent",
    "ExtractionOptions",
    "ExtractionResult",
    "IndexDocument",
    "RowBatchResult",
    "SourceResult",
    "SyncRunResult"
]
