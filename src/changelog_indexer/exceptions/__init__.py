"""Custom exceptions for the changelog indexer"""

from .custom_exceptions import (
    FailureKind,
    SyncException,
    ClassificationException,
    ParserException,
    ChunkingException,
    ChangelogQueryException,
    SearchIndexException,
    CheckpointException,
    S3Exception,
    ConfigurationException
)

__all__ = [
    "FailureKind",
    "SyncException",
    "ClassificationException",
    "ParserException",
    "ChunkingException",
    "ChangelogQueryException",
    "SearchIndexException",
    "CheckpointException",
    "S3Exception",
    "ConfigurationException"
]
