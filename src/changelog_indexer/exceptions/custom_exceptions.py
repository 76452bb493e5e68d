"""
Custom exception classes for the changelog indexer

Every exception carries a FailureKind so callers can branch on the
stage that failed instead of matching on messages.
"""
from enum import Enum


class FailureKind(str, Enum):
    """Stage at which a failure happened"""
    CLASSIFICATION = "classification"
    EXTRACTION = "extraction"
    CHUNKING = "chunking"
    QUERY = "query"
    WRITE = "write"
    CHECKPOINT = "checkpoint"
    STORAGE = "storage"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class SyncException(Exception):
    """Base exception for the changelog indexer"""
    kind = FailureKind.UNEXPECTED

    def __init__(self, message: str, original_error: Exception = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self):
        if self.original_error is not None:
            return f"{self.message}: {self.original_error}"
        return self.message


class ClassificationException(SyncException):
    """Exception raised while sniffing content types"""
    kind = FailureKind.CLASSIFICATION


class ParserException(SyncException):
    """Exception raised during text extraction"""
    kind = FailureKind.EXTRACTION


class ChunkingException(SyncException):
    """Exception raised during text chunking"""
    kind = FailureKind.CHUNKING


class ChangelogQueryException(SyncException):
    """Exception raised while reading a changelog table"""
    kind = FailureKind.QUERY


class SearchIndexException(SyncException):
    """Exception raised while writing documents to the search index"""
    kind = FailureKind.WRITE


class CheckpointException(SyncException):
    """Exception raised while reading or advancing a source checkpoint"""
    kind = FailureKind.CHECKPOINT


class S3Exception(SyncException):
    """Exception raised during S3 operations"""
    kind = FailureKind.STORAGE


class ConfigurationException(SyncException):
    """Exception raised for invalid settings or source configurations"""
    kind = FailureKind.CONFIGURATION
