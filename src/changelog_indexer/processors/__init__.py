"""Processors for content classification, chunking and row handling"""

from .chunker import TextChunker, chunk_text
from .content_classifier import ContentClassifier
from .row_processor import RowProcessor

__all__ = [
    "TextChunker",
    "chunk_text",
    "ContentClassifier",
    "RowProcessor",
]
