"""
Fixed-size text chunking for the search index
"""
import logging
from typing import List

from ..exceptions import ChunkingException


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 30000


def chunk_text(text: str, max_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """
    Split text on fixed character boundaries

    Concatenating the result gives back ``text`` exactly; words may be cut.

    Args:
        text: Text to split
        max_size: Maximum characters per chunk

    Returns:
        list: ceil(len(text) / max_size) chunks, empty for empty text

    Raises:
        ChunkingException: If max_size is not positive
    """
    if max_size <= 0:
        raise ChunkingException(f"Chunk size must be positive, got {max_size}")
    if not text:
        return []
    return [text[i:i + max_size] for i in range(0, len(text), max_size)]


class TextChunker:
    """Processor for chunking extracted text"""

    def __init__(self, max_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize text chunker

        Args:
            max_size: Maximum characters per chunk
        """
        if max_size <= 0:
            raise ChunkingException(f"Chunk size must be positive, got {max_size}")
        self.max_size = max_size
        logger.info(f"TextChunker initialized: size={max_size}")

    def chunk_text(self, text: str) -> List[str]:
        chunks = chunk_text(text, self.max_size)
        logger.debug(f"Created {len(chunks)} chunks from {len(text or '')} chars")
        return chunks
