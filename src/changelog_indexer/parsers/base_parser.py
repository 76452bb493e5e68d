"""
Abstract base parser for text extraction
"""
from abc import ABC, abstractmethod
import logging

from ..models.schemas import ContentKind, ExtractionOptions
from ..exceptions import ParserException


logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Abstract base class for extraction strategies"""

    kind: ContentKind = ContentKind.UNSUPPORTED

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        """
        Extract searchable text

        Args:
            file_content: Raw bytes
            options: Per-source extraction options

        Returns:
            str: Extracted text, possibly empty

        Raises:
            ParserException: If the content is malformed
        """
        pass

    def extract(self, file_content: bytes, options: ExtractionOptions) -> str:
        """Run ``parse`` and wrap any library error in a ParserException"""
        try:
            return self.parse(file_content, options) or ""
        except ParserException:
            raise
        except Exception as e:
            raise ParserException(
                f"Unexpected error extracting {self.kind.value} content",
                original_error=e
            )

    @staticmethod
    def _decode(file_content: bytes) -> str:
        """Best-effort UTF-8 decode"""
        return file_content.decode('utf-8', errors='replace')
