"""
DOCX parser using MarkItDown
"""
import os
import tempfile

from markitdown import MarkItDown

from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions


class DOCXParser(BaseParser):
    """Parser for Word documents using MarkItDown"""

    kind = ContentKind.WORD

    def __init__(self):
        super().__init__()
        self.markitdown = MarkItDown()

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        """
        Convert a Word document to text

        Args:
            file_content: DOCX file bytes
            options: Unused

        Returns:
            str: Document text
        """
        temp_path = None
        try:
            # MarkItDown picks its converter from the file extension
            with tempfile.NamedTemporaryFile(
                mode='wb',
                suffix='.docx',
                delete=False
            ) as temp_file:
                temp_file.write(file_content)
                temp_path = temp_file.name

            result = self.markitdown.convert(temp_path)
            content = result.text_content or ""

            self.logger.info(f"Extracted DOCX text ({len(content)} chars)")
            return content.strip()

        finally:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as e:
                    self.logger.warning(f"Failed to remove temp file: {e}")
