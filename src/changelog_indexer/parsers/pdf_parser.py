"""
PDF parser using PyMuPDF text extraction
"""
import fitz  # PyMuPDF

from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions
from ..exceptions import ParserException


class PDFParser(BaseParser):
    """Parser for PDF documents using PyMuPDF"""

    kind = ContentKind.PDF

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        """
        Extract the text layer of every page

        Args:
            file_content: PDF file bytes
            options: Unused

        Returns:
            str: Page texts in page order

        Raises:
            ParserException: If the PDF cannot be opened
        """
        try:
            pdf_doc = fitz.open(stream=file_content, filetype="pdf")
        except Exception as e:
            raise ParserException("Failed to open PDF", original_error=e)

        try:
            page_count = len(pdf_doc)
            pages = [pdf_doc[page_index].get_text() for page_index in range(page_count)]
        finally:
            pdf_doc.close()

        content = "".join(pages).strip()
        self.logger.info(f"Extracted PDF text ({page_count} pages, {len(content)} chars)")
        return content
