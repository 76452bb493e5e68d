"""
Pass-through parsers for text-like content
"""
from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions


class TextParser(BaseParser):
    """Direct UTF-8 decode"""

    kind = ContentKind.TEXT

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        return self._decode(file_content)


class CSVParser(TextParser):
    """CSV rows are indexed verbatim"""

    kind = ContentKind.CSV


class RTFParser(TextParser):
    """RTF is indexed as its raw markup until a real RTF extractor is wired in"""

    kind = ContentKind.RTF
