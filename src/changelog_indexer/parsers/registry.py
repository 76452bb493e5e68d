"""
Extractor registry mapping declared field types and sniffed MIME types
to extraction strategies
"""
import logging
from typing import Dict, Optional, Union

from .base_parser import BaseParser
from .docx_parser import DOCXParser
from .excel_parser import ExcelParser
from .html_parser import HTMLParser
from .json_parser import JSONParser
from .pdf_parser import PDFParser
from .pptx_parser import PPTXParser
from .text_parser import CSVParser, RTFParser, TextParser
from .xml_parser import XMLParser
from ..models.schemas import ContentKind, ExtractionOptions, ExtractionResult, FieldType


logger = logging.getLogger(__name__)

FIELD_TYPE_KINDS: Dict[FieldType, ContentKind] = {
    FieldType.TXT: ContentKind.TEXT,
    FieldType.JSON: ContentKind.JSON,
    FieldType.XML: ContentKind.XML,
    FieldType.HTML: ContentKind.HTML,
    FieldType.XLSX: ContentKind.SPREADSHEET,
    FieldType.PDF: ContentKind.PDF,
    FieldType.DOC: ContentKind.WORD,
    FieldType.DOCX: ContentKind.WORD,
    FieldType.CSV: ContentKind.CSV,
}

MIME_TYPE_KINDS: Dict[str, ContentKind] = {
    "application/pdf": ContentKind.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ContentKind.WORD,
    "application/msword": ContentKind.WORD,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ContentKind.SPREADSHEET,
    "application/vnd.ms-excel": ContentKind.SPREADSHEET,
    "application/x-cfb": ContentKind.SPREADSHEET,
    "application/vnd.ms-powerpoint": ContentKind.PRESENTATION,
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": ContentKind.PRESENTATION,
    "text/csv": ContentKind.CSV,
    "application/xml": ContentKind.XML,
    "text/xml": ContentKind.XML,
    "application/rtf": ContentKind.RTF,
    "text/plain": ContentKind.TEXT,
    "application/json": ContentKind.JSON,
    "text/html": ContentKind.HTML,
}

# Sniffed JSON is pretty-printed
SNIFFED_JSON_INDENT = 2


def default_parsers() -> Dict[ContentKind, BaseParser]:
    parsers = [
        PDFParser(),
        DOCXParser(),
        ExcelParser(),
        PPTXParser(),
        CSVParser(),
        XMLParser(),
        RTFParser(),
        JSONParser(),
        HTMLParser(),
        TextParser(),
    ]
    return {parser.kind: parser for parser in parsers}


class ExtractorRegistry:
    """Routes content to the extraction strategy registered for its kind"""

    def __init__(self, parsers: Optional[Dict[ContentKind, BaseParser]] = None):
        """
        Initialize the registry

        Args:
            parsers: Strategy per content kind, defaults to the built-in parsers

        Raises:
            ValueError: If a supported content kind has no strategy
        """
        self.parsers = parsers if parsers is not None else default_parsers()

        missing = [
            kind.value for kind in ContentKind
            if kind != ContentKind.UNSUPPORTED and kind not in self.parsers
        ]
        if missing:
            raise ValueError(f"No extraction strategy registered for: {', '.join(missing)}")

        logger.info(f"ExtractorRegistry initialized with {len(self.parsers)} strategies")

    @staticmethod
    def kind_for_field_type(field_type: FieldType) -> ContentKind:
        return FIELD_TYPE_KINDS.get(FieldType.parse(field_type), ContentKind.UNSUPPORTED)

    @staticmethod
    def kind_for_content_type(content_type: str) -> ContentKind:
        normalized = (content_type or "").split(';')[0].strip().lower()
        return MIME_TYPE_KINDS.get(normalized, ContentKind.UNSUPPORTED)

    def extract(
        self,
        type_label: Union[FieldType, str],
        content: bytes,
        options: Optional[ExtractionOptions] = None
    ) -> ExtractionResult:
        """
        Extract text from content

        Args:
            type_label: A declared FieldType, or a MIME type returned by the classifier
            content: Raw bytes
            options: Per-source extraction options

        Returns:
            ExtractionResult: Text, or an unsupported result with empty text

        Raises:
            ParserException: If the strategy fails on malformed content
        """
        if isinstance(type_label, FieldType):
            return self.extract_declared(type_label, content, options)
        return self.extract_sniffed(type_label, content, options)

    def extract_declared(
        self,
        field_type: FieldType,
        content: bytes,
        options: Optional[ExtractionOptions] = None
    ) -> ExtractionResult:
        kind = self.kind_for_field_type(field_type)
        if kind == ContentKind.UNSUPPORTED:
            logger.info(f"Unsupported field type: {field_type}")
            return ExtractionResult(kind=kind, supported=False)
        return self._run(kind, None, content, options or ExtractionOptions())

    def extract_sniffed(
        self,
        content_type: str,
        content: bytes,
        options: Optional[ExtractionOptions] = None
    ) -> ExtractionResult:
        kind = self.kind_for_content_type(content_type)
        if kind == ContentKind.UNSUPPORTED:
            logger.info(f"Unsupported BLOB type {content_type}, skipping extraction")
            return ExtractionResult(kind=kind, content_type=content_type, supported=False)

        options = (options or ExtractionOptions()).model_copy(
            update={'json_indent': SNIFFED_JSON_INDENT}
        )
        return self._run(kind, content_type, content, options)

    def _run(
        self,
        kind: ContentKind,
        content_type: Optional[str],
        content: bytes,
        options: ExtractionOptions
    ) -> ExtractionResult:
        text = self.parsers[kind].extract(content, options)
        return ExtractionResult(kind=kind, content_type=content_type, text=text)
