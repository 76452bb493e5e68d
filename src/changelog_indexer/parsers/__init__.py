"""Extraction strategies for different content types"""

from .base_parser import BaseParser
from .pdf_parser import PDFParser
from .docx_parser import DOCXParser
from .excel_parser import ExcelParser
from .pptx_parser import PPTXParser
from .html_parser import HTMLParser
from .json_parser import JSONParser
from .xml_parser import XMLParser
from .text_parser import TextParser, CSVParser, RTFParser
from .registry import ExtractorRegistry, default_parsers

__all__ = [
    "BaseParser",
    "PDFParser",
    "DOCXParser",
    "ExcelParser",
    "PPTXParser",
    "HTMLParser",
    "JSONParser",
    "XMLParser",
    "TextParser",
    "CSVParser",
    "RTFParser",
    "ExtractorRegistry",
    "default_parsers"
]
