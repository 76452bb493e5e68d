"""
HTML parser using BeautifulSoup
"""
from bs4 import BeautifulSoup

from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions


class HTMLParser(BaseParser):
    """Text content of the document body, tags stripped"""

    kind = ContentKind.HTML

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        soup = BeautifulSoup(self._decode(file_content), 'html.parser')

        for tag in soup(['script', 'style', 'noscript']):
            tag.decompose()

        # Fragments have no <body>
        body = soup.body or soup
        return body.get_text().strip()
