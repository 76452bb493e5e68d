"""
Content type classification from raw bytes

Binary signatures are sniffed with libmagic first; the HTML and plain-text
heuristics only decide when the signature sniff is inconclusive.
"""
import io
import logging
import re
import zipfile
from typing import Callable, Optional

from ..exceptions import ClassificationException
from ..models.schemas import ClassifiedContent


logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"

# Labels that say nothing about the format
GENERIC_TYPES = {
    OCTET_STREAM,
    TEXT_PLAIN,
    "inode/x-empty",
    "application/x-empty",
}

MIME_ALIASES = {
    "application/cdfv2": "application/x-cfb",
    "application/cdfv2-corrupt": "application/x-cfb",
    "application/x-ole-storage": "application/x-cfb",
    "text/rtf": "application/rtf",
    "text/x-rtf": "application/rtf",
    "application/x-pdf": "application/pdf",
}

OOXML_TYPES = (
    ("word/", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    ("xl/", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    ("ppt/", "application/vnd.openxmlformats-officedocument.presentationml.presentation"),
)

HTML_PROLOGUE = re.compile(r'^\s*<(?:!DOCTYPE\s+)?html', re.IGNORECASE)
PRINTABLE_ASCII = re.compile(r'^[\x20-\x7E\t\r\n]*$')

# Textual labels that have an extraction strategy of their own
ROUTED_TEXT_TYPES = {"text/csv", "text/xml", "text/html"}
TEXTUAL_PREFIXES = ("text/", "message/")


def libmagic_sniff(content: bytes) -> Optional[str]:
    """Signature sniff through libmagic"""
    import magic
    return magic.from_buffer(content, mime=True)


def _is_unrouted_text(mime_type: str) -> bool:
    return (
        mime_type.startswith(TEXTUAL_PREFIXES)
        and mime_type not in ROUTED_TEXT_TYPES
        and mime_type not in GENERIC_TYPES
    )


def _refine_zip(content: bytes) -> Optional[str]:
    """Tell OOXML containers apart from plain zip archives"""
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            names = archive.namelist()
    except (zipfile.BadZipFile, ValueError):
        return None
    for prefix, mime_type in OOXML_TYPES:
        if any(name.startswith(prefix) for name in names):
            return mime_type
    return None


class ContentClassifier:
    """Classifier returning a normalized MIME type for a byte buffer"""

    def __init__(self, sniffer: Callable[[bytes], Optional[str]] = libmagic_sniff):
        """
        Initialize content classifier

        Args:
            sniffer: Signature sniffing capability, returns a MIME type or None
        """
        self.sniffer = sniffer

    def classify(self, content: bytes) -> str:
        """
        Classify raw bytes; never raises

        Args:
            content: Raw bytes

        Returns:
            str: MIME type, ``application/octet-stream`` when nothing matches
        """
        if not content:
            logger.warning("Empty buffer provided for classification")
            return OCTET_STREAM

        try:
            sniffed = self._sniff(content)
        except ClassificationException as e:
            logger.warning(f"Signature sniffing failed, using text heuristics: {e}")
            sniffed = None

        # libmagic names source code, scripts and mail headers as text subtypes
        inconclusive_text = bool(sniffed) and _is_unrouted_text(sniffed)
        if inconclusive_text:
            logger.debug(f"Treating sniffed {sniffed} as plain text candidate")
            sniffed = None

        if sniffed and sniffed not in GENERIC_TYPES and not sniffed.startswith("text/"):
            return sniffed

        text_content = content.decode('utf-8', errors='replace').strip()

        if HTML_PROLOGUE.match(text_content):
            return TEXT_HTML

        if (not sniffed or sniffed in GENERIC_TYPES) and PRINTABLE_ASCII.match(text_content):
            return TEXT_PLAIN

        if inconclusive_text:
            return TEXT_PLAIN
        return sniffed or OCTET_STREAM

    def classify_content(self, content: bytes) -> ClassifiedContent:
        return ClassifiedContent(content_type=self.classify(content), raw_bytes=content)

    def _sniff(self, content: bytes) -> Optional[str]:
        try:
            result = self.sniffer(content)
        except Exception as e:
            raise ClassificationException("Signature sniffer raised", original_error=e)

        if not result:
            return None

        mime_type = result.split(';')[0].strip().lower()
        mime_type = MIME_ALIASES.get(mime_type, mime_type)
        if mime_type == "application/zip":
            return _refine_zip(content) or mime_type
        return mime_type
