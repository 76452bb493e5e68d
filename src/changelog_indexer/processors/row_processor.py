"""
Row processor: turns changelog rows into search index documents
"""
import logging
from typing import List, Optional, Tuple, Union

from .chunker import TextChunker
from .content_classifier import ContentClassifier
from ..exceptions import ParserException, SyncException
from ..models.schemas import (
    ChangeRow,
    ExtractionOptions,
    FieldType,
    IndexDocument,
    RowBatchResult,
    SearchAction,
    SourceConfig
)
from ..parsers.registry import ExtractorRegistry
from ..services.s3_service import S3Service
from ..utils.timestamps import to_iso_utc, utc_now


logger = logging.getLogger(__name__)

HEX_MARKER = "\\x"

# Declared types whose values are binary documents
BINARY_FIELD_TYPES = {FieldType.PDF, FieldType.XLSX, FieldType.DOC, FieldType.DOCX}

BYTES_PER_MB = 1024 * 1024


def _decode_hex(value: str) -> bytes:
    try:
        return bytes.fromhex(value.replace(HEX_MARKER, ""))
    except ValueError as e:
        raise ParserException("Malformed hex-escaped field value", original_error=e)


def resolve_blob_bytes(value: Union[bytes, str, None]) -> bytes:
    """
    Resolve a BLOB field value to raw bytes

    Args:
        value: Bytes, ``\\x``-prefixed hex text, or plain text

    Returns:
        bytes: Raw content
    """
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if value.startswith(HEX_MARKER):
        return _decode_hex(value)
    return value.encode('utf-8')


def resolve_declared_bytes(value: Union[bytes, str, None], field_type: FieldType) -> bytes:
    """Resolve a declared-type field value to the bytes its extractor expects"""
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if field_type in BINARY_FIELD_TYPES:
        if value.startswith(HEX_MARKER):
            return _decode_hex(value)
        try:
            return value.encode('latin-1')
        except UnicodeEncodeError:
            return value.encode('utf-8')
    return value.encode('utf-8')


def format_file_size(file_size: Optional[int]) -> str:
    """Bytes to megabytes, two decimals"""
    return f"{(file_size or 0) / BYTES_PER_MB:.2f}"


class RowProcessor:
    """Classifies, extracts, chunks and wraps one row at a time"""

    def __init__(
        self,
        registry: ExtractorRegistry,
        classifier: ContentClassifier,
        chunker: TextChunker,
        storage_service: Optional[S3Service] = None,
        stage_binary_originals: bool = True,
        delete_chunk_span: int = 100
    ):
        """
        Initialize row processor

        Args:
            registry: Extraction strategies
            classifier: Content sniffer for BLOB fields
            chunker: Text chunker
            storage_service: Where binary originals are staged, if anywhere
            stage_binary_originals: Upload BLOB originals and link them as fileUrl
            delete_chunk_span: Minimum number of chunk ids a DELETE row removes
        """
        self.registry = registry
        self.classifier = classifier
        self.chunker = chunker
        self.storage_service = storage_service
        self.stage_binary_originals = stage_binary_originals and storage_service is not None
        self.delete_chunk_span = max(delete_chunk_span, 1)
        logger.info(f"RowProcessor initialized (staging={'on' if self.stage_binary_originals else 'off'})")

    def process(self, row: ChangeRow, source: SourceConfig) -> List[IndexDocument]:
        """
        Build the index documents of one row

        Args:
            row: Changelog row
            source: Source the row belongs to

        Returns:
            list: One document per chunk, empty when the row has no text

        Raises:
            SyncException: If classification, extraction, chunking or staging fails
        """
        if row.is_delete:
            return self._delete_documents(row, source)

        text, raw, content_type = self._extract(row, source)
        chunks = self.chunker.chunk_text(text)

        if not chunks:
            logger.info(f"No text for row {row.row_id} in {source.table_name}.{source.field_name}, skipping")
            return []

        file_url = ""
        if source.is_blob and self.stage_binary_originals:
            file_name = f"pg_{source.database}_{source.table_name}_file_{row.row_id}"
            file_url = self.storage_service.upload_file(raw, file_name, content_type)

        action = SearchAction.UPLOAD if row.is_insert else SearchAction.MERGE_OR_UPLOAD
        title = self._title(row, source)
        file_size = format_file_size(row.file_size)
        uploaded_at = to_iso_utc(row.uploaded_at or utc_now())

        return [
            IndexDocument(
                action=action,
                id=IndexDocument.build_id(source.database, source.table_name, row.row_id, i),
                content=chunk,
                title=title,
                category=source.category,
                file_url=file_url,
                file_size=file_size,
                uploaded_at=uploaded_at
            )
            for i, chunk in enumerate(chunks)
        ]

    def process_rows(self, rows: List[ChangeRow], source: SourceConfig) -> RowBatchResult:
        """
        Process rows in change order; a failing row is logged and skipped

        Args:
            rows: Rows of one poll, oldest first
            source: Source the rows belong to

        Returns:
            RowBatchResult: Documents of every row that produced any
        """
        result = RowBatchResult()

        for row in rows:
            try:
                documents = self.process(row, source)
            except SyncException as e:
                logger.error(f"Error processing row {row.row_id} of {source.source_key} ({e.kind.value}): {e}")
                result.rows_skipped += 1
                result.errors.append(f"row {row.row_id}: {e}")
                continue
            except Exception as e:
                logger.error(f"Unexpected error processing row {row.row_id} of {source.source_key}", exc_info=True)
                result.rows_skipped += 1
                result.errors.append(f"row {row.row_id}: {e}")
                continue

            if documents:
                result.documents.extend(documents)
                result.rows_processed += 1
            else:
                result.rows_skipped += 1

        logger.info(
            f"Processed {len(rows)} rows of {source.source_key}: "
            f"{len(result.documents)} documents, {result.rows_skipped} skipped"
        )
        return result

    def _extract(self, row: ChangeRow, source: SourceConfig) -> Tuple[str, bytes, Optional[str]]:
        options = ExtractionOptions.for_source(source)

        if source.is_blob:
            raw = resolve_blob_bytes(row.value)
            if not raw:
                return "", raw, None
            content_type = self.classifier.classify(raw)
            logger.debug(f"Row {row.row_id}: detected {content_type}")
            result = self.registry.extract_sniffed(content_type, raw, options)
            return result.text, raw, content_type

        raw = resolve_declared_bytes(row.value, source.field_type)
        if not raw:
            return "", raw, None
        result = self.registry.extract_declared(source.field_type, raw, options)
        return result.text, raw, None

    def _delete_documents(self, row: ChangeRow, source: SourceConfig) -> List[IndexDocument]:
        """
        Delete actions for every chunk id the row may have been indexed under

        The deleted value usually holds the last indexed content, but it can be
        NULL or unreadable, so the span never drops below delete_chunk_span.
        Deleting an id that was never indexed is accepted by the index.
        """
        chunk_count = 0
        try:
            text, _, _ = self._extract(row, source)
            chunk_count = len(self.chunker.chunk_text(text))
        except SyncException as e:
            logger.warning(
                f"Could not size deleted row {row.row_id} of {source.source_key} ({e.kind.value}), "
                f"deleting {self.delete_chunk_span} chunk ids: {e}"
            )

        return [
            IndexDocument(
                action=SearchAction.DELETE,
                id=IndexDocument.build_id(source.database, source.table_name, row.row_id, i)
            )
            for i in range(max(chunk_count, self.delete_chunk_span))
        ]

    @staticmethod
    def _title(row: ChangeRow, source: SourceConfig) -> str:
        if source.title_field:
            value = row.extra.get(source.title_field)
            if value not in (None, ""):
                return str(value)
        return f"PG Row ID {row.row_id}"
