"""
Pydantic models for data validation and serialization
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import FailureKind


class FieldType(str, Enum):
    """Administrator-declared content type of a source column"""
    TXT = "TXT"
    JSON = "JSON"
    XML = "XML"
    HTML = "HTML"
    XLSX = "XLSX"
    PDF = "PDF"
    DOC = "DOC"
    DOCX = "DOCX"
    CSV = "CSV"
    BLOB = "BLOB"
    UNSUPPORTED = "UNSUPPORTED"

    @classmethod
    def parse(cls, value: Any) -> "FieldType":
        """Case-insensitive lookup; unknown values map to UNSUPPORTED"""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNSUPPORTED


class ContentKind(str, Enum):
    """Extraction strategy a piece of content is routed to"""
    PDF = "pdf"
    WORD = "word"
    SPREADSHEET = "spreadsheet"
    PRESENTATION = "presentation"
    CSV = "csv"
    XML = "xml"
    RTF = "rtf"
    JSON = "json"
    HTML = "html"
    TEXT = "text"
    UNSUPPORTED = "unsupported"


class SearchAction(str, Enum):
    """Per-document action verb of the bulk index endpoint"""
    UPLOAD = "upload"
    MERGE_OR_UPLOAD = "mergeOrUpload"
    DELETE = "delete"


class SourceStatus(str, Enum):
    """Outcome of one source within a run"""
    SUCCESS = "success"
    NO_CHANGES = "no_changes"
    FAILED = "failed"
    SKIPPED = "skipped"


class SourceConfig(BaseModel):
    """One (tenant, table, field) binding plus its checkpoint"""
    id: str
    index_name: str
    coid: str
    host: str
    port: int = 5432
    user: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    database: str
    table_name: str
    field_name: str
    field_type: FieldType
    title_field: Optional[str] = None
    category: Optional[str] = None
    destination_index: str
    last_checkpoint: Optional[str] = None
    xml_paths: List[str] = Field(default_factory=list)
    json_properties: List[str] = Field(default_factory=list)
    # Captured with the read so the checkpoint write can be conditional
    seq_no: Optional[int] = None
    primary_term: Optional[int] = None

    @field_validator('field_type', mode='before')
    @classmethod
    def parse_field_type(cls, v):
        if v is None:
            raise ValueError('field_type is required')
        return FieldType.parse(v)

    @property
    def source_key(self) -> str:
        return f"{self.index_name}/{self.id}"

    @property
    def is_blob(self) -> bool:
        return self.field_type == FieldType.BLOB

    @classmethod
    def from_hit(
        cls,
        index_name: str,
        hit: Dict[str, Any],
        tenant_index_prefix: str = "tenant_"
    ) -> "SourceConfig":
        """
        Build a source configuration from an Elasticsearch search hit

        Args:
            index_name: Configuration index the hit was read from
            hit: Raw search hit (``_id``, ``_source`` and optional ``_seq_no``)
            tenant_index_prefix: Prefix of the destination index when the
                document does not name one

        Returns:
            SourceConfig: Parsed configuration
        """
        source = hit.get('_source') or {}
        coid = source.get('coid')
        destination = source.get('index_name')
        if not destination and coid:
            destination = f"{tenant_index_prefix}{str(coid).lower()}"

        return cls(
            id=hit.get('_id'),
            index_name=index_name,
            coid=coid,
            host=source.get('host'),
            port=source.get('port') or 5432,
            user=source.get('user'),
            password=source.get('password'),
            database=source.get('database'),
            table_name=source.get('table_name'),
            field_name=source.get('field_name'),
            field_type=source.get('field_type'),
            title_field=source.get('title_field') or None,
            category=source.get('category'),
            destination_index=destination,
            last_checkpoint=source.get('updatedAt') or None,
            xml_paths=source.get('xml_paths') or [],
            json_properties=source.get('json_properties') or [],
            seq_no=hit.get('_seq_no'),
            primary_term=hit.get('_primary_term')
        )


class ChangeRow(BaseModel):
    """One row of a ``<table>_changelog`` table"""
    row_id: str
    change_time: datetime
    action_type: str = "UPDATE"
    value: Optional[Union[bytes, str]] = None
    file_size: Optional[int] = None
    uploaded_at: Optional[datetime] = None
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('row_id', mode='before')
    @classmethod
    def row_id_to_str(cls, v):
        return str(v)

    @field_validator('action_type', mode='before')
    @classmethod
    def normalize_action(cls, v):
        return (v or "UPDATE").strip().upper()

    @field_validator('value', mode='before')
    @classmethod
    def unwrap_buffers(cls, v):
        if isinstance(v, (memoryview, bytearray)):
            return bytes(v)
        return v

    @property
    def is_insert(self) -> bool:
        return self.action_type == "INSERT"

    @property
    def is_delete(self) -> bool:
        return self.action_type == "DELETE"

    @classmethod
    def from_record(cls, record: Dict[str, Any], field_name: str) -> "ChangeRow":
        """Build a row from a ``dict_row`` record of the changelog query"""
        known = {'row_id', 'change_time', 'action_type', 'file_size', 'uploaded_at', field_name}
        return cls(
            row_id=record['row_id'],
            change_time=record['change_time'],
            action_type=record.get('action_type'),
            value=record.get(field_name),
            file_size=record.get('file_size'),
            uploaded_at=record.get('uploaded_at'),
            extra={k: v for k, v in record.items() if k not in known}
        )


class ChangeBatch(BaseModel):
    """Rows read for one source plus the candidate checkpoint"""
    rows: List[ChangeRow] = Field(default_factory=list)
    since: str
    new_checkpoint: Optional[str] = None

    @property
    def has_changes(self) -> bool:
        return bool(self.rows)


class ClassifiedContent(BaseModel):
    """Sniffed content type and the bytes it was sniffed from"""
    content_type: str
    raw_bytes: bytes


class ExtractionOptions(BaseModel):
    """Per-source knobs for the extraction strategies"""
    xml_paths: List[str] = Field(default_factory=list)
    json_properties: List[str] = Field(default_factory=list)
    json_indent: Optional[int] = None

    @classmethod
    def for_source(cls, source: SourceConfig) -> "ExtractionOptions":
        return cls(xml_paths=source.xml_paths, json_properties=source.json_properties)


class ExtractionResult(BaseModel):
    """Normalized text produced by the extractor registry"""
    kind: ContentKind
    content_type: Optional[str] = None
    text: str = ""
    supported: bool = True

    @property
    def has_text(self) -> bool:
        return bool(self.text)


class IndexDocument(BaseModel):
    """One chunk of one changelog row, as sent to the bulk index endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    action: SearchAction = Field(alias='@search.action')
    id: str
    content: Optional[str] = None
    title: Optional[str] = None
    description: str = "No description"
    image: Optional[str] = None
    category: Optional[str] = None
    file_url: str = Field(default="", alias='fileUrl')
    file_size: Optional[str] = Field(default=None, alias='fileSize')
    uploaded_at: Optional[str] = Field(default=None, alias='uploadedAt')

    @staticmethod
    def build_id(database: str, table_name: str, row_id: str, chunk_index: int) -> str:
        """Deterministic key; re-processing a row overwrites its chunks"""
        return f"pg_{database}_{table_name}_{row_id}_{chunk_index}"

    def to_payload(self) -> Dict[str, Any]:
        if self.action == SearchAction.DELETE:
            return {'@search.action': self.action.value, 'id': self.id}
        return self.model_dump(by_alias=True, mode='json')


class RowBatchResult(BaseModel):
    """Documents built from one source's rows"""
    documents: List[IndexDocument] = Field(default_factory=list)
    rows_processed: int = 0
    rows_skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class SourceResult(BaseModel):
    """Result of syncing one source"""
    index_name: str
    config_id: Optional[str] = None
    table_name: Optional[str] = None
    field_name: Optional[str] = None
    status: SourceStatus
    rows_fetched: int = 0
    documents_indexed: int = 0
    rows_skipped: int = 0
    checkpoint_before: Optional[str] = None
    checkpoint_after: Optional[str] = None
    checkpoint_advanced: bool = False
    error: Optional[str] = None
    failure_kind: Optional[FailureKind] = None
    processing_time: Optional[float] = None


class SyncRunResult(BaseModel):
    """Result of one full run over every discovered source"""
    started_at: datetime
    sources: List[SourceResult] = Field(default_factory=list)
    processing_time: Optional[float] = None

    def count(self, status: SourceStatus) -> int:
        return sum(1 for s in self.sources if s.status == status)

    @property
    def documents_indexed(self) -> int:
        return sum(s.documents_indexed for s in self.sources)
