"""Shared fixtures and fakes for the changelog indexer tests."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from changelog_indexer.config import SyncSettings
from changelog_indexer.models.schemas import SourceConfig


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data: Any = None, text: str = ""):
        self.status_code = status_code
        self._json = json_data if json_data is not None else {}
        self.text = text

    def json(self):
        return self._json


class FakeSession:
    """Stands in for requests.Session; replies in order and records every call."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def _reply(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0) if self.responses else FakeResponse()
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._reply("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._reply("POST", url, **kwargs)


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        self.connection.executed.append((query, params))
        if self.connection.error is not None:
            raise self.connection.error

    def fetchall(self):
        return list(self.connection.records)


class FakeConnection:
    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.executed = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def cursor(self):
        return FakeCursor(self)


class FakeConnect:
    """Stands in for psycopg.connect; one fresh connection per call."""

    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.connections: List[FakeConnection] = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        connection = FakeConnection(self.records, self.error)
        self.connections.append(connection)
        return connection


class FakeS3Client:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.put_calls: List[Dict[str, Any]] = []

    def put_object(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.put_calls.append(kwargs)
        return {"ETag": '"etag"'}

    def head_bucket(self, **kwargs):
        if self.error is not None:
            raise self.error
        return {}


class FakeStorage:
    """Stands in for S3Service inside the row processor."""

    def __init__(self):
        self.uploads: List[Dict[str, Any]] = []

    def upload_file(self, file_content, file_name, content_type):
        self.uploads.append({"content": file_content, "file_name": file_name, "content_type": content_type})
        return f"https://files.example.com/{file_name}"


def make_sniffer(result: Optional[str]):
    def sniff(content: bytes) -> Optional[str]:
        return result
    return sniff


@pytest.fixture
def settings() -> SyncSettings:
    return SyncSettings(
        elasticsearch_host="http://es.internal:9200",
        search_endpoint="https://search.example.net",
        search_api_key="secret-key",
        s3_bucket_name="originals",
        aws_region="eu-west-1",
        log_file=None
    )


@pytest.fixture
def make_source():
    def _make(**overrides) -> SourceConfig:
        values = dict(
            id="cfg-1",
            index_name="datasource_postgresql_connection_acme",
            coid="ACME",
            host="db.internal",
            port=5432,
            user="reader",
            password="pw",
            database="crm",
            table_name="notes",
            field_name="body",
            field_type="TXT",
            category="Notes",
            destination_index="tenant_acme",
            last_checkpoint=None,
            seq_no=3,
            primary_term=1
        )
        values.update(overrides)
        return SourceConfig(**values)
    return _make


@pytest.fixture
def change_time():
    return datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)
