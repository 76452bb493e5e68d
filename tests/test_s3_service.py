"""Tests for staging binary originals on S3."""

import pytest
from botocore.exceptions import ClientError

from changelog_indexer.exceptions import FailureKind, S3Exception
from changelog_indexer.services.s3_service import S3Service, generate_preview_url

from conftest import FakeS3Client

DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@pytest.mark.parametrize("content_type", [
    DOCX,
    "application/msword",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
])
def test_office_types_open_in_web_viewer(content_type) -> None:
    url = generate_preview_url("https://bucket.s3.amazonaws.com/a b.docx", content_type)
    assert url == (
        "https://view.officeapps.live.com/op/view.aspx?src="
        "https%3A%2F%2Fbucket.s3.amazonaws.com%2Fa%20b.docx"
    )


@pytest.mark.parametrize("content_type", ["application/pdf", "text/html", "image/png", None])
def test_other_types_use_direct_url(content_type) -> None:
    assert generate_preview_url("https://files/x", content_type) == "https://files/x"


def test_upload_puts_object_and_returns_preview(settings) -> None:
    client = FakeS3Client()
    service = S3Service(settings, s3_client=client)

    url = service.upload_file(b"%PDF", "pg_crm_docs_file_7", "application/pdf")

    assert client.put_calls == [{
        "Bucket": "originals",
        "Key": "pg_crm_docs_file_7",
        "Body": b"%PDF",
        "ContentType": "application/pdf",
    }]
    assert url == "https://originals.s3.eu-west-1.amazonaws.com/pg_crm_docs_file_7"


def test_upload_with_prefix_and_public_url(settings) -> None:
    settings = settings.model_copy(update={
        "s3_key_prefix": "/postgres/",
        "s3_public_base_url": "https://cdn.example.com/",
    })
    client = FakeS3Client()
    service = S3Service(settings, s3_client=client)

    url = service.upload_file(b"data", "pg_crm_docs_file_8", DOCX)

    assert client.put_calls[0]["Key"] == "postgres/pg_crm_docs_file_8"
    assert url.startswith("https://view.officeapps.live.com/op/view.aspx?src=")
    assert url.endswith("https%3A%2F%2Fcdn.example.com%2Fpostgres%2Fpg_crm_docs_file_8")


def test_upload_defaults_content_type(settings) -> None:
    client = FakeS3Client()
    S3Service(settings, s3_client=client).upload_file(b"?", "f", None)
    assert client.put_calls[0]["ContentType"] == "application/octet-stream"


def test_upload_failure_is_wrapped(settings) -> None:
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    service = S3Service(settings, s3_client=FakeS3Client(error=error))

    with pytest.raises(S3Exception) as exc:
        service.upload_file(b"x", "f", "text/plain")
    assert exc.value.kind == FailureKind.STORAGE


def test_bucket_is_required(settings) -> None:
    with pytest.raises(S3Exception):
        S3Service(settings.model_copy(update={"s3_bucket_name": None}), s3_client=FakeS3Client())


def test_check_connection(settings) -> None:
    assert S3Service(settings, s3_client=FakeS3Client()).check_connection()
