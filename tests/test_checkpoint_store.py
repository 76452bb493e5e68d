"""Tests for source configuration reads and checkpoint writes."""

import pytest
import requests

from changelog_indexer.exceptions import CheckpointException, FailureKind
from changelog_indexer.models.schemas import FieldType
from changelog_indexer.services.checkpoint_store import CheckpointStore

from conftest import FakeResponse, FakeSession

PREFIX = "datasource_postgresql_connection_"


def hit(doc_id, **source):
    body = {
        "coid": "ACME",
        "host": "db.internal",
        "user": "reader",
        "password": "pw",
        "database": "crm",
        "table_name": "notes",
        "field_name": "body",
        "field_type": "txt",
        "category": "Notes",
    }
    body.update(source)
    return {"_id": doc_id, "_source": body, "_seq_no": 12, "_primary_term": 2}


def test_list_config_indices_filters_and_sorts(settings) -> None:
    session = FakeSession([FakeResponse(200, [
        {"index": f"{PREFIX}zeta"},
        {"index": "tenant_acme"},
        {"index": f"{PREFIX}acme"},
    ])])
    store = CheckpointStore(settings, session=session)

    assert store.list_config_indices(PREFIX) == [f"{PREFIX}acme", f"{PREFIX}zeta"]
    call = session.calls[0]
    assert call["url"] == "http://es.internal:9200/_cat/indices"
    assert call["params"] == {"format": "json", "h": "index"}


def test_list_config_indices_failure(settings) -> None:
    store = CheckpointStore(settings, session=FakeSession([requests.ConnectionError("refused")]))
    with pytest.raises(CheckpointException) as exc:
        store.list_config_indices(PREFIX)
    assert exc.value.kind == FailureKind.CHECKPOINT


def test_fetch_source_configs(settings) -> None:
    index = f"{PREFIX}acme"
    session = FakeSession([FakeResponse(200, {"hits": {"hits": [
        hit("a", updatedAt="2024-05-01T10:00:00+00:00"),
        hit("b", index_name="custom_index", field_type="blob"),
        hit("broken", table_name=None),
    ]}})])
    store = CheckpointStore(settings, session=session)

    configs = store.fetch_source_configs(index)

    assert [c.id for c in configs] == ["a", "b"]
    first, second = configs
    assert first.index_name == index
    assert first.destination_index == "tenant_acme"
    assert first.field_type == FieldType.TXT
    assert first.last_checkpoint == "2024-05-01T10:00:00+00:00"
    assert (first.seq_no, first.primary_term) == (12, 2)
    assert second.destination_index == "custom_index"
    assert second.is_blob
    assert session.calls[0]["json"]["seq_no_primary_term"] is True


def test_check_connection(settings) -> None:
    session = FakeSession([FakeResponse(200, {"cluster_name": "es"})])
    assert CheckpointStore(settings, session=session).check_connection()
    assert session.calls[0]["url"] == "http://es.internal:9200"


@pytest.mark.parametrize("reply", [requests.ConnectionError("refused"), FakeResponse(503, text="unavailable")])
def test_check_connection_failure(settings, reply) -> None:
    store = CheckpointStore(settings, session=FakeSession([reply]))
    with pytest.raises(CheckpointException) as exc:
        store.check_connection()
    assert exc.value.kind == FailureKind.CHECKPOINT


def test_advance_checkpoint_conditional_write(settings, make_source) -> None:
    session = FakeSession([FakeResponse(200, {"result": "updated"})])
    store = CheckpointStore(settings, session=session)
    source = make_source(last_checkpoint="2024-05-01T10:00:00+00:00")

    assert store.advance_checkpoint(source, "2024-05-01T10:05:00+00:00") is True

    call = session.calls[0]
    assert call["url"] == f"http://es.internal:9200/{source.index_name}/_update/cfg-1"
    assert call["params"] == {"if_seq_no": 3, "if_primary_term": 1}
    assert call["json"] == {"doc": {"updatedAt": "2024-05-01T10:05:00+00:00"}}


def test_advance_checkpoint_from_nothing(settings, make_source) -> None:
    session = FakeSession([FakeResponse(200)])
    store = CheckpointStore(settings, session=session)
    assert store.advance_checkpoint(make_source(last_checkpoint=None), "2024-05-01T10:05:00+00:00")
    assert len(session.calls) == 1


@pytest.mark.parametrize("candidate", [None, "2024-05-01T10:00:00+00:00", "2024-05-01T09:00:00Z"])
def test_checkpoint_never_regresses(settings, make_source, candidate) -> None:
    session = FakeSession()
    store = CheckpointStore(settings, session=session)
    source = make_source(last_checkpoint="2024-05-01T10:00:00Z")

    assert store.advance_checkpoint(source, candidate) is False
    assert session.calls == []


def test_concurrent_modification_is_reported(settings, make_source) -> None:
    store = CheckpointStore(settings, session=FakeSession([FakeResponse(409, text="version conflict")]))
    with pytest.raises(CheckpointException) as exc:
        store.advance_checkpoint(make_source(), "2024-05-01T10:05:00+00:00")
    assert "concurrently" in str(exc.value)


def test_failed_update_raises(settings, make_source) -> None:
    store = CheckpointStore(settings, session=FakeSession([FakeResponse(404, text="missing")]))
    with pytest.raises(CheckpointException):
        store.advance_checkpoint(make_source(), "2024-05-01T10:05:00+00:00")


def test_basic_auth_when_credentials_set(settings) -> None:
    settings = settings.model_copy(update={"elasticsearch_username": "elastic", "elasticsearch_password": "pw"})
    session = FakeSession([FakeResponse(200, [])])
    CheckpointStore(settings, session=session).list_config_indices(PREFIX)
    auth = session.calls[0]["auth"]
    assert (auth.username, auth.password) == ("elastic", "pw")
