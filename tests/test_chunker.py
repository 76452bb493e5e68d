"""Tests for the fixed-size chunker."""

import math

import pytest

from changelog_indexer.exceptions import ChunkingException, FailureKind
from changelog_indexer.processors.chunker import DEFAULT_CHUNK_SIZE, TextChunker, chunk_text


def test_large_text_splits_into_three_chunks() -> None:
    text = "a" * 65000
    chunks = chunk_text(text)
    assert [len(c) for c in chunks] == [30000, 30000, 5000]
    assert "".join(chunks) == text


def test_empty_text_yields_no_chunks() -> None:
    assert chunk_text("") == []
    assert chunk_text(None) == []


@pytest.mark.parametrize("length,size", [(1, 1), (10, 3), (29999, 30000), (30000, 30000), (30001, 30000)])
def test_chunk_count_and_bounds(length: int, size: int) -> None:
    text = "".join(chr(ord("a") + i % 26) for i in range(length))
    chunks = chunk_text(text, size)
    assert len(chunks) == math.ceil(length / size)
    assert all(len(c) <= size for c in chunks)
    assert "".join(chunks) == text


def test_non_positive_size_is_rejected() -> None:
    with pytest.raises(ChunkingException) as exc:
        chunk_text("abc", 0)
    assert exc.value.kind == FailureKind.CHUNKING

    with pytest.raises(ChunkingException):
        TextChunker(-5)


def test_text_chunker_uses_configured_size() -> None:
    chunker = TextChunker(4)
    assert chunker.chunk_text("abcdefghij") == ["abcd", "efgh", "ij"]
    assert TextChunker().max_size == DEFAULT_CHUNK_SIZE
