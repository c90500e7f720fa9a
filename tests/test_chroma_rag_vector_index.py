# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-14
# Description: test_chroma_rag_vector_index.py
# -----------------------------------------------------------------------------
import uuid
from datetime import datetime

import chromadb
import numpy as np
import pytest

from embedding.EmbeddingRecord import EmbeddingRecord
from rag_fakes import fast_synchronizer
from vectorstore.ChromaRagVectorIndex import ChromaRagVectorIndex, sanitize_metadata
from vectorstore.RagVectorIndex import RagVectorIndex


def _unit(*values: float) -> np.ndarray:
    vec = np.asarray(values, dtype=np.float32)
    return vec / np.linalg.norm(vec)


def _record(segment_id: str, vector: np.ndarray, record_id: str, **meta) -> EmbeddingRecord:
    return EmbeddingRecord(
        segment_id=segment_id,
        vector=vector,
        content=f"content of {segment_id}",
        metadata={"original_record_id": record_id, **meta},
    )


async def _index() -> ChromaRagVectorIndex:
    index = ChromaRagVectorIndex(client=chromadb.EphemeralClient(), collection_name=f"test-{uuid.uuid4().hex[:8]}")
    await index.connect()
    return index


def test_sanitize_metadata():
    when = datetime(2026, 10, 1, 9, 30)
    assert sanitize_metadata(
        {"a": "x", "b": 1, "c": 0.5, "d": True, "e": None, "f": when, "g": ["x", "y"]}
    ) == {"a": "x", "b": 1, "c": 0.5, "d": True, "f": when.isoformat(), "g": "['x', 'y']"}


@pytest.mark.asyncio
async def test_index_satisfies_protocol_and_reports_connection():
    index = await _index()
    assert isinstance(index, RagVectorIndex)
    assert await index.test_connection()


def test_collection_before_connect_is_an_error():
    index = ChromaRagVectorIndex(client=chromadb.EphemeralClient())
    with pytest.raises(RuntimeError):
        _ = index.collection


@pytest.mark.asyncio
async def test_upsert_fetch_query_delete_round_trip():
    index = await _index()
    assert await index.query(_unit(1, 0, 0).tolist(), top_k=3) == []

    await index.upsert(
        [
            _record("a", _unit(1, 0, 0), "rec-a", sender="alice", created_at=datetime(2026, 10, 1)),
            _record("b_chunk_0", _unit(0, 1, 0), "rec-b", sender="bob"),
            _record("b_chunk_1", _unit(0, 1, 1), "rec-b", sender="bob"),
        ]
    )

    fetched = await index.fetch(["a", "missing"])
    assert set(fetched) == {"a"}
    assert fetched["a"].content == "content of a"
    assert fetched["a"].metadata["created_at"] == "2026-10-01T00:00:00"

    matches = await index.query(_unit(1, 0.1, 0).tolist(), top_k=10)
    assert len(matches) == 3
    assert matches[0].id == "a"
    assert matches[0].score == pytest.approx(0.995, abs=0.01)
    assert matches[0].metadata["sender"] == "alice"

    bob_only = await index.query(_unit(1, 0, 0).tolist(), top_k=5, where={"sender": "bob"})
    assert {m.id for m in bob_only} == {"b_chunk_0", "b_chunk_1"}

    stats = await index.describe_stats()
    assert stats.total_vector_count == 3
    assert stats.dimension == 3

    assert sorted(await index.ids_for_record("rec-b")) == ["b_chunk_0", "b_chunk_1"]
    assert await index.delete(["b_chunk_1", "b_chunk_1"]) == 1
    assert await index.ids_for_record("rec-b") == ["b_chunk_0"]


@pytest.mark.asyncio
async def test_synchronizer_verifies_against_chroma():
    index = await _index()
    sync = fast_synchronizer(index, batch_size=2)

    result = await sync.upsert([_record(f"s{i}", _unit(1, i, 0), f"r{i}") for i in range(5)])

    assert result.batch_count == 3
    assert (await sync.get_stats()).total_vector_count == 5
