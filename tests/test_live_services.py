# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-15
# Description: test_live_services.py
# -----------------------------------------------------------------------------
"""
Round trip against the real embedding provider and a throwaway Chroma collection.

    pytest -m integration
"""
import os
import uuid

import chromadb
import numpy as np
import pytest

from config.Config import Config
from embedding.RagEmbedder import RagEmbedder
from embedding.EmbeddingRecord import pair_segments
from chunking.RagSegment import RagSegment
from services.RagQueryService import RagQueryService
from vectorstore.ChromaRagVectorIndex import ChromaRagVectorIndex
from vectorstore.VectorSynchronizer import VectorSynchronizer

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not os.getenv("OPENAI_API_KEY"), reason="OPENAI_API_KEY not set"),
]


@pytest.mark.asyncio
async def test_live_embedding_search():
    cfg = Config(openai_api_key=os.environ["OPENAI_API_KEY"], cron_secret="integration")
    embedder = RagEmbedder(cfg, dimensions=1536)
    index = ChromaRagVectorIndex(client=chromadb.EphemeralClient(), collection_name=f"it-{uuid.uuid4().hex[:8]}")
    await index.connect()
    sync = VectorSynchronizer(index, inter_batch_delay=0.0)

    segments = [
        RagSegment(id="paris", content="The capital of France is Paris.", metadata={"original_record_id": "paris"}),
        RagSegment(id="lunch", content="Lunch is served at noon.", metadata={"original_record_id": "lunch"}),
    ]
    vectors = await embedder.embed([s.content for s in segments])
    assert vectors.shape == (2, 1536)
    assert np.allclose(np.linalg.norm(vectors, axis=1), 1.0, atol=0.01)

    await sync.upsert(pair_segments(segments, vectors))
    result = await RagQueryService(embedder=embedder, synchronizer=sync).search("What is the capital of France?")

    assert result.results[0].id == "paris"
    assert result.results[0].score > 0.7
