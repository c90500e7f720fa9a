# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: test_rag_embedder.py
# -----------------------------------------------------------------------------
from types import SimpleNamespace

import httpx
import numpy as np
import openai
import pytest

from embedding.EmbeddingStatus import EmbeddingStatus
from embedding.RagEmbedder import RagEmbedder, classify_provider_error
from errors.RagErrors import DataError, EmbeddingError
from rag_fakes import DIM, FAST, FakeEmbeddingsClient, bad_request_error, rate_limit_error


def _embedder(client, **kwargs) -> RagEmbedder:
    kwargs.setdefault("backoff", FAST)
    return RagEmbedder(client=client, model="fake-embed", **kwargs)


@pytest.mark.asyncio
async def test_embed_returns_unit_vectors_row_per_text():
    client = FakeEmbeddingsClient()
    vecs = await _embedder(client).embed(["first line\nsecond line", "another text"])

    assert vecs.shape == (2, DIM)
    assert vecs.dtype == np.float32
    assert np.allclose(np.linalg.norm(vecs, axis=1), 1.0, atol=1e-5)
    # newlines never reach the provider
    assert client.calls == [["first line second line", "another text"]]


@pytest.mark.asyncio
async def test_embed_batches_and_tracks_status():
    client = FakeEmbeddingsClient()
    status = EmbeddingStatus()

    vecs = await _embedder(client, batch_size=2).embed([f"text {i}" for i in range(5)], status=status)

    assert vecs.shape[0] == 5
    assert [len(c) for c in client.calls] == [2, 2, 1]
    assert status.is_complete
    assert status.processed_count == status.total_count == 5
    assert status.last_error is None


@pytest.mark.asyncio
async def test_empty_input_makes_no_provider_call():
    client = FakeEmbeddingsClient()
    vecs = await _embedder(client).embed([])
    assert vecs.shape[0] == 0
    assert client.calls == []


@pytest.mark.asyncio
async def test_non_unit_vectors_are_rejected_not_renormalised():
    client = FakeEmbeddingsClient(scale=1.5)
    status = EmbeddingStatus()

    with pytest.raises(DataError):
        await _embedder(client).embed(["hello world"], status=status)

    assert status.last_error is not None
    assert not status.is_complete


@pytest.mark.asyncio
async def test_small_norm_drift_is_tolerated():
    vecs = await _embedder(FakeEmbeddingsClient(scale=1.005)).embed(["close enough"])
    assert vecs.shape == (1, DIM)


@pytest.mark.asyncio
async def test_rate_limit_is_retried_then_succeeds():
    client = FakeEmbeddingsClient(errors=[rate_limit_error(), rate_limit_error()])

    vecs = await _embedder(client).embed(["retry me"])

    assert vecs.shape == (1, DIM)
    assert len(client.calls) == 3


@pytest.mark.asyncio
async def test_rate_limit_exhausts_retries():
    client = FakeEmbeddingsClient(errors=[rate_limit_error() for _ in range(FAST.max_attempts)])

    with pytest.raises(EmbeddingError) as excinfo:
        await _embedder(client).embed(["never works"])

    assert excinfo.value.retryable is True
    assert excinfo.value.status_code == 429
    assert len(client.calls) == FAST.max_attempts


@pytest.mark.asyncio
async def test_rejected_input_is_not_retried():
    client = FakeEmbeddingsClient(errors=[bad_request_error()])

    with pytest.raises(EmbeddingError) as excinfo:
        await _embedder(client).embed(["x" * 50])

    assert excinfo.value.retryable is False
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_dimension_mismatch_is_a_data_error():
    with pytest.raises(DataError):
        await _embedder(FakeEmbeddingsClient(), dimensions=3).embed(["three dims please"])


class _ShortClient(FakeEmbeddingsClient):
    async def create(self, *, model, input, **kwargs):
        resp = await super().create(model=model, input=input, **kwargs)
        return SimpleNamespace(model=model, data=resp.data[:-1])


@pytest.mark.asyncio
async def test_count_mismatch_is_a_data_error():
    with pytest.raises(DataError):
        await _embedder(_ShortClient()).embed(["a", "b"])


def test_classify_provider_error_by_status():
    request = httpx.Request("POST", "https://example.invalid/v1/embeddings")

    def status_error(code: int) -> openai.APIStatusError:
        return openai.APIStatusError("boom", response=httpx.Response(code, request=request), body=None)

    assert classify_provider_error(status_error(503)).retryable is True
    assert classify_provider_error(status_error(408)).retryable is True
    assert classify_provider_error(status_error(401)).retryable is False
    assert classify_provider_error(openai.APIConnectionError(request=request)).retryable is True
    assert classify_provider_error(RuntimeError("other")).retryable is False


def test_embedder_requires_config_or_client():
    with pytest.raises(ValueError):
        RagEmbedder()


@pytest.mark.asyncio
async def test_every_returned_vector_is_unit_length():
    rng = np.random.default_rng(7)
    words = ["deploy", "lunch", "paris", "release", "bug", "standup", "roadmap", "coffee", "budget", "retro"]
    texts = [" ".join(rng.choice(words, size=int(rng.integers(1, 30)))) for _ in range(200)]

    vecs = await _embedder(FakeEmbeddingsClient(), batch_size=64).embed(texts)

    norms = np.linalg.norm(vecs, axis=1)
    assert vecs.shape[0] == 200
    assert np.all(np.abs(norms - 1.0) <= 0.01)
