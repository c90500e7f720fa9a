# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-14
# Description: test_reembedding_scheduler.py
# -----------------------------------------------------------------------------
import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from rag_fakes import FakeEmbeddingsClient, bad_request_error, build_container
from record.RagRecord import RagRecord
from scheduler.JobHealth import CRITICAL, HEALTHY, WARNING
from store.db import utc_now


def _msg(record_id: str, content: str, *, minutes_ago: int = 0, **meta) -> RagRecord:
    meta.setdefault("sender", "alice")
    meta.setdefault("channel_id", "general")
    meta["created_at"] = (utc_now() - timedelta(minutes=minutes_ago)).isoformat()
    last = meta.pop("last_embedded_at", None)
    return RagRecord(id=record_id, content=content, source_metadata=meta, last_embedded_at=last)


async def _alerts(container, message: str):
    return [a for a in await container.monitoring_store.list_alerts() if a["message"] == message]


@pytest.mark.asyncio
async def test_run_embeds_only_stale_records(container):
    await container.start()
    now = utc_now()
    await container.record_store.insert_records(
        [
            _msg("never", "Never embedded before.", minutes_ago=5),
            _msg("old", "Embedded two days ago.", minutes_ago=4, last_embedded_at=now - timedelta(hours=48)),
            _msg("fresh", "Embedded an hour ago.", minutes_ago=3, last_embedded_at=now - timedelta(hours=1)),
            _msg("sys", "User joined the channel.", minutes_ago=2, type="system"),
            _msg("blank", "   ", minutes_ago=1),
        ]
    )

    summary = await container.scheduler.run_once()

    assert summary.success
    assert summary.status == "success"
    assert summary.messages_processed == 2
    assert set(container.index.entries) == {"never", "old"}

    fresh = await container.record_store.get_record("fresh")
    assert fresh.last_embedded_at == now - timedelta(hours=1)
    assert (await container.record_store.get_record("never")).last_embedded_at is not None

    job = await container.monitoring_store.get_job_status("reembedding")
    assert job.health == HEALTHY
    assert job.last_processed_count == 2
    assert job.consecutive_failures == 0

    # everything is fresh now
    again = await container.scheduler.run_once()
    assert again.success
    assert again.messages_processed == 0
    await container.stop()


@pytest.mark.asyncio
async def test_repeated_failures_escalate_to_critical(tmp_path):
    client = FakeEmbeddingsClient(errors=[bad_request_error() for _ in range(3)])
    container = build_container(tmp_path, embed_client=client)
    await container.start()
    await container.record_store.insert_records([_msg("m1", "This one will not embed.")])

    first = await container.scheduler.run_once()
    assert not first.success
    assert first.status == "failed"
    assert "m1" in first.failed_records
    job = await container.monitoring_store.get_job_status("reembedding")
    assert job.health == WARNING
    assert await _alerts(container, "Re-embedding job has failed multiple times") == []

    await container.scheduler.run_once()
    await container.scheduler.run_once()

    job = await container.monitoring_store.get_job_status("reembedding")
    assert job.consecutive_failures == 3
    assert job.health == CRITICAL
    assert job.last_run_status == "failed"

    escalations = await _alerts(container, "Re-embedding job has failed multiple times")
    assert len(escalations) == 1
    assert escalations[0]["type"] == "error"
    assert escalations[0]["service"] == "re-embedding"
    assert escalations[0]["details"]["consecutiveFailures"] >= 3
    assert len(await _alerts(container, "Re-embedding job failed")) == 3

    # the failed record is still pending and recovers once the provider does
    recovered = await container.scheduler.run_once()
    assert recovered.success
    assert recovered.messages_processed == 1
    job = await container.monitoring_store.get_job_status("reembedding")
    assert job.health == HEALTHY
    await container.stop()


@pytest.mark.asyncio
async def test_partial_failure_succeeds_with_warning(tmp_path):
    client = FakeEmbeddingsClient(errors=[bad_request_error()])
    container = build_container(tmp_path, embed_client=client)
    await container.start()
    await container.record_store.insert_records(
        [_msg("first", "Rejected by the provider.", minutes_ago=2), _msg("second", "Accepted.", minutes_ago=1)]
    )

    summary = await container.scheduler.run_once()

    assert summary.success
    assert summary.messages_processed == 1
    assert list(summary.failed_records) == ["first"]
    assert (await container.record_store.get_record("first")).last_embedded_at is None

    warnings = await _alerts(container, "Re-embedding job completed with record failures")
    assert len(warnings) == 1
    assert warnings[0]["type"] == "warning"
    assert "first" in warnings[0]["details"]["failedRecords"]
    await container.stop()


@pytest.mark.asyncio
async def test_overlapping_run_is_skipped(container):
    await container.start()
    await container.record_store.insert_records([_msg("m1", "Hello there.")])

    first, second = await asyncio.gather(container.scheduler.run_once(), container.scheduler.run_once())

    assert first.status == "success"
    assert second.status == "skipped"
    assert not second.success
    assert first.messages_processed == 1
    await container.stop()


@pytest.mark.asyncio
async def test_slow_run_raises_warning(container):
    await container.start()
    container.scheduler.max_processing_time_ms = -1

    summary = await container.scheduler.run_once()

    assert summary.success
    slow = await _alerts(container, "Re-embedding job took longer than expected")
    assert len(slow) == 1
    assert slow[0]["details"]["maxAllowed"] == -1
    await container.stop()


@pytest.mark.asyncio
async def test_unexpected_exception_is_reported_not_raised(container, monkeypatch):
    await container.start()

    async def broken(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(container.record_store, "fetch_stale_records", broken)

    summary = await container.scheduler.run_once()

    assert summary.status == "error"
    assert summary.error == "database went away"
    alerts = await _alerts(container, "Re-embedding job threw an exception")
    assert alerts[0]["details"]["errorType"] == "RuntimeError"
    assert container.scheduler.status()["state"] == "idle"

    job = await container.monitoring_store.get_job_status("reembedding")
    assert job.consecutive_failures == 1
    assert job.last_run_status == "failed"

    await container.scheduler.run_once()
    await container.scheduler.run_once()

    job = await container.monitoring_store.get_job_status("reembedding")
    assert job.consecutive_failures == 3
    assert job.health == CRITICAL
    assert len(await _alerts(container, "Re-embedding job has failed multiple times")) == 1
    await container.stop()


def _locked_for(real_mark, locked_ids):
    async def mark_embedded(ids, at=None):
        if any(i in locked_ids for i in ids):
            raise OperationalError("UPDATE messages", {}, Exception("database is locked"))
        return await real_mark(ids, at)

    return mark_embedded


@pytest.mark.asyncio
async def test_store_error_on_one_record_does_not_stop_the_run(container, monkeypatch):
    await container.start()
    store = container.record_store
    await store.insert_records([_msg("a", "First message.", minutes_ago=2), _msg("b", "Second message.", minutes_ago=1)])
    monkeypatch.setattr(store, "mark_embedded", _locked_for(store.mark_embedded, {"a"}))

    summary = await container.scheduler.run_once()

    assert summary.success
    assert summary.messages_processed == 1
    assert list(summary.failed_records) == ["a"]
    assert "database is locked" in summary.failed_records["a"]
    assert (await store.get_record("a")).last_embedded_at is None
    assert (await store.get_record("b")).last_embedded_at is not None
    assert len(await _alerts(container, "Re-embedding job completed with record failures")) == 1
    await container.stop()


@pytest.mark.asyncio
async def test_persistent_store_error_escalates_to_critical(container, monkeypatch):
    await container.start()
    store = container.record_store
    await store.insert_records([_msg("a", "Never gets marked.")])
    monkeypatch.setattr(store, "mark_embedded", _locked_for(store.mark_embedded, {"a"}))

    for _ in range(3):
        summary = await container.scheduler.run_once()
        assert summary.status == "failed"

    job = await container.monitoring_store.get_job_status("reembedding")
    assert job.consecutive_failures == 3
    assert job.health == CRITICAL
    assert len(await _alerts(container, "Re-embedding job has failed multiple times")) == 1
    await container.stop()


@pytest.mark.asyncio
async def test_max_records_per_run_limits_batch(container):
    await container.start()
    await container.record_store.insert_records(
        [_msg(f"m{i}", f"Message number {i}.", minutes_ago=10 - i) for i in range(5)]
    )
    container.scheduler.max_records_per_run = 2

    first = await container.scheduler.run_once()

    assert first.messages_processed == 2
    assert set(container.index.entries) == {"m0", "m1"}
    await container.stop()


@pytest.mark.asyncio
async def test_timer_runs_immediately_and_stops(container):
    await container.start()
    scheduler = container.scheduler
    scheduler.interval_seconds = 3600

    scheduler.start(run_immediately=True)
    assert scheduler.status()["timerActive"]
    for _ in range(200):
        if scheduler.last_summary is not None:
            break
        await asyncio.sleep(0.01)

    await scheduler.stop()

    assert scheduler.last_summary is not None
    assert scheduler.last_summary.success
    status = scheduler.status()
    assert status["timerActive"] is False
    assert status["lastRun"]["status"] == "success"
    await container.stop()
