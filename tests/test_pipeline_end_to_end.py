# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-15
# Description: test_pipeline_end_to_end.py
# -----------------------------------------------------------------------------
"""
Message in the store -> scheduled re-embedding -> semantic search -> grounded prompt.
"""
from datetime import timedelta

import pytest

from record.RagRecord import RagRecord
from store.db import utc_now


@pytest.mark.asyncio
async def test_message_is_searchable_after_one_run(container):
    await container.start()
    await container.record_store.insert_records(
        [
            RagRecord(
                id="msg-paris",
                content="The capital of France is Paris.",
                source_metadata={"sender": "alice", "channel_id": "general", "created_at": "2026-10-01T09:00:00"},
            ),
            RagRecord(id="msg-lunch", content="Lunch is at noon on Fridays.", source_metadata={"sender": "bob"}),
        ]
    )

    summary = await container.scheduler.run_once()
    assert summary.success
    assert summary.messages_processed == 2

    embedded_at = (await container.record_store.get_record("msg-paris")).last_embedded_at
    assert embedded_at is not None
    assert utc_now() - embedded_at < timedelta(minutes=1)

    result = await container.query_service.search("What is the capital of France?")
    top = result.results[0]
    assert top.id == "msg-paris"
    assert top.score > 0.7
    assert top.metadata["original_record_id"] == "msg-paris"

    prompt = container.prompt_builder.build(result.results[:1], "What is the capital of France?")
    assert "[alice at 2026-10-01T09:00:00]" in prompt
    assert "The capital of France is Paris." in prompt
    assert prompt.endswith("What is the capital of France?")

    answer = await container.chat_service.ask("What is the capital of France?", top_k=1)
    assert answer["answer"] == "Paris is the capital of France."
    assert [s["record_id"] for s in answer["sources"]] == ["msg-paris"]

    again = await container.scheduler.run_once()
    assert again.messages_processed == 0
    await container.stop()


@pytest.mark.asyncio
async def test_edited_message_replaces_its_old_segments(container):
    await container.start()
    long_text = " ".join(f"Release note item {i} shipped to production." for i in range(60))
    await container.record_store.insert_records([RagRecord(id="notes", content=long_text)])
    await container.scheduler.run_once()

    old_ids = [i for i in container.index.entries if i.startswith("notes")]
    assert len(old_ids) > 1
    assert all(i.startswith("notes_chunk_") for i in old_ids)

    # an edit clears last_embedded_at, which makes the record stale again
    await container.record_store.insert_records([RagRecord(id="notes", content="Release postponed.")])
    summary = await container.scheduler.run_once()

    assert summary.messages_processed == 1
    assert [i for i in container.index.entries if i.startswith("notes")] == ["notes"]
    assert container.index.entries["notes"]["content"] == "Release postponed."
    await container.stop()


@pytest.mark.asyncio
async def test_stats_reflect_pending_and_embedded_records(container):
    await container.start()
    await container.record_store.insert_records(
        [RagRecord(id=f"m{i}", content=f"Message {i} about the roadmap.") for i in range(3)]
    )

    before = await container.stats_service.get_stats()
    assert before["totalRecords"] == 3
    assert before["pendingRecords"] == 3
    assert before["vectorStats"]["totalVectorCount"] == 0

    await container.scheduler.run_once()

    after = await container.stats_service.get_stats()
    assert after["pendingRecords"] == 0
    assert after["vectorStats"]["totalVectorCount"] == 3
    assert after["jobStatus"]["lastRunStatus"] == "success"
    await container.stop()
