# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: test_record_chunker.py
# -----------------------------------------------------------------------------
import pytest

from chunking.RecordChunker import RecordChunker
from record.RagRecord import RagRecord


def _words(n: int) -> str:
    return " ".join(f"w{i:04d}" for i in range(n))


def test_short_record_maps_to_single_segment_with_record_id():
    chunker = RecordChunker()
    rec = RagRecord(id="msg-1", content="hello there", source_metadata={"sender": "alice"})

    segments = chunker.chunk(rec)

    assert len(segments) == 1
    seg = segments[0]
    assert seg.id == "msg-1"
    assert seg.content == "hello there"
    assert seg.chunk_index == 0
    assert seg.total_chunks == 1
    assert seg.original_record_id == "msg-1"
    assert seg.metadata["sender"] == "alice"


def test_record_just_below_threshold_is_not_split():
    rec = RagRecord(id="r", content="x" * 999)
    assert [s.id for s in RecordChunker().chunk(rec)] == ["r"]


def test_long_record_is_split_with_bounded_overlapping_segments():
    content = _words(420)  # ~2500 chars
    rec = RagRecord(id="long", content=content, source_metadata={"channel_id": "general"})

    segments = RecordChunker(chunk_size=1000, overlap=200).chunk(rec)

    assert len(segments) >= 3
    assert [s.id for s in segments] == [f"long_chunk_{i}" for i in range(len(segments))]
    for i, seg in enumerate(segments):
        assert len(seg.content) <= 1000
        assert seg.chunk_index == i
        assert seg.total_chunks == len(segments)
        assert seg.original_record_id == "long"
        assert seg.metadata["channel_id"] == "general"

    # neighbours share their boundary text
    for prev, nxt in zip(segments, segments[1:]):
        assert nxt.content.split()[0] in prev.content.split()

    # nothing is dropped, start or end
    assert segments[0].content.startswith("w0000")
    assert segments[-1].content.endswith("w0419")
    covered = set(" ".join(s.content for s in segments).split())
    assert covered == set(content.split())


def test_text_without_separators_falls_back_to_characters():
    rec = RagRecord(id="blob", content="a" * 2500)

    segments = RecordChunker(chunk_size=1000, overlap=200).chunk(rec)

    assert [len(s.content) for s in segments] == [1000, 1000, 900]


def test_chunking_is_deterministic():
    rec = RagRecord(id="d", content=_words(600), source_metadata={"sender": "bob"})
    chunker = RecordChunker()

    first = chunker.chunk(rec)
    second = chunker.chunk(rec)

    assert [(s.id, s.content, s.to_metadata()) for s in first] == [
        (s.id, s.content, s.to_metadata()) for s in second
    ]


def test_segment_metadata_is_a_copy():
    meta = {"sender": "alice"}
    rec = RagRecord(id="m", content="short", source_metadata=meta)

    seg = RecordChunker().chunk(rec)[0]
    meta["sender"] = "mallory"

    assert seg.metadata["sender"] == "alice"
    with pytest.raises(TypeError):
        seg.metadata["sender"] = "eve"


def test_overlap_must_be_smaller_than_chunk_size():
    with pytest.raises(ValueError):
        RecordChunker(chunk_size=200, overlap=200)
