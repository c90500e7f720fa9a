# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-07
# Updated: 2026-10-13
# Description: RecordStore
# -----------------------------------------------------------------------------
import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, or_, select, update

from record.RagRecord import RagRecord
from store.db import Database, utc_now
from store.models import MessageRow
from utility.logging_utils import get_class_logger

# columns promoted out of source_metadata; everything else goes to the JSON column
_COLUMN_KEYS = ("type", "sender_id", "sender", "channel_id", "title", "created_at")


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)


def row_to_record(row: MessageRow) -> RagRecord:
    metadata: Dict[str, Any] = dict(row.extra or {})
    metadata.update(
        {
            "type": row.type,
            "sender_id": row.sender_id,
            "sender": row.sender,
            "channel_id": row.channel_id,
            "title": row.title,
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
    )
    return RagRecord(
        id=row.id,
        content=row.content or "",
        source_metadata={k: v for k, v in metadata.items() if v is not None},
        last_embedded_at=row.last_embedded_at,
    )


def record_to_row(record: RagRecord) -> MessageRow:
    meta = dict(record.source_metadata or {})
    extra = {k: v for k, v in meta.items() if k not in _COLUMN_KEYS}
    return MessageRow(
        id=record.id,
        content=record.content,
        type=meta.get("type") or "message",
        sender_id=meta.get("sender_id"),
        sender=meta.get("sender"),
        channel_id=meta.get("channel_id"),
        title=meta.get("title"),
        created_at=_as_datetime(meta.get("created_at")) or utc_now(),
        last_embedded_at=record.last_embedded_at,
        extra=extra or None,
    )


class RecordStore:
    """
    Read side of the message store for the embedding pipeline.
    Public methods are coroutines; the SQLAlchemy work runs in a worker thread.
    """

    def __init__(self, db: Database, *, logger=None):
        self.db = db
        self.logger = logger or get_class_logger(self.__class__)

    @staticmethod
    def _stale_filter(cutoff: datetime):
        return (
            or_(MessageRow.last_embedded_at.is_(None), MessageRow.last_embedded_at < cutoff),
            MessageRow.type != "system",
            func.trim(MessageRow.content) != "",
        )

    # ---- sync bodies ----------------------------------------------------------

    def _fetch_stale(self, cutoff: datetime, limit: Optional[int]) -> List[RagRecord]:
        stmt = (
            select(MessageRow)
            .where(*self._stale_filter(cutoff))
            .order_by(MessageRow.created_at.asc(), MessageRow.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.db.session() as s:
            return [row_to_record(r) for r in s.scalars(stmt).all()]

    def _mark_embedded(self, ids: Sequence[str], at: datetime) -> int:
        if not ids:
            return 0
        stmt = update(MessageRow).where(MessageRow.id.in_(list(ids))).values(last_embedded_at=at)
        with self.db.session() as s:
            return s.execute(stmt).rowcount or 0

    def _insert(self, records: Sequence[RagRecord]) -> int:
        with self.db.session() as s:
            for rec in records:
                s.merge(record_to_row(rec))
        return len(records)

    def _get(self, record_id: str) -> Optional[RagRecord]:
        with self.db.session() as s:
            row = s.get(MessageRow, record_id)
            return row_to_record(row) if row is not None else None

    def _count(self, cutoff: Optional[datetime]) -> int:
        stmt = select(func.count()).select_from(MessageRow)
        if cutoff is not None:
            stmt = stmt.where(*self._stale_filter(cutoff))
        with self.db.session() as s:
            return int(s.scalar(stmt) or 0)

    # ---- async API ------------------------------------------------------------

    async def fetch_stale_records(self, cutoff: datetime, limit: Optional[int] = None) -> List[RagRecord]:
        """Never-embedded or embedded before `cutoff`, excluding system and blank records, oldest first."""
        records = await asyncio.to_thread(self._fetch_stale, cutoff, limit)
        self.logger.debug("Found %d stale records (cutoff=%s)", len(records), cutoff.isoformat())
        return records

    async def mark_embedded(self, ids: Sequence[str], at: Optional[datetime] = None) -> int:
        return await asyncio.to_thread(self._mark_embedded, list(ids), at or utc_now())

    async def insert_records(self, records: Sequence[RagRecord]) -> int:
        count = await asyncio.to_thread(self._insert, list(records))
        self.logger.info("Stored %d records", count)
        return count

    async def get_record(self, record_id: str) -> Optional[RagRecord]:
        return await asyncio.to_thread(self._get, record_id)

    async def count_records(self) -> int:
        return await asyncio.to_thread(self._count, None)

    async def count_pending(self, cutoff: datetime) -> int:
        return await asyncio.to_thread(self._count, cutoff)
