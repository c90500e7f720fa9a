# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-07
# Description: models.py
# -----------------------------------------------------------------------------
"""
ORM rows for the source-of-truth store.

    messages       -> records the pipeline reads (only last_embedded_at is written back)
    cron_status    -> one row per scheduled job, mutated only by the scheduler
    system_alerts  -> append-only alert log (acknowledgement aside)
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Index, Integer, String, Text

from store.db import Base, utc_now


class MessageRow(Base):
    __tablename__ = "messages"

    id = Column(String(64), primary_key=True)
    content = Column(Text, nullable=False, default="")
    type = Column(String(30), nullable=False, default="message", index=True)  # message | document | system

    sender_id = Column(String(64), nullable=True)
    sender = Column(String(255), nullable=True)
    channel_id = Column(String(64), nullable=True, index=True)
    title = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    last_embedded_at = Column(DateTime, nullable=True, index=True)  # NULL = never embedded

    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)

    __table_args__ = (Index("ix_messages_stale_scan", "last_embedded_at", "created_at"),)


class CronStatusRow(Base):
    __tablename__ = "cron_status"

    job_name = Column(String(100), primary_key=True)
    last_run_time = Column(DateTime, nullable=True)
    last_run_status = Column(String(20), nullable=True)  # success | failed
    consecutive_failures = Column(Integer, default=0, nullable=False)
    last_processed_count = Column(Integer, default=0, nullable=False)
    avg_processing_time = Column(Float, nullable=True)  # ms, EMA
    health = Column(String(20), default="healthy", nullable=False)  # healthy | warning | critical
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)


class SystemAlertRow(Base):
    __tablename__ = "system_alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(20), nullable=False, index=True)  # error | warning | info
    message = Column(Text, nullable=False)
    details = Column(JSON, nullable=True)
    service = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)

    acknowledged = Column(Boolean, default=False, nullable=False)
    acknowledged_at = Column(DateTime, nullable=True)
    acknowledged_by = Column(String(255), nullable=True)
