# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-07
# Description: db.py
# -----------------------------------------------------------------------------
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from utility.logging_utils import get_class_logger

Base = declarative_base()


def utc_now() -> datetime:
    """Naive UTC timestamp (what SQLite DateTime columns store)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Database:
    """Engine + session factory for the source-of-truth store."""

    def __init__(self, url: str, *, echo: bool = False, logger=None):
        self.url = url
        self.logger = logger or get_class_logger(self.__class__)

        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False  # sessions are used from worker threads
            self._ensure_sqlite_dir(url)

        self.engine = create_engine(url, connect_args=connect_args, echo=echo)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    @staticmethod
    def _ensure_sqlite_dir(url: str) -> None:
        path = url.split("///", 1)[-1]
        if path and path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    def create_all(self) -> None:
        """Create all tables. Call once at startup."""
        # Import models so Base.metadata knows about them
        from store import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)
        self.logger.info("Database tables ready (%s)", self.url.split("@")[-1])

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Transactional scope: commit on success, rollback on error."""
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
