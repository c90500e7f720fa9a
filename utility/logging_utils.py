# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-02
# Updated: 2026-10-16
# Description: logging_utils.py
# -----------------------------------------------------------------------------
"""
Logger factory for the pipeline.

Every component logs under the `chat_rag` tree:

    chat_rag.scheduler.ReembeddingScheduler.ReembeddingScheduler
    chat_rag.vectorstore.VectorSynchronizer.VectorSynchronizer

Console output is coloured (colorlog). Scheduler runs and alerts also matter
after the fact, so a rotating file handler is attached unless RAG_LOG_TO_FILE=0.
"""
import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

BASE_LOGGER_NAME = "chat_rag"

CONSOLE_FORMAT = (
    "%(log_color)s%(asctime)s [%(levelname)s] "
    "%(name)s:%(lineno)d:%(reset)s %(message_log_color)s%(message)s"
)
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLOURS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}
MESSAGE_COLOURS = {
    "INFO": "white",
    "WARNING": "yellow",
    "ERROR": "light_red",
    "CRITICAL": "red",
}


@dataclass(frozen=True)
class LogSettings:
    level: str = "INFO"
    to_file: bool = True
    file: str = "./logs/chat_rag.log"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5

    @classmethod
    def from_env(cls) -> "LogSettings":
        return cls(
            level=os.getenv("RAG_LOG_LEVEL", "INFO").upper(),
            to_file=os.getenv("RAG_LOG_TO_FILE", "1").lower() in ("1", "true", "yes", "y"),
            file=os.getenv("RAG_LOG_FILE", "./logs/chat_rag.log"),
            max_bytes=int(os.getenv("RAG_LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            backup_count=int(os.getenv("RAG_LOG_BACKUP_COUNT", "5")),
        )


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            fmt=CONSOLE_FORMAT,
            datefmt=DATE_FORMAT,
            log_colors=LEVEL_COLOURS,
            secondary_log_colors={"message": MESSAGE_COLOURS},
            style="%",
        )
    )
    return handler


def _file_handler(settings: LogSettings) -> logging.Handler:
    path = Path(settings.file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _configured(full_name: str) -> logging.Logger:
    logger = logging.getLogger(full_name)
    if logger.handlers:
        return logger

    settings = LogSettings.from_env()
    logger.addHandler(_console_handler())
    if settings.to_file:
        logger.addHandler(_file_handler(settings))

    logger.setLevel(getattr(logging, settings.level, logging.INFO))
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger without a class component, e.g. chat_rag.cli."""
    return _configured(f"{BASE_LOGGER_NAME}.{name}" if name else BASE_LOGGER_NAME)


def get_class_logger(cls: type) -> logging.Logger:
    module = getattr(cls, "__module__", "unknown_module")
    classname = getattr(cls, "__name__", "UnknownClass")
    return _configured(f"{BASE_LOGGER_NAME}.{module}.{classname}")
