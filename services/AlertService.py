# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-08
# Description: AlertService
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from store.MonitoringStore import MonitoringStore
from utility.logging_utils import get_class_logger

ALERT_TYPES = ("error", "warning", "info")

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


class AlertService:
    """
    Raises operational alerts: always logged, persisted to system_alerts when a
    MonitoringStore is wired. A failure to persist is logged and does not
    interrupt the caller (the alert has already been logged).
    """

    def __init__(self, store: MonitoringStore | None = None, *, logger=None):
        self.store = store
        self.logger = logger or get_class_logger(self.__class__)

    async def raise_alert(
            self,
            alert_type: str,
            message: str,
            details: Dict[str, Any] | None = None,
            *,
            service: str = "re-embedding",
    ) -> Optional[int]:
        if alert_type not in ALERT_TYPES:
            raise ValueError(f"alert_type must be one of {ALERT_TYPES}, got {alert_type!r}")

        details = details or {}
        self.logger.log(
            _LEVELS[alert_type], "[ALERT:%s] %s: %s %s", service, alert_type.upper(), message, details
        )

        if self.store is None:
            return None

        try:
            return await self.store.insert_alert(alert_type, message, details, service)
        except SQLAlchemyError:
            self.logger.exception("Failed to persist alert %r for service %s", message, service)
            return None

    async def error(self, message: str, details: Dict[str, Any] | None = None, *, service: str = "re-embedding"):
        return await self.raise_alert("error", message, details, service=service)

    async def warning(self, message: str, details: Dict[str, Any] | None = None, *, service: str = "re-embedding"):
        return await self.raise_alert("warning", message, details, service=service)

    async def info(self, message: str, details: Dict[str, Any] | None = None, *, service: str = "re-embedding"):
        return await self.raise_alert("info", message, details, service=service)
