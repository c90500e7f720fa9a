# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: dependencies.py
# -----------------------------------------------------------------------------
import hmac

from fastapi import Depends, Header, HTTPException, Request

from api.AppContainer import AppContainer
from config.Config import Config
from importer.DocumentImporter import DocumentImporter
from scheduler.ReembeddingScheduler import ReembeddingScheduler
from services.RagChatService import RagChatService
from services.RagHealthService import RagHealthService
from services.RagQueryService import RagQueryService
from services.RagStatsService import RagStatsService
from store.MonitoringStore import MonitoringStore


def get_container(request: Request) -> AppContainer:
    # started in the app lifespan
    return request.app.state.container


def get_cfg(container: AppContainer = Depends(get_container)) -> Config:
    return container.cfg


def get_health_service(container: AppContainer = Depends(get_container)) -> RagHealthService:
    return container.health_service


def get_stats_service(container: AppContainer = Depends(get_container)) -> RagStatsService:
    return container.stats_service


def get_query_service(container: AppContainer = Depends(get_container)) -> RagQueryService:
    return container.query_service


def get_chat_service(container: AppContainer = Depends(get_container)) -> RagChatService:
    return container.chat_service


def get_scheduler(container: AppContainer = Depends(get_container)) -> ReembeddingScheduler:
    return container.scheduler


def get_importer(container: AppContainer = Depends(get_container)) -> DocumentImporter:
    return container.importer


def get_monitoring_store(container: AppContainer = Depends(get_container)) -> MonitoringStore:
    return container.monitoring_store


def require_cron_secret(
        authorization: str | None = Header(default=None),
        cfg: Config = Depends(get_cfg),
) -> None:
    expected = f"Bearer {cfg.cron_secret}"
    if not cfg.cron_secret or not hmac.compare_digest((authorization or "").encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Unauthorized")
