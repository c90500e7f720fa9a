# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: main.py
# -----------------------------------------------------------------------------
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.AppContainer import AppContainer
from api.routers import alerts, chat, cron, documents, health, query, stats
from errors.RagErrors import (
    DataError,
    EmbeddingError,
    RagPipelineError,
    VectorIndexError,
    VerificationError,
)

logger = logging.getLogger(__name__)

# provider / index failures are upstream problems
_UPSTREAM_ERRORS = (EmbeddingError, VectorIndexError, VerificationError, DataError)


def create_app(container: AppContainer | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        c = container or AppContainer.from_config()
        await c.start()
        app.state.container = c
        try:
            yield
        finally:
            await c.stop()

    app = FastAPI(title="Chat RAG API", lifespan=lifespan)

    @app.exception_handler(RagPipelineError)
    async def rag_error_handler(request: Request, exc: RagPipelineError) -> JSONResponse:
        if isinstance(exc, ValueError):
            status = 400
        elif isinstance(exc, _UPSTREAM_ERRORS):
            status = 502
        else:
            status = 500
        logger.error("%s %s -> %d: %s", request.method, request.url.path, status, exc)
        return JSONResponse(status_code=status, content={"success": False, "error": str(exc)})

    app.include_router(health.router)
    app.include_router(query.router)
    app.include_router(chat.router)
    app.include_router(cron.router)
    app.include_router(stats.router)
    app.include_router(documents.router)
    app.include_router(alerts.router)
    return app


app = create_app()
