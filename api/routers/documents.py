# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: documents.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_importer
from api.schemas.documents import ImportDocumentsRequest, ImportSummaryResponse
from importer.DocumentImporter import DocumentImporter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/import", response_model=ImportSummaryResponse)
async def import_documents(
        req: ImportDocumentsRequest,
        importer: DocumentImporter = Depends(get_importer),
) -> ImportSummaryResponse:
    logger.info("POST /documents/import (start) documents=%d", len(req.documents))
    summary = await importer.import_payloads([d.model_dump() for d in req.documents])
    logger.info("POST /documents/import (done) imported=%d", len(summary.imported_documents))
    return ImportSummaryResponse(**summary.to_dict())


@router.post("/import-directory", response_model=ImportSummaryResponse)
async def import_directory(importer: DocumentImporter = Depends(get_importer)) -> ImportSummaryResponse:
    logger.info("POST /documents/import-directory (start) dir=%s", importer.documents_dir)
    summary = await importer.import_documents()
    return ImportSummaryResponse(**summary.to_dict())
