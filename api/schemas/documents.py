# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: documents.py
# -----------------------------------------------------------------------------
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImportDocument(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    channel_id: Optional[str] = None


class ImportDocumentsRequest(BaseModel):
    documents: List[ImportDocument] = Field(..., min_length=1)


class ImportSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    converted_pdfs: List[str] = Field(default_factory=list, alias="convertedPdfs")
    failed_pdfs: Dict[str, str] = Field(default_factory=dict, alias="failedPdfs")
    imported_documents: List[str] = Field(default_factory=list, alias="importedDocuments")
    failed_documents: Dict[str, str] = Field(default_factory=dict, alias="failedDocuments")
    parts_imported: int = Field(0, alias="partsImported")
    parts_embedded: int = Field(0, alias="partsEmbedded")
    failed_parts: Dict[str, str] = Field(default_factory=dict, alias="failedParts")
