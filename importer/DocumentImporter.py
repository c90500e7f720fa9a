# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-11
# Updated: 2026-10-15
# Description: DocumentImporter
# -----------------------------------------------------------------------------
"""
Imports reference documents into the message store and the vector index.

    <documents_dir>/pdf/*.pdf   -> converted to <documents_dir>/<name>.txt
    <documents_dir>/*.txt|*.md  -> packed into parts -> records -> embedded

    pdf/processed/  archived PDFs        pdf/error/  quarantined PDFs (+ .error.txt)
    processed/      imported documents   error/      quarantined documents (+ .error.txt)

A bad input is quarantined and the import carries on. Run with:

    python -m importer.DocumentImporter
"""
import asyncio
import hashlib
import json
import time
import traceback
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from chunking.DocumentPacker import DocumentPacker
from chunking.LangDetectDetector import LangDetectDetector
from errors.RagErrors import DocumentImportError
from extractor.PdfTextExtractor import MIN_TEXT_CHARS, PdfTextExtractor, normalize_text
from record.RagRecord import RagRecord
from services.RecordEmbeddingPipeline import RecordEmbeddingPipeline
from store.RecordStore import RecordStore
from store.db import utc_now
from utility.logging_utils import get_class_logger, get_logger

DOCUMENT_SUFFIXES = (".txt", ".md")


@dataclass
class ConversionResult:
    file_name: str
    success: bool
    char_count: int = 0
    error: Optional[str] = None


@dataclass
class ImportSummary:
    converted_pdfs: List[str] = field(default_factory=list)
    failed_pdfs: Dict[str, str] = field(default_factory=dict)
    imported_documents: List[str] = field(default_factory=list)
    failed_documents: Dict[str, str] = field(default_factory=dict)
    parts_imported: int = 0
    parts_embedded: int = 0
    failed_parts: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed_documents and not self.failed_pdfs

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "convertedPdfs": list(self.converted_pdfs),
            "failedPdfs": dict(self.failed_pdfs),
            "importedDocuments": list(self.imported_documents),
            "failedDocuments": dict(self.failed_documents),
            "partsImported": self.parts_imported,
            "partsEmbedded": self.parts_embedded,
            "failedParts": dict(self.failed_parts),
        }


def document_record_id(source: str, part_index: int) -> str:
    """Same source + part always maps to the same record id, so re-imports overwrite."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"chat-rag-document:{source}:{part_index}"))


class DocumentImporter:
    def __init__(
            self,
            *,
            record_store: RecordStore,
            pipeline: RecordEmbeddingPipeline,
            documents_dir: str | Path = "./data/documents",
            channel_id: str = "general",
            packer: DocumentPacker | None = None,
            extractor: PdfTextExtractor | None = None,
            lang_detector: LangDetectDetector | None = None,
            batch_size: int = 5,
            batch_delay: float = 0.5,
            document_delay: float = 1.0,
            logger=None,
    ):
        self.record_store = record_store
        self.pipeline = pipeline
        self.documents_dir = Path(documents_dir)
        self.channel_id = channel_id
        self.packer = packer or DocumentPacker()
        self.extractor = extractor or PdfTextExtractor()
        self.lang_detector = lang_detector or LangDetectDetector()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.document_delay = document_delay
        self.logger = logger or get_class_logger(self.__class__)

    @property
    def pdf_dir(self) -> Path:
        return self.documents_dir / "pdf"

    # ---- file moves -----------------------------------------------------------

    @staticmethod
    def _stamped(target_dir: Path, name: str) -> Path:
        target_dir.mkdir(parents=True, exist_ok=True)
        return target_dir / f"{int(time.time() * 1000)}_{name}"

    def _archive(self, path: Path, target_dir: Path) -> Path:
        dest = self._stamped(target_dir, path.name)
        path.rename(dest)
        return dest

    def _quarantine(self, path: Path, target_dir: Path, error: BaseException) -> Path:
        dest = self._archive(path, target_dir)
        details = getattr(error, "details", {}) or {}
        info = "\n".join(
            [
                f"Error importing {path.name}: {error}",
                f"Error type: {type(error).__name__}",
                f"Timestamp: {utc_now().isoformat()}",
                f"Details: {json.dumps(details, default=str)}",
                "",
                "Traceback:",
                "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            ]
        )
        dest.with_name(dest.name + ".error.txt").write_text(info, encoding="utf-8")
        self.logger.warning("Quarantined %s -> %s: %s", path.name, dest, error)
        return dest

    # ---- PDF conversion -------------------------------------------------------

    def _convert_one(self, pdf_path: Path) -> ConversionResult:
        try:
            data = pdf_path.read_bytes()
        except OSError as e:
            raise DocumentImportError(f"Could not read PDF: {e}", file_name=pdf_path.name) from e
        if not data:
            raise DocumentImportError("PDF file is empty (0 bytes)", file_name=pdf_path.name)

        text = self.extractor.extract_text(data, file_name=pdf_path.name)
        (self.documents_dir / f"{pdf_path.stem}.txt").write_text(text, encoding="utf-8")
        self._archive(pdf_path, self.pdf_dir / "processed")

        self.logger.info("Converted %s to text (%d chars)", pdf_path.name, len(text))
        return ConversionResult(file_name=pdf_path.name, success=True, char_count=len(text))

    def convert_pdfs(self) -> List[ConversionResult]:
        if not self.pdf_dir.exists():
            self.logger.warning("PDF directory not found at %s, creating it", self.pdf_dir)
            self.pdf_dir.mkdir(parents=True, exist_ok=True)
            return []

        pdfs = sorted(p for p in self.pdf_dir.iterdir() if p.is_file() and p.suffix.lower() == ".pdf")
        if not pdfs:
            self.logger.info("No PDF files found for conversion")
            return []

        self.logger.info("Found %d PDF files to convert", len(pdfs))
        results: List[ConversionResult] = []
        for pdf_path in pdfs:
            try:
                results.append(self._convert_one(pdf_path))
            except DocumentImportError as e:
                self._quarantine(pdf_path, self.pdf_dir / "error", e)
                results.append(ConversionResult(file_name=pdf_path.name, success=False, error=str(e)))

        ok = sum(1 for r in results if r.success)
        self.logger.info("PDF conversion summary: total=%d successful=%d failed=%d", len(results), ok, len(results) - ok)
        return results

    # ---- document -> records --------------------------------------------------

    def build_records(self, title: str, text: str, *, source: str) -> List[RagRecord]:
        content = normalize_text(text)
        if len(content) < MIN_TEXT_CHARS:
            raise DocumentImportError(
                "Document has no usable text", file_name=source, details={"chars": len(content)}
            )

        parts = self.packer.pack(content)
        titles = self.packer.titles(title, len(parts))
        lang, lang_prob, _ = self.lang_detector.detect(content[:2000])
        created_at = utc_now().isoformat()

        return [
            RagRecord(
                id=document_record_id(source, i),
                content=part,
                source_metadata={
                    "type": "document",
                    "sender": "system",
                    "title": part_title,
                    "channel_id": self.channel_id,
                    "created_at": created_at,
                    "lang": lang,
                    "lang_prob": round(float(lang_prob), 4),
                    "source_file": source,
                    "part_index": i,
                    "total_parts": len(parts),
                },
            )
            for i, (part, part_title) in enumerate(zip(parts, titles))
        ]

    def _read_document(self, path: Path) -> List[RagRecord]:
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DocumentImportError(f"Document is not valid UTF-8: {e}", file_name=path.name) from e
        except OSError as e:
            raise DocumentImportError(f"Could not read document: {e}", file_name=path.name) from e
        return self.build_records(path.stem, text, source=path.name)

    async def _store_and_embed(self, records: Sequence[RagRecord], summary: ImportSummary, label: str) -> None:
        await self.record_store.insert_records(records)
        summary.parts_imported += len(records)

        batches = [records[i:i + self.batch_size] for i in range(0, len(records), self.batch_size)]
        for n, batch in enumerate(batches, start=1):
            self.logger.info("Embedding batch %d/%d for %s", n, len(batches), label)
            result = await self.pipeline.embed_records(batch)
            summary.parts_embedded += len(result.processed_ids)
            summary.failed_parts.update(result.failed)
            if n < len(batches) and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

    # ---- public API -----------------------------------------------------------

    async def import_documents(self) -> ImportSummary:
        summary = ImportSummary()

        for conv in await asyncio.to_thread(self.convert_pdfs):
            if conv.success:
                summary.converted_pdfs.append(conv.file_name)
            else:
                summary.failed_pdfs[conv.file_name] = conv.error or "unknown error"

        self.documents_dir.mkdir(parents=True, exist_ok=True)
        documents = sorted(
            p for p in self.documents_dir.iterdir() if p.is_file() and p.suffix.lower() in DOCUMENT_SUFFIXES
        )
        if not documents:
            self.logger.info("No documents found for import in %s", self.documents_dir)
            return summary

        self.logger.info("Found %d documents to import", len(documents))
        for i, path in enumerate(documents, start=1):
            self.logger.info("Processing document %d/%d: %s", i, len(documents), path.name)
            try:
                records = self._read_document(path)
            except DocumentImportError as e:
                self._quarantine(path, self.documents_dir / "error", e)
                summary.failed_documents[path.name] = str(e)
                continue

            await self._store_and_embed(records, summary, path.name)
            self._archive(path, self.documents_dir / "processed")
            summary.imported_documents.append(path.name)
            self.logger.info("Imported %s (%d parts)", path.name, len(records))

            if i < len(documents) and self.document_delay > 0:
                await asyncio.sleep(self.document_delay)

        self.logger.info(
            "Import complete: %d documents imported, %d failed, %d/%d parts embedded",
            len(summary.imported_documents),
            len(summary.failed_documents),
            summary.parts_embedded,
            summary.parts_imported,
        )
        return summary

    async def import_payloads(self, documents: Sequence[Dict[str, Any]]) -> ImportSummary:
        """Import JSON documents ({title, content, channel_id?}) posted to the API."""
        summary = ImportSummary()
        for n, doc in enumerate(documents, start=1):
            title = str(doc.get("title") or f"document-{n}")
            content = str(doc.get("content") or "")
            digest = hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]
            try:
                records = self.build_records(title, content, source=f"{title}:{digest}")
            except DocumentImportError as e:
                self.logger.warning("Skipping posted document %r: %s", title, e)
                summary.failed_documents[title] = str(e)
                continue

            if doc.get("channel_id"):
                for rec in records:
                    rec.source_metadata["channel_id"] = doc["channel_id"]

            await self._store_and_embed(records, summary, title)
            summary.imported_documents.append(title)
        return summary


async def _main() -> int:
    from api.AppContainer import AppContainer

    logger = get_logger(__name__)
    container = AppContainer.from_config()
    await container.start()
    try:
        summary = await container.importer.import_documents()
    finally:
        await container.stop()

    print(json.dumps(summary.to_dict(), indent=2))
    logger.info("Finished: success=%s", summary.success)
    return 0 if summary.success else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(_main()))
