# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-05
# Updated: 2026-10-13
# Description: ChromaRagVectorIndex
# -----------------------------------------------------------------------------
import asyncio
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import chromadb
from chromadb import ClientAPI
from chromadb.api.models import Collection

from config.Config import Config
from embedding.EmbeddingRecord import EmbeddingRecord
from utility.logging_utils import get_class_logger
from vectorstore.RagVectorIndex import IndexEntry, IndexStats, ScoredMatch

_PRIMITIVES = (str, int, float, bool)


def sanitize_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    """
    Chroma only stores str/int/float/bool values. None is dropped, datetimes become
    ISO strings, anything else is stringified.
    """
    out: Dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, _PRIMITIVES):
            out[str(key)] = value
        elif isinstance(value, (datetime, date)):
            out[str(key)] = value.isoformat()
        else:
            out[str(key)] = str(value)
    return out


class ChromaRagVectorIndex:
    """
    Chroma collection (cosine space) behind the RagVectorIndex protocol.

    Client selection on connect():
      - CHROMA_API_KEY set -> CloudClient(tenant, database)
      - CHROMA_HOST set    -> HttpClient(host)
      - otherwise          -> PersistentClient(CHROMA_PATH)
    An already-built client (e.g. EphemeralClient in tests) can be injected.

    chromadb is synchronous, so every call runs in a worker thread.
    """

    def __init__(
            self,
            cfg: Config | None = None,
            *,
            client: ClientAPI | None = None,
            collection_name: Optional[str] = None,
            logger=None,
    ):
        if cfg is None and client is None:
            raise ValueError("ChromaRagVectorIndex needs either a Config or an explicit client")

        self.cfg = cfg
        self.client = client
        self.collection_name = collection_name or (cfg.chroma_collection if cfg else "chat-rag-index")
        self.logger = logger or get_class_logger(self.__class__)
        self._collection: Collection | None = None

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            raise RuntimeError("ChromaRagVectorIndex.connect() has not been awaited")
        return self._collection

    def _build_client(self) -> ClientAPI:
        cfg = self.cfg
        if cfg.chroma_api_key:
            self.logger.info(
                "Initialising Chroma Cloud client (tenant=%s, database=%s)",
                cfg.chroma_tenant,
                cfg.chroma_database,
            )
            return chromadb.CloudClient(
                tenant=cfg.chroma_tenant,
                database=cfg.chroma_database,
                api_key=cfg.chroma_api_key,
            )
        if cfg.chroma_host:
            host, _, port = cfg.chroma_host.partition(":")
            self.logger.info("Initialising Chroma HTTP client (host=%s)", cfg.chroma_host)
            return chromadb.HttpClient(host=host, port=int(port or 8000))

        self.logger.info("Initialising local persistent Chroma client (path=%s)", cfg.chroma_path)
        return chromadb.PersistentClient(path=cfg.chroma_path)

    def _connect_sync(self) -> None:
        if self.client is None:
            self.client = self._build_client()
        self._collection = self.client.get_or_create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    async def connect(self) -> None:
        if self._collection is not None:
            return
        await asyncio.to_thread(self._connect_sync)
        self.logger.info("Chroma collection ready: '%s'", self.collection_name)

    async def test_connection(self) -> bool:
        """Simple health check: can we talk to Chroma and our collection?"""
        try:
            await asyncio.to_thread(self.collection.count)
            return True
        except Exception as e:
            self.logger.error("Chroma connection failed: %s", e)
            return False

    async def upsert(self, records: Sequence[EmbeddingRecord]) -> None:
        if not records:
            return

        ids: List[str] = []
        documents: List[str] = []
        embeddings: List[List[float]] = []
        metadatas: List[Dict[str, Any]] = []

        for rec in records:
            ids.append(rec.segment_id)
            documents.append(rec.content)
            embeddings.append(rec.vector_list())
            metadatas.append(sanitize_metadata(rec.metadata))

        await asyncio.to_thread(
            self.collection.upsert,
            ids=ids,
            documents=documents,
            embeddings=embeddings,
            metadatas=metadatas,
        )
        self.logger.debug(
            "Upserted %d entries into Chroma collection '%s'", len(ids), self.collection_name
        )

    async def fetch(self, ids: Sequence[str]) -> Dict[str, IndexEntry]:
        if not ids:
            return {}

        res = await asyncio.to_thread(
            self.collection.get,
            ids=list(ids),
            include=["documents", "metadatas"],
        )
        found_ids = res.get("ids") or []
        documents = res.get("documents") or [None] * len(found_ids)
        metadatas = res.get("metadatas") or [None] * len(found_ids)

        return {
            _id: IndexEntry(id=_id, content=doc or "", metadata=dict(meta or {}))
            for _id, doc, meta in zip(found_ids, documents, metadatas)
        }

    async def query(
            self,
            vector: Sequence[float],
            top_k: int,
            where: Dict[str, Any] | None = None,
    ) -> List[ScoredMatch]:
        count = await asyncio.to_thread(self.collection.count)
        if count == 0:
            self.logger.info("Chroma collection '%s' is empty; no matches", self.collection_name)
            return []

        query_kwargs: Dict[str, Any] = {
            "query_embeddings": [list(map(float, vector))],
            "n_results": min(top_k, count),
            "include": ["documents", "metadatas", "distances"],
        }
        if where:
            self.logger.debug("Applying metadata filter (where=%s)", where)
            query_kwargs["where"] = where

        res = await asyncio.to_thread(self.collection.query, **query_kwargs)

        # Chroma returns one list per query embedding
        ids = (res.get("ids") or [[]])[0]
        docs = (res.get("documents") or [[None] * len(ids)])[0]
        metas = (res.get("metadatas") or [[None] * len(ids)])[0]
        dists = (res.get("distances") or [[None] * len(ids)])[0]

        matches = [
            ScoredMatch(
                id=_id,
                score=1.0 - float(dist) if dist is not None else 0.0,
                content=doc or "",
                metadata=dict(meta or {}),
            )
            for _id, doc, meta, dist in zip(ids, docs, metas, dists)
        ]
        self.logger.info(
            "Chroma search complete: returned %d results (requested %d)", len(matches), top_k
        )
        return matches

    def _stats_sync(self) -> IndexStats:
        count = self.collection.count()
        dimension = None
        if count:
            peek = self.collection.get(limit=1, include=["embeddings"])
            embeddings = peek.get("embeddings")
            if embeddings is not None and len(embeddings):
                dimension = len(embeddings[0])
        return IndexStats(total_vector_count=count, dimension=dimension, name=self.collection_name)

    async def describe_stats(self) -> IndexStats:
        return await asyncio.to_thread(self._stats_sync)

    async def delete(self, ids: Sequence[str]) -> int:
        # Chroma requires unique ids; preserve order while de-duplicating
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return 0
        await asyncio.to_thread(self.collection.delete, ids=unique_ids)
        self.logger.info(
            "Deleted %d entries from Chroma collection '%s'", len(unique_ids), self.collection_name
        )
        return len(unique_ids)

    async def ids_for_record(self, record_id: str) -> List[str]:
        res = await asyncio.to_thread(
            self.collection.get,
            where={"original_record_id": {"$eq": record_id}},
            include=[],
        )
        return list(res.get("ids") or [])
