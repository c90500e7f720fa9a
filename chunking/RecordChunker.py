# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-03
# Description: RecordChunker
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, List, Sequence

from chunking.RagSegment import RagSegment
from record.RagRecord import RagRecord
from utility.logging_utils import get_class_logger

DEFAULT_SEPARATORS = ("\n\n", "\n", " ", "")


class RecordChunker:
    """
    Splits records into overlap-preserving RagSegment objects.

    Short records (below `threshold` characters) map to exactly one segment that
    carries the record id. Longer records are split recursively on a priority list
    of separators (paragraph, line, word, character) and the pieces are merged
    back into windows of at most `chunk_size` characters with `overlap` characters
    carried across neighbours.

    The chunker is pure: identical records always produce identical segments.
    """

    def __init__(
        self,
        *,
        threshold: int = 1000,
        chunk_size: int = 1000,
        overlap: int = 200,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
        logger: logging.Logger | None = None,
    ):
        self.threshold = threshold
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.separators = list(separators)
        self.logger = logger or get_class_logger(self.__class__)

        # guard against bad config that can cause infinite loops
        if self.overlap >= self.chunk_size:
            raise ValueError(
                f"overlap ({self.overlap}) must be < chunk_size ({self.chunk_size})"
            )
        if not self.separators or self.separators[-1] != "":
            raise ValueError("separators must end with the character boundary ''")

    def chunk(self, record: RagRecord) -> List[RagSegment]:
        content = record.content or ""

        if len(content) < self.threshold:
            return [self._segment(record, record.id, content, 0, 1)]

        pieces = self._split_text(content, self.separators)
        if not pieces:
            # whitespace-only content still has to produce a segment
            pieces = [content]

        total = len(pieces)
        segments = [
            self._segment(record, f"{record.id}_chunk_{i}", piece, i, total)
            for i, piece in enumerate(pieces)
        ]

        self.logger.debug(
            "Chunked record_id=%s chars=%d into %d segments (size=%d overlap=%d)",
            record.id,
            len(content),
            total,
            self.chunk_size,
            self.overlap,
        )
        return segments

    def chunk_many(self, records: Sequence[RagRecord]) -> List[RagSegment]:
        out: List[RagSegment] = []
        for record in records:
            out.extend(self.chunk(record))
        return out

    @staticmethod
    def _segment(
        record: RagRecord, segment_id: str, content: str, index: int, total: int
    ) -> RagSegment:
        metadata: Dict[str, Any] = dict(record.source_metadata or {})
        metadata.update(
            {
                "chunk_index": index,
                "total_chunks": total,
                "original_record_id": record.id,
            }
        )
        return RagSegment(id=segment_id, content=content, metadata=metadata)

    def _split_text(self, text: str, separators: List[str]) -> List[str]:
        # pick the first separator present in the text; "" always matches
        separator = separators[-1]
        remaining: List[str] = []
        for i, sep in enumerate(separators):
            if sep == "":
                separator = sep
                break
            if sep in text:
                separator = sep
                remaining = separators[i + 1:]
                break

        splits = text.split(separator) if separator else list(text)

        final: List[str] = []
        small: List[str] = []
        for piece in splits:
            if len(piece) < self.chunk_size:
                small.append(piece)
                continue

            if small:
                final.extend(self._merge(small, separator))
                small = []
            if remaining:
                final.extend(self._split_text(piece, remaining))
            else:
                final.append(piece)

        if small:
            final.extend(self._merge(small, separator))
        return final

    def _merge(self, splits: List[str], separator: str) -> List[str]:
        sep_len = len(separator)
        docs: List[str] = []
        window: List[str] = []
        total = 0

        for piece in splits:
            piece_len = len(piece)
            joined_len = total + piece_len + (sep_len if window else 0)

            if joined_len > self.chunk_size and window:
                doc = separator.join(window).strip()
                if doc:
                    docs.append(doc)

                # drop from the front until only the overlap tail remains
                # and the next piece fits
                while total > self.overlap or (
                    total + piece_len + (sep_len if window else 0) > self.chunk_size
                    and total > 0
                ):
                    total -= len(window[0]) + (sep_len if len(window) > 1 else 0)
                    window.pop(0)

            window.append(piece)
            total += piece_len + (sep_len if len(window) > 1 else 0)

        doc = separator.join(window).strip()
        if doc:
            docs.append(doc)
        return docs
