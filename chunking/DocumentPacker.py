# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-06
# Description: DocumentPacker
# -----------------------------------------------------------------------------
import re
from typing import List

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


class DocumentPacker:
    """
    Greedy sentence packer for imported documents.

    Sentences are appended to the current part until the next one would exceed
    `max_chars`; a single sentence longer than `max_chars` is broken on words.
    """

    def __init__(self, max_chars: int = 4000):
        if max_chars < 1:
            raise ValueError(f"max_chars must be >= 1, got {max_chars}")
        self.max_chars = max_chars

    def pack(self, text: str) -> List[str]:
        parts: List[str] = []
        current = ""

        for sentence in SENTENCE_BOUNDARY.split(text.strip()):
            if not sentence:
                continue

            candidate = f"{current} {sentence}" if current else sentence
            if len(candidate) <= self.max_chars:
                current = candidate
                continue

            if current:
                parts.append(current.strip())
                current = ""

            if len(sentence) <= self.max_chars:
                current = sentence
                continue

            # sentence alone is too long: fall back to words
            word_part = ""
            for word in self._bounded_words(sentence):
                candidate = f"{word_part} {word}" if word_part else word
                if len(candidate) > self.max_chars and word_part:
                    parts.append(word_part)
                    word_part = word
                else:
                    word_part = candidate
            current = word_part

        if current.strip():
            parts.append(current.strip())

        return parts

    def _bounded_words(self, sentence: str) -> List[str]:
        words: List[str] = []
        for word in sentence.split():
            while len(word) > self.max_chars:
                words.append(word[: self.max_chars])
                word = word[self.max_chars:]
            if word:
                words.append(word)
        return words

    @staticmethod
    def titles(base_title: str, count: int) -> List[str]:
        """Number part titles when a document yields more than one part."""
        if count <= 1:
            return [base_title] * count
        return [f"{base_title} (part {i}/{count})" for i in range(1, count + 1)]
