# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-06
# Description: LangDetectDetector
# -----------------------------------------------------------------------------
from typing import Optional, Tuple

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

# langdetect is randomised; seed it so document ids/metadata stay reproducible
DetectorFactory.seed = 0


class LangDetectDetector:
    """Tags imported documents with a best-guess language code."""

    def __init__(self, min_chars: int = 20):
        self.min_chars = min_chars

    def detect(self, text: str) -> Tuple[str, float, Optional[str]]:
        if not text or len(text.strip()) < self.min_chars:
            return "und", 0.0, None

        try:
            detections = detect_langs(text)
        except LangDetectException:
            return "und", 0.0, None

        if not detections:
            return "und", 0.0, None

        top = detections[0]  # most probable language from detections list
        script = "Latn" if top.lang in ("en", "fr", "de", "es", "it") else None
        return top.lang, top.prob, script
