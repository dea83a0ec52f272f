from __future__ import annotations

import re
from typing import List

PARAGRAPH_BREAK_RE = re.compile(r"[\r\n]+")


def segment_paragraphs(raw: str) -> List[str]:
    """Split raw text into trimmed, non-empty paragraphs in document order."""
    paragraphs: List[str] = []
    for piece in PARAGRAPH_BREAK_RE.split(raw):
        trimmed = piece.strip()
        if trimmed:
            paragraphs.append(trimmed)
    return paragraphs
