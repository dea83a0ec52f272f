from __future__ import annotations

import asyncio
from typing import Iterable

from hanzi_reader.errors import LookupFailedError
from hanzi_reader.lexicon import AsyncLexiconProvider, LexiconProvider
from hanzi_reader.models import LexiconEntry, Paragraph


class EchoLexicon(LexiconProvider):
    """Deterministic lexicon: pinyin and gloss derived from the unit itself."""

    def __init__(self, failing: Iterable[str] = (), supports_spans: bool = False) -> None:
        self.failing = set(failing)
        self.supports_spans = supports_spans
        self.calls: list[str] = []

    def lookup(self, unit: str) -> LexiconEntry:
        self.calls.append(unit)
        if unit in self.failing:
            raise LookupFailedError(unit, "not in test table")
        return LexiconEntry(pinyin=f"py:{unit}", translation=f"tr:{unit}")


class SlowAsyncLexicon(AsyncLexiconProvider):
    """Async lexicon whose latency depends on the unit, to scramble completion order."""

    def __init__(self, delays: dict[str, float] | None = None) -> None:
        self.delays = delays or {}

    async def lookup(self, unit: str) -> LexiconEntry:
        await asyncio.sleep(self.delays.get(unit, 0.0))
        return LexiconEntry(pinyin=f"py:{unit}", translation=f"tr:{unit}")


def joined(paragraph: Paragraph) -> str:
    return "".join(token.text for token in paragraph.tokens)
