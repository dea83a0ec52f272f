from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from pypinyin import Style, lazy_pinyin

from ..errors import LookupFailedError
from ..models import LexiconEntry
from .base import LexiconProvider, LookupResult

logger = logging.getLogger(__name__)

CEDICT_LINE_RE = re.compile(
    r"^(?P<trad>\S+)\s+(?P<simp>\S+)\s+\[(?P<pinyin>[^\]]+)\]\s+/(?P<defs>.+)/$"
)

# CC-CEDICT glosses that do not help a reader understand running text.
SKIPPED_DEFINITION_PREFIXES = ("CL:", "variant of", "old variant of", "surname ")

PINYIN_STYLES: Mapping[str, Style] = {
    "tone": Style.TONE,
    "tone3": Style.TONE3,
    "normal": Style.NORMAL,
}


def load_cedict(path: str | Path, max_definitions: int = 3) -> Dict[str, str]:
    """
    Load a CC-CEDICT file into a simplified-form -> gloss mapping.

    Parameters
    ----------
    path:
        Location of ``cedict_ts.u8`` (or any file in the same line format).
    max_definitions:
        How many definitions to keep per headword, joined with ``/``.
    """
    glossary: Dict[str, str] = {}
    with Path(path).open("r", encoding="utf-8", errors="replace") as handle:
        for line in handle:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            match = CEDICT_LINE_RE.match(line)
            if not match:
                continue
            simplified = match.group("simp")
            if simplified in glossary:
                continue
            definitions = [
                definition.strip()
                for definition in match.group("defs").split("/")
                if definition.strip()
                and not definition.strip().startswith(SKIPPED_DEFINITION_PREFIXES)
            ]
            if definitions:
                glossary[simplified] = "/".join(definitions[:max_definitions])
    logger.debug("Loaded %s CC-CEDICT headwords from %s", len(glossary), path)
    return glossary


class DictionaryLexicon(LexiconProvider):
    """Pinyin from pypinyin, glosses from a CC-CEDICT style glossary."""

    supports_spans = True

    def __init__(
        self,
        glossary: Mapping[str, str] | None = None,
        *,
        style: str = "tone",
        missing_translation: str = "",
    ) -> None:
        normalized = style.lower().strip()
        if normalized not in PINYIN_STYLES:
            raise ValueError(f"Unknown pinyin style '{style}'.")
        self._style = PINYIN_STYLES[normalized]
        self._glossary = dict(glossary or {})
        self._missing_translation = missing_translation

    @classmethod
    def from_cedict(
        cls, path: str | Path, *, style: str = "tone", missing_translation: str = ""
    ) -> DictionaryLexicon:
        return cls(
            load_cedict(path), style=style, missing_translation=missing_translation
        )

    def lookup(self, unit: str) -> LexiconEntry:
        if not unit:
            raise LookupFailedError(unit, "empty unit")
        syllables = lazy_pinyin(unit, style=self._style, errors="default")
        if not syllables:
            raise LookupFailedError(unit, "no pronunciation")
        return LexiconEntry(
            pinyin=" ".join(syllables),
            translation=self._glossary.get(unit, self._missing_translation),
        )

    def lookup_many(self, units: Sequence[str]) -> List[LookupResult]:
        results = super().lookup_many(units)
        missing = sum(1 for unit in units if unit not in self._glossary)
        if missing:
            logger.debug("%s of %s units have no gloss", missing, len(units))
        return results
