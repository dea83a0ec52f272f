from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence

from ..errors import LookupFailedError
from ..llm.openai_client import GlossRequestMetadata, OpenAIGlossClient
from ..models import LexiconEntry
from .base import LexiconProvider, LookupResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You annotate Simplified Chinese for English-speaking learners.\n"
    "For every unit you are given (a single character or a chengyu), return:\n"
    "- its Hanyu Pinyin with tone marks, syllables separated by spaces;\n"
    "- a short English gloss (a few words, no full sentences).\n"
    "Punctuation and non-Chinese units keep themselves as pinyin and an empty gloss.\n"
    "Respond with a single JSON object only (no Markdown, no commentary)."
)

USER_PROMPT_TEMPLATE = (
    "Units: {count}\n"
    "Return a JSON object whose keys are exactly the units below and whose values "
    'are objects with the keys "pinyin" and "translation".\n'
    "-----\n"
    "{units}\n"
    "-----"
)


class OpenAILexicon(LexiconProvider):
    """Lexicon that glosses whole batches with one OpenAI request."""

    supports_spans = True

    def __init__(
        self,
        client: OpenAIGlossClient,
        *,
        system_prompt: str = SYSTEM_PROMPT,
        user_prompt_template: str = USER_PROMPT_TEMPLATE,
    ) -> None:
        self._client = client
        self._system_prompt = system_prompt
        self._user_prompt_template = user_prompt_template

    def lookup(self, unit: str) -> LexiconEntry:
        result = self.lookup_many([unit])[0]
        if isinstance(result, Exception):
            raise result
        return result

    def lookup_many(self, units: Sequence[str]) -> List[LookupResult]:
        if not units:
            return []
        user_prompt = self._user_prompt_template.format(
            count=len(units), units="\n".join(units)
        )
        metadata = GlossRequestMetadata(
            unit_count=len(units),
            span_count=sum(1 for unit in units if len(unit) > 1),
            sample="".join(units[:8]),
        )
        try:
            payload = self._client.request_json(
                system_prompt=self._system_prompt,
                user_prompt=user_prompt,
                metadata=metadata,
            )
        except RuntimeError as exc:
            logger.warning("OpenAI glossing failed for %s units: %s", len(units), exc)
            return [LookupFailedError(unit, str(exc)) for unit in units]

        parsed = _entries_from_payload(payload)
        results: List[LookupResult] = []
        for unit in units:
            entry = parsed.get(unit)
            if entry is None:
                results.append(LookupFailedError(unit, "missing from model output"))
            else:
                results.append(entry)
        return results


def _entries_from_payload(payload: Mapping[str, Any]) -> Dict[str, LexiconEntry]:
    entries: Dict[str, LexiconEntry] = {}
    for unit, value in payload.items():
        if not isinstance(value, Mapping):
            continue
        pinyin = value.get("pinyin")
        translation = value.get("translation")
        if not isinstance(pinyin, str) or not isinstance(translation, str):
            continue
        entries[str(unit)] = LexiconEntry(pinyin=pinyin, translation=translation)
    return entries
