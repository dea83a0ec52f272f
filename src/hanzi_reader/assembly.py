"""
Token assembly for one paragraph.

Tokens are emitted in a single pass over character indices, one token per
character, so joining ``token.text`` always reproduces the paragraph. Idiom
spans only decide which tokens carry an ``IdiomGroup``; they never change
the unit of annotation, which stays the single character.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from .lexicon import AnyLexicon, LookupResult, lookup_entries
from .models import (
    IdiomAnnotation,
    IdiomGroup,
    IdiomPosition,
    IdiomSpan,
    LexiconEntry,
    Token,
)

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = LexiconEntry(pinyin="?", translation="?")


def build_tokens(
    text: str,
    spans: Sequence[IdiomSpan],
    entries: Sequence[LookupResult],
    placeholder: LexiconEntry = DEFAULT_PLACEHOLDER,
) -> List[Token]:
    """Combine accepted idiom spans with per-character lookup results.

    ``entries[i]`` is the lookup outcome for ``text[i]``; an exception in
    that slot falls back to ``placeholder`` for that token only.
    """
    if len(entries) != len(text):
        raise ValueError(
            f"Expected {len(text)} lookup results, received {len(entries)}."
        )
    spans_by_start = _index_spans(text, spans)

    tokens: List[Token] = []
    index = 0
    while index < len(text):
        found = spans_by_start.get(index)
        if found is None:
            entry = _entry_or_placeholder(entries[index], placeholder)
            tokens.append(
                Token(text=text[index], pinyin=entry.pinyin, translation=entry.translation)
            )
            index += 1
            continue

        group_id, span = found
        for offset in range(span.length):
            position = index + offset
            entry = _entry_or_placeholder(entries[position], placeholder)
            tokens.append(
                Token(
                    text=text[position],
                    pinyin=entry.pinyin,
                    translation=entry.translation,
                    idiom_group=IdiomGroup(
                        group_id=group_id,
                        idiom=span.idiom,
                        position=_position_in_idiom(offset, span.length),
                        offset=offset,
                    ),
                )
            )
        index += span.length
    return tokens


def build_idiom_annotations(
    spans: Sequence[IdiomSpan], entries: Mapping[str, LookupResult]
) -> List[IdiomAnnotation]:
    """Attach whole-idiom glosses; idioms whose lookup failed are left out."""
    annotations: List[IdiomAnnotation] = []
    for group_id, span in enumerate(spans):
        entry = entries.get(span.idiom)
        if not isinstance(entry, LexiconEntry):
            continue
        annotations.append(
            IdiomAnnotation(
                group_id=group_id,
                idiom=span.idiom,
                start=span.start,
                length=span.length,
                pinyin=entry.pinyin,
                translation=entry.translation,
            )
        )
    return annotations


def assemble(
    text: str,
    spans: Sequence[IdiomSpan],
    lexicon: AnyLexicon,
    placeholder: LexiconEntry | None = None,
) -> List[Token]:
    """Look up every character of ``text`` and build its tokens (blocking)."""
    units = list(dict.fromkeys(text))
    results = dict(zip(units, lookup_entries(lexicon, units)))
    return build_tokens(
        text,
        spans,
        [results[char] for char in text],
        placeholder or DEFAULT_PLACEHOLDER,
    )


def count_failures(entries: Sequence[LookupResult]) -> int:
    return sum(1 for entry in entries if isinstance(entry, Exception))


def _index_spans(
    text: str, spans: Sequence[IdiomSpan]
) -> Dict[int, Tuple[int, IdiomSpan]]:
    indexed: Dict[int, Tuple[int, IdiomSpan]] = {}
    previous_end = 0
    for group_id, span in enumerate(spans):
        if span.length <= 0 or span.start < previous_end or span.end > len(text):
            raise ValueError(f"Idiom spans must be sorted and non-overlapping: {span}")
        if text[span.start : span.end] != span.idiom:
            raise ValueError(f"Span {span} does not match the paragraph text.")
        indexed[span.start] = (group_id, span)
        previous_end = span.end
    return indexed


def _position_in_idiom(offset: int, length: int) -> IdiomPosition:
    if offset == length - 1:
        return IdiomPosition.LAST
    if offset == 0:
        return IdiomPosition.FIRST
    return IdiomPosition.MIDDLE


def _entry_or_placeholder(
    result: LookupResult, placeholder: LexiconEntry
) -> LexiconEntry:
    if isinstance(result, LexiconEntry):
        return result
    logger.debug("Using placeholder annotation: %s", result)
    return placeholder
