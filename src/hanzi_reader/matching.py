"""
Idiom detection over a single paragraph.

Every occurrence of every catalog entry is a candidate, including
overlapping occurrences of the same entry. Candidates are resolved with a
greedy leftmost-longest policy:

1. lower start index first;
2. at the same start, the longer idiom first;
3. at the same start and length, the entry declared earlier in the catalog.

A candidate is accepted only when it does not overlap a span accepted
before it, so no character ever belongs to two idioms.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Tuple

from .models import IdiomSpan


def find_idiom_spans(text: str, catalog: Iterable[str]) -> List[IdiomSpan]:
    """Return the accepted, non-overlapping idiom spans sorted by start."""
    candidates: List[Tuple[int, int, int, str]] = []
    for order, idiom in enumerate(catalog):
        if not idiom:
            continue
        for start in _occurrences(text, idiom):
            candidates.append((start, -len(idiom), order, idiom))
    candidates.sort()

    accepted: List[IdiomSpan] = []
    covered_until = 0
    for start, negative_length, _, idiom in candidates:
        # Candidates arrive in start order, so only the last accepted end matters.
        if start < covered_until:
            continue
        span = IdiomSpan(idiom=idiom, start=start, length=-negative_length)
        accepted.append(span)
        covered_until = span.end
    return accepted


def _occurrences(text: str, idiom: str) -> Iterator[int]:
    index = text.find(idiom)
    while index != -1:
        yield index
        index = text.find(idiom, index + 1)
