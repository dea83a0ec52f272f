from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .assembly import build_idiom_annotations, build_tokens, count_failures
from .catalog import IdiomCatalog, build_catalog_from_config
from .config import AnnotatorConfig
from .errors import AnnotationError, LookupFailedError
from .lexicon import AnyLexicon, LookupResult, resolve_entries
from .matching import find_idiom_spans
from .models import AnnotatedDocument, Paragraph
from .segmentation import segment_paragraphs

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _ParagraphOutcome:
    paragraph: Paragraph
    lookups: int
    failures: int


class AnnotationEngine:
    """Annotate whole documents: segment, match idioms, look up, assemble.

    The lexicon and catalog are shared read-only between calls; every call
    builds its own paragraphs and only publishes them once all are complete.
    """

    def __init__(
        self,
        lexicon: AnyLexicon,
        catalog: IdiomCatalog | None = None,
        config: AnnotatorConfig | None = None,
    ) -> None:
        self._config = config or AnnotatorConfig()
        self._lexicon = lexicon
        self._catalog = (
            catalog if catalog is not None else build_catalog_from_config(self._config)
        )

    @property
    def catalog(self) -> IdiomCatalog:
        return self._catalog

    @property
    def config(self) -> AnnotatorConfig:
        return self._config

    def annotate(self, raw_text: str) -> AnnotatedDocument:
        """Blocking entry point; must not be called from a running event loop.

        Synchronous lexicons run on a pool owned by this call. The pool is shut
        down without waiting, so a lookup abandoned by ``lookup_timeout`` does
        not hold the call open; its worker thread finishes in the background.
        """
        executor = ThreadPoolExecutor(
            max_workers=max(1, self._config.max_concurrent_paragraphs),
            thread_name_prefix="hanzi-lookup",
        )
        try:
            return asyncio.run(self._annotate(raw_text, executor))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    async def annotate_async(self, raw_text: str) -> AnnotatedDocument:
        """Annotate ``raw_text``; paragraphs run concurrently, results keep document order."""
        return await self._annotate(raw_text, None)

    async def _annotate(
        self, raw_text: str, executor: Executor | None
    ) -> AnnotatedDocument:
        texts = segment_paragraphs(raw_text)
        semaphore = asyncio.Semaphore(max(1, self._config.max_concurrent_paragraphs))
        outcomes: List[_ParagraphOutcome] = await asyncio.gather(
            *(self._annotate_paragraph(text, semaphore, executor) for text in texts)
        )

        lookups = sum(outcome.lookups for outcome in outcomes)
        failures = sum(outcome.failures for outcome in outcomes)
        if (
            self._config.fail_on_total_lookup_failure
            and lookups > 0
            and failures == lookups
        ):
            raise AnnotationError(
                f"Lexicon failed every lookup ({failures} of {lookups}); "
                "refusing to return a fully degraded document."
            )
        logger.info(
            "Annotated %s paragraphs (%s lookups, %s failed)",
            len(outcomes),
            lookups,
            failures,
        )
        return AnnotatedDocument(
            original=raw_text,
            paragraphs=tuple(outcome.paragraph for outcome in outcomes),
        )

    async def _annotate_paragraph(
        self, text: str, semaphore: asyncio.Semaphore, executor: Executor | None
    ) -> _ParagraphOutcome:
        async with semaphore:
            spans = find_idiom_spans(text, self._catalog)
            idioms = [span.idiom for span in spans] if self._lexicon.supports_spans else []
            units = list(dict.fromkeys([*text, *idioms]))
            by_unit = dict(zip(units, await self._lookup(units, executor)))

        entries = [by_unit[char] for char in text]
        tokens = build_tokens(text, spans, entries, self._config.placeholder)
        idiom_annotations = (
            build_idiom_annotations(spans, by_unit) if idioms else []
        )
        failures = count_failures(list(by_unit.values()))
        if failures:
            logger.warning(
                "%s of %s lookups failed in paragraph starting %r; using placeholders",
                failures,
                len(units),
                text[:10],
            )
        return _ParagraphOutcome(
            paragraph=Paragraph(
                text=text, tokens=tuple(tokens), idioms=tuple(idiom_annotations)
            ),
            lookups=len(units),
            failures=failures,
        )

    async def _lookup(
        self, units: Sequence[str], executor: Executor | None
    ) -> List[LookupResult]:
        timeout = self._config.lookup_timeout
        if timeout is None:
            return await resolve_entries(self._lexicon, units, executor)
        try:
            return await asyncio.wait_for(
                resolve_entries(self._lexicon, units, executor), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Lexicon lookup of %s units timed out after %.1fs", len(units), timeout
            )
            return [LookupFailedError(unit, "timed out") for unit in units]


def annotate_text(
    raw_text: str,
    lexicon: AnyLexicon,
    catalog: IdiomCatalog | None = None,
    config: AnnotatorConfig | None = None,
) -> AnnotatedDocument:
    """One-shot helper around AnnotationEngine.annotate."""
    return AnnotationEngine(lexicon, catalog=catalog, config=config).annotate(raw_text)


def reconstruct_idioms(paragraph: Paragraph) -> Dict[int, str]:
    """Rebuild ``group_id -> idiom text`` from a paragraph's tokens."""
    groups: Dict[int, List[str]] = {}
    for token in paragraph.tokens:
        if token.idiom_group is not None:
            groups.setdefault(token.idiom_group.group_id, []).append(token.text)
    return {group_id: "".join(chars) for group_id, chars in groups.items()}
