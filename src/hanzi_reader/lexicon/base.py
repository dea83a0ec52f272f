from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import Callable, List, Sequence, Union

from ..errors import LexiconUnavailableError, LookupFailedError
from ..models import LexiconEntry

LookupResult = Union[LexiconEntry, Exception]


class LexiconProvider(ABC):
    """Synchronous source of pinyin and glosses for characters or spans."""

    #: Whether whole idiom strings can be looked up, not just single characters.
    supports_spans: bool = False

    @abstractmethod
    def lookup(self, unit: str) -> LexiconEntry:
        """Return the entry for ``unit`` or raise LookupFailedError."""
        raise NotImplementedError

    def lookup_many(self, units: Sequence[str]) -> List[LookupResult]:
        """Resolve a batch of units; failures are returned in place of entries."""
        results: List[LookupResult] = []
        for unit in units:
            try:
                results.append(self.lookup(unit))
            except LexiconUnavailableError:
                raise
            except Exception as exc:
                results.append(exc)
        return results


class AsyncLexiconProvider(ABC):
    """Asynchronous counterpart of LexiconProvider for remote sources."""

    supports_spans: bool = False

    @abstractmethod
    async def lookup(self, unit: str) -> LexiconEntry:
        """Return the entry for ``unit`` or raise LookupFailedError."""
        raise NotImplementedError

    async def lookup_many(self, units: Sequence[str]) -> List[LookupResult]:
        results = await asyncio.gather(
            *(self.lookup(unit) for unit in units), return_exceptions=True
        )
        return list(results)


AnyLexicon = Union[LexiconProvider, AsyncLexiconProvider]


class CallableLexicon(LexiconProvider):
    """Adapt an arbitrary callable into the LexiconProvider interface."""

    def __init__(
        self, func: Callable[[str], LexiconEntry], *, supports_spans: bool = False
    ) -> None:
        self._func = func
        self.supports_spans = supports_spans

    def lookup(self, unit: str) -> LexiconEntry:
        return self._func(unit)


async def resolve_entries(
    lexicon: AnyLexicon, units: Sequence[str], executor: Executor | None = None
) -> List[LookupResult]:
    """Run one bulk lookup, off the event loop when the lexicon is synchronous.

    Synchronous lexicons run on ``executor`` when given, otherwise on the
    loop's default executor.
    """
    if isinstance(lexicon, AsyncLexiconProvider):
        results = await lexicon.lookup_many(units)
    else:
        loop = asyncio.get_running_loop()
        results = await loop.run_in_executor(executor, lexicon.lookup_many, units)
    return _checked(units, results)


def lookup_entries(lexicon: AnyLexicon, units: Sequence[str]) -> List[LookupResult]:
    """Blocking variant of resolve_entries for callers outside an event loop."""
    if isinstance(lexicon, AsyncLexiconProvider):
        results = asyncio.run(lexicon.lookup_many(units))
    else:
        results = lexicon.lookup_many(units)
    return _checked(units, results)


def _checked(units: Sequence[str], results: Sequence[object]) -> List[LookupResult]:
    if len(results) != len(units):
        raise LexiconUnavailableError(
            f"Lexicon returned {len(results)} results for {len(units)} units."
        )
    checked: List[LookupResult] = []
    for unit, result in zip(units, results):
        if isinstance(result, LexiconUnavailableError):
            raise result
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            # Cancellation and interpreter exits are never per-unit failures.
            raise result
        if isinstance(result, (LexiconEntry, Exception)):
            checked.append(result)
        else:
            checked.append(
                LookupFailedError(unit, f"unexpected result {type(result).__name__}")
            )
    return checked
