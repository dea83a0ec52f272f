from __future__ import annotations


class AnnotatorError(Exception):
    """Base class for errors raised by hanzi_reader."""


class LookupFailedError(AnnotatorError):
    """A lexicon could not resolve a single character or span."""

    def __init__(self, unit: str, reason: str | None = None) -> None:
        self.unit = unit
        self.reason = reason
        message = f"Lookup failed for {unit!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LexiconUnavailableError(AnnotatorError):
    """The lexicon cannot serve any lookups (missing credentials, outage)."""


class AnnotationError(AnnotatorError):
    """The document could not be annotated at all."""
