from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from ..errors import LexiconUnavailableError
from ..llm.openai_client import OpenAIGlossClient
from .base import (
    AnyLexicon,
    AsyncLexiconProvider,
    CallableLexicon,
    LexiconProvider,
    LookupResult,
    lookup_entries,
    resolve_entries,
)
from .dictionary import DictionaryLexicon, load_cedict
from .mock import MockLexicon
from .openai_lexicon import OpenAILexicon

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..config import AnnotatorConfig, OpenAISettings

__all__ = [
    "AnyLexicon",
    "AsyncLexiconProvider",
    "CallableLexicon",
    "DictionaryLexicon",
    "LexiconProvider",
    "LookupResult",
    "MockLexicon",
    "OpenAILexicon",
    "build_lexicon_from_config",
    "create_lexicon",
    "load_cedict",
    "lookup_entries",
    "resolve_entries",
]


def create_lexicon(name: str, **kwargs: Any) -> LexiconProvider:
    """Factory for building lexicons by name."""
    normalized = name.lower().strip()
    if normalized == "mock":
        return MockLexicon(**kwargs)
    if normalized in {"dictionary", "pypinyin", "cedict"}:
        cedict_path = kwargs.pop("cedict_path", None)
        if cedict_path:
            return DictionaryLexicon.from_cedict(cedict_path, **kwargs)
        return DictionaryLexicon(**kwargs)
    if normalized == "openai":
        settings = kwargs["settings"]
        client = OpenAIGlossClient(settings, api_key=kwargs["api_key"])
        return OpenAILexicon(client)
    raise ValueError(f"Unknown lexicon '{name}'.")


def build_lexicon_from_config(config: "AnnotatorConfig") -> LexiconProvider:
    """Convenience helper to build a lexicon from AnnotatorConfig."""
    normalized = config.lexicon_name.lower().strip()
    if normalized in {"dictionary", "pypinyin", "cedict"}:
        return create_lexicon(
            normalized,
            cedict_path=config.cedict_path,
            style=config.pinyin_style,
        )
    if normalized == "openai":
        return create_lexicon(
            "openai",
            settings=config.openai,
            api_key=resolve_openai_api_key(config.openai),
        )
    return create_lexicon(config.lexicon_name)


def resolve_openai_api_key(settings: "OpenAISettings") -> str:
    """Resolve the API key from explicit config or the configured environment variable."""
    if settings.api_key:
        return settings.api_key
    env_name = settings.api_key_env or "OPENAI_API_KEY"
    value = os.environ.get(env_name)
    if value:
        return value
    raise LexiconUnavailableError(
        f"OpenAI API key not provided. Set openai.api_key or the {env_name} environment variable."
    )
