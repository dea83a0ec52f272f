from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, List, Mapping, MutableMapping

import yaml

from .catalog import DEFAULT_IDIOMS
from .models import LexiconEntry


@dataclass(slots=True)
class OpenAISettings:
    """Configuration block for OpenAI-backed glossing."""

    model: str = "gpt-4.1-mini"
    api_key: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str | None = None
    organization: str | None = None
    temperature: float = 0.0
    max_output_tokens: int = 2000
    request_timeout: float = 60.0
    parallel_requests: int = 2


@dataclass(slots=True)
class AnnotatorConfig:
    """Configuration options for the annotation engine."""

    lexicon_name: str = "mock"
    idioms: List[str] = field(default_factory=lambda: list(DEFAULT_IDIOMS))
    idiom_catalog_path: str | None = None
    placeholder_pinyin: str = "?"
    placeholder_translation: str = "?"
    max_concurrent_paragraphs: int = 8
    lookup_timeout: float | None = None
    fail_on_total_lookup_failure: bool = True
    cedict_path: str | None = None
    pinyin_style: str = "tone"
    openai: OpenAISettings = field(default_factory=OpenAISettings)

    @property
    def placeholder(self) -> LexiconEntry:
        return LexiconEntry(
            pinyin=self.placeholder_pinyin, translation=self.placeholder_translation
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(AnnotatorConfig)}
    kwargs = {key: data[key] for key in data if key in allowed}
    if "idioms" in kwargs:
        idioms = kwargs["idioms"]
        if isinstance(idioms, str) or not isinstance(idioms, (list, tuple)):
            raise ValueError("'idioms' must be a list of strings.")
        kwargs["idioms"] = [str(idiom) for idiom in idioms]
    if "openai" in data:
        openai_value = data["openai"]
        if isinstance(openai_value, OpenAISettings):
            kwargs["openai"] = openai_value
        elif isinstance(openai_value, Mapping):
            kwargs["openai"] = _build_openai_settings(openai_value)
    return kwargs


def _build_openai_settings(data: Mapping[str, Any]) -> OpenAISettings:
    openai_allowed = {field.name for field in fields(OpenAISettings)}
    filtered = {key: data[key] for key in data if key in openai_allowed}
    return OpenAISettings(**filtered)


def config_from_dict(data: Mapping[str, Any] | None) -> AnnotatorConfig:
    """Build an AnnotatorConfig from a dictionary-like input."""
    if data is None:
        return AnnotatorConfig()
    return AnnotatorConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> AnnotatorConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> AnnotatorConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return AnnotatorConfig()
    return config_from_yaml(path)
