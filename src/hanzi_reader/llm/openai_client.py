from __future__ import annotations

import importlib
import json
import logging
import threading
import time
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Dict, cast

from ..config import OpenAISettings

logger = logging.getLogger(__name__)

OpenAI: Callable[..., Any] | None = None

# Responses API structured output: the model must answer with one JSON object.
JSON_OBJECT_FORMAT: Dict[str, Any] = {"format": {"type": "json_object"}}


@dataclass(slots=True)
class GlossRequestMetadata:
    """Describes a bulk gloss request, used for logging."""

    unit_count: int
    span_count: int = 0
    sample: str | None = None


class OpenAIGlossClient:
    """Requests JSON-object glosses from the OpenAI Responses API.

    Transport errors and replies that are not a JSON object are retried with
    a short backoff; ``parallel_requests`` caps concurrent calls across the
    worker threads that share one client.
    """

    def __init__(
        self, settings: OpenAISettings, api_key: str, max_attempts: int = 3
    ) -> None:
        if not api_key:
            raise ValueError("OpenAI API key is required for the openai lexicon.")
        self._settings = settings
        self._factory = _load_openai_factory()
        self._api_key = api_key
        self._client: Any | None = None
        self._client_lock = threading.Lock()
        self._slots: threading.BoundedSemaphore | None = (
            threading.BoundedSemaphore(settings.parallel_requests)
            if settings.parallel_requests > 0
            else None
        )
        self._max_attempts = max(1, max_attempts)

    @property
    def settings(self) -> OpenAISettings:
        return self._settings

    def request_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        metadata: GlossRequestMetadata,
    ) -> Dict[str, Any]:
        """Return the model's reply parsed as a JSON object."""
        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                with self._slot():
                    response = self._openai().responses.create(
                        model=self._settings.model,
                        instructions=system_prompt,
                        input=user_prompt,
                        text=JSON_OBJECT_FORMAT,
                        temperature=self._settings.temperature,
                        max_output_tokens=self._settings.max_output_tokens,
                        timeout=self._settings.request_timeout,
                    )
                payload = _decode_object(_response_text(response))
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "OpenAI gloss of %s units failed (attempt %s/%s): %s",
                    metadata.unit_count,
                    attempt,
                    self._max_attempts,
                    exc,
                )
                if attempt < self._max_attempts:
                    time.sleep(min(2 ** (attempt - 1), 5))
                continue
            logger.debug(
                "OpenAI glossed %s units (%s spans, sample=%s) into %s keys",
                metadata.unit_count,
                metadata.span_count,
                metadata.sample,
                len(payload),
            )
            return payload
        raise RuntimeError(
            f"OpenAI gloss request failed after {self._max_attempts} attempts."
        ) from last_error

    def _openai(self) -> Any:
        with self._client_lock:
            if self._client is None:
                self._client = self._factory(
                    api_key=self._api_key,
                    base_url=self._settings.base_url,
                    organization=self._settings.organization,
                )
            return self._client

    def _slot(self) -> ContextManager[Any]:
        return self._slots if self._slots is not None else nullcontext()


def _response_text(response: Any) -> str:
    """Collect the ``output_text`` parts of a Responses API reply."""
    direct = getattr(response, "output_text", None)
    if isinstance(direct, str) and direct:
        return direct
    parts = [
        _field(part, "text")
        for item in _field(response, "output") or ()
        for part in _field(item, "content") or ()
        if _field(part, "type") in (None, "output_text")
    ]
    text = "".join(part for part in parts if isinstance(part, str))
    if not text:
        raise RuntimeError("OpenAI response contained no output text.")
    return text


def _decode_object(text: str) -> Dict[str, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"OpenAI reply is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise RuntimeError(
            f"OpenAI reply must be a JSON object, got {type(payload).__name__}."
        )
    return cast(Dict[str, Any], payload)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _load_openai_factory() -> Callable[..., Any]:
    """Resolve ``openai.OpenAI`` on first use so the extra stays optional."""
    global OpenAI
    if OpenAI is None:
        try:  # pragma: no cover - import guard
            module = importlib.import_module("openai")
        except ImportError as exc:  # pragma: no cover - handled at runtime
            raise RuntimeError(
                "openai package is not installed. Install extras via 'pip install .[llm-openai]'."
            ) from exc
        OpenAI = cast(Callable[..., Any], module.OpenAI)
    return OpenAI

