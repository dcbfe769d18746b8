from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, List, Mapping, Protocol, Sequence, Tuple

from valuninja.core.config import AppSettings

try:
    from langchain_google_genai import ChatGoogleGenerativeAI
except ImportError:  # pragma: no cover - optional dependency
    ChatGoogleGenerativeAI = None  # type: ignore[assignment]

try:
    from langchain_openai import ChatOpenAI
except ImportError:  # pragma: no cover - optional dependency
    ChatOpenAI = None  # type: ignore[assignment]


class ScoutLlmError(RuntimeError):
    """Raised when the AI backend cannot complete a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class GroundingChunk:
    title: str
    uri: str


@dataclass
class LlmResponse:
    text: str
    citations: List[GroundingChunk] = field(default_factory=list)


class ScoutLlm(Protocol):
    def generate(self, prompt: str, *, prompt_id: str, grounded: bool = False) -> LlmResponse:
        ...

    async def generate_async(self, prompt: str, *, prompt_id: str, grounded: bool = False) -> LlmResponse:
        ...


def _status_from_exception(exc: BaseException) -> int | None:
    current: BaseException | None = exc
    while current is not None:
        for attr in ("status_code", "code"):
            value = getattr(current, attr, None)
            if isinstance(value, int) and 100 <= value < 600:
                return value
        current = current.__cause__
    return None


def _normalize_message_content(result: object) -> str:
    if isinstance(result, str):
        return result.strip()

    content = getattr(result, "content", None)
    if isinstance(content, str):
        return content.strip()

    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("text"):
                parts.append(str(item["text"]))
        return "".join(parts).strip()

    return str(result or "").strip()


def _lookup(mapping: Mapping[str, Any] | None, *keys: str) -> Any:
    if not isinstance(mapping, Mapping):
        return None
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def extract_citations(message: object) -> List[GroundingChunk]:
    """Grounding chunks (web or maps) attached to a chat model response."""
    metadata = getattr(message, "response_metadata", None) or {}
    grounding = _lookup(metadata, "grounding_metadata", "groundingMetadata")
    chunks = _lookup(grounding, "grounding_chunks", "groundingChunks") or []

    citations: list[GroundingChunk] = []
    for chunk in chunks:
        source = _lookup(chunk, "web") or _lookup(chunk, "maps") or {}
        uri = _lookup(source, "uri")
        if uri:
            citations.append(GroundingChunk(title=_lookup(source, "title") or "", uri=str(uri)))
    return citations


class _BaseScoutLlm:
    def __init__(self, *, callbacks: Sequence[Any] | None = None) -> None:
        self._callbacks = list(callbacks or [])

    def generate(self, prompt: str, *, prompt_id: str, grounded: bool = False) -> LlmResponse:
        try:
            return self._invoke_model(prompt, grounded)
        except ScoutLlmError:
            raise
        except Exception as exc:
            raise ScoutLlmError(str(exc), status_code=_status_from_exception(exc)) from exc

    async def generate_async(self, prompt: str, *, prompt_id: str, grounded: bool = False) -> LlmResponse:
        try:
            return await self._invoke_model_async(prompt, grounded)
        except ScoutLlmError:
            raise
        except Exception as exc:
            raise ScoutLlmError(str(exc), status_code=_status_from_exception(exc)) from exc

    def _invoke_model(self, prompt: str, grounded: bool) -> LlmResponse:
        raise NotImplementedError  # pragma: no cover - implemented by subclasses

    async def _invoke_model_async(self, prompt: str, grounded: bool) -> LlmResponse:
        raise NotImplementedError  # pragma: no cover - implemented by subclasses

    def _config(self, timeout: int) -> dict[str, Any]:
        config: dict[str, Any] = {"timeout": timeout}
        if self._callbacks:
            config["callbacks"] = self._callbacks
        return config


_fake_responses: Deque[LlmResponse | Exception] = deque()
_fake_lock = threading.RLock()


def queue_fake_response(text: str, citations: Sequence[Tuple[str, str]] | None = None) -> None:
    """Queue canned model text plus optional (title, uri) citations for the fake backend."""
    response = LlmResponse(
        text=text,
        citations=[GroundingChunk(title=title, uri=uri) for title, uri in (citations or [])],
    )
    with _fake_lock:
        _fake_responses.append(response)


def queue_fake_error(error: Exception) -> None:
    with _fake_lock:
        _fake_responses.append(error)


def clear_fake_responses() -> None:
    with _fake_lock:
        _fake_responses.clear()


class _FakeScoutLlm(_BaseScoutLlm):
    def _invoke_model(self, prompt: str, grounded: bool) -> LlmResponse:
        with _fake_lock:
            if not _fake_responses:
                raise ScoutLlmError("No fake responses queued for scout LLM")
            queued = _fake_responses.popleft()
        if isinstance(queued, Exception):
            raise queued
        if grounded:
            return queued
        return LlmResponse(text=queued.text)

    async def _invoke_model_async(self, prompt: str, grounded: bool) -> LlmResponse:
        return self._invoke_model(prompt, grounded)


class _GeminiScoutLlm(_BaseScoutLlm):
    def __init__(
        self,
        *,
        model: str,
        temperature: float,
        timeout: int,
        api_key: str | None,
        callbacks: Sequence[Any] | None = None,
    ) -> None:
        super().__init__(callbacks=callbacks)
        if ChatGoogleGenerativeAI is None:  # pragma: no cover - optional dependency
            raise ScoutLlmError("langchain-google-genai is not installed.")
        client_kwargs: dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "timeout": timeout,
        }
        if api_key:
            client_kwargs["google_api_key"] = api_key
        if self._callbacks:
            client_kwargs["callbacks"] = self._callbacks
        # Gemini rejects a JSON mime type combined with tool use, so grounded calls
        # rely on the prompt and the sanitizer for their JSON shape.
        self._json_client = ChatGoogleGenerativeAI(response_mime_type="application/json", **client_kwargs)
        self._search_client = ChatGoogleGenerativeAI(**client_kwargs).bind_tools([{"google_search": {}}])
        self._timeout = timeout

    def _client_for(self, grounded: bool) -> Any:
        return self._search_client if grounded else self._json_client

    def _invoke_model(self, prompt: str, grounded: bool) -> LlmResponse:
        message = self._client_for(grounded).invoke(prompt, config=self._config(self._timeout))
        return LlmResponse(text=_normalize_message_content(message), citations=extract_citations(message))

    async def _invoke_model_async(self, prompt: str, grounded: bool) -> LlmResponse:
        message = await self._client_for(grounded).ainvoke(prompt, config=self._config(self._timeout))
        return LlmResponse(text=_normalize_message_content(message), citations=extract_citations(message))


class _OpenAiScoutLlm(_BaseScoutLlm):
    """OpenAI chat completions in JSON mode. Has no search grounding, so citations stay empty."""

    def __init__(
        self,
        *,
        model: str,
        temperature: float,
        timeout: int,
        api_key: str | None,
        callbacks: Sequence[Any] | None = None,
    ) -> None:
        super().__init__(callbacks=callbacks)
        if ChatOpenAI is None:  # pragma: no cover - optional dependency
            raise ScoutLlmError("langchain-openai is not installed.")
        client_kwargs: dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "timeout": timeout,
        }
        if api_key:
            client_kwargs["api_key"] = api_key
        if self._callbacks:
            client_kwargs["callbacks"] = self._callbacks
        self._client = ChatOpenAI(**client_kwargs).bind(response_format={"type": "json_object"})
        self._timeout = timeout

    def _invoke_model(self, prompt: str, grounded: bool) -> LlmResponse:
        message = self._client.invoke(prompt, config=self._config(self._timeout))
        return LlmResponse(text=_normalize_message_content(message))

    async def _invoke_model_async(self, prompt: str, grounded: bool) -> LlmResponse:
        message = await self._client.ainvoke(prompt, config=self._config(self._timeout))
        return LlmResponse(text=_normalize_message_content(message))


ScoutLlmFactory = Callable[[], ScoutLlm]


def get_scout_llm(settings: AppSettings, callbacks: Sequence[Any] | None = None) -> ScoutLlmFactory:
    provider = settings.scout_llm_provider.lower()
    callback_tuple: Tuple[Any, ...] = tuple(callbacks or ())

    if provider == "fake":
        return lambda: _FakeScoutLlm()

    if provider == "google":
        return lambda: _GeminiScoutLlm(
            model=settings.scout_model,
            temperature=settings.scout_temperature,
            timeout=settings.scout_timeout_sec,
            api_key=settings.resolved_api_key,
            callbacks=callback_tuple,
        )

    if provider == "openai":
        return lambda: _OpenAiScoutLlm(
            model=settings.scout_model,
            temperature=settings.scout_temperature,
            timeout=settings.scout_timeout_sec,
            api_key=settings.resolved_api_key,
            callbacks=callback_tuple,
        )

    raise ScoutLlmError(f"Unsupported scout LLM provider '{settings.scout_llm_provider}'")


__all__ = [
    "GroundingChunk",
    "LlmResponse",
    "ScoutLlm",
    "ScoutLlmError",
    "ScoutLlmFactory",
    "clear_fake_responses",
    "extract_citations",
    "get_scout_llm",
    "queue_fake_error",
    "queue_fake_response",
]
