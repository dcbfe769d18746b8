from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Tuple

from valuninja.core.config import AppSettings

try:  # pragma: no cover - optional dependency
    from langfuse import Langfuse
    from langfuse.langchain import CallbackHandler as LangfuseCallbackHandler
except ImportError:  # pragma: no cover - optional dependency
    Langfuse = None  # type: ignore[assignment]
    LangfuseCallbackHandler = None  # type: ignore[assignment]

TracingCallbacks = Tuple[Any, ...]


class LangfuseNotInstalled(RuntimeError):
    """Raised when Langfuse keys are configured but the dependency is missing."""


@lru_cache(maxsize=4)
def _tracing_handler(
    public_key: str | None,
    secret_key: str | None,
    host: str | None,
    release: str | None,
) -> Any | None:
    if not public_key or not secret_key:
        return None
    if Langfuse is None or LangfuseCallbackHandler is None:  # pragma: no cover
        raise LangfuseNotInstalled(
            "Langfuse keys are set but `langfuse` is not installed; install the tracing extra."
        )

    # The LangChain handler resolves its client from the process environment.
    for name, value in (
        ("LANGFUSE_PUBLIC_KEY", public_key),
        ("LANGFUSE_SECRET_KEY", secret_key),
        ("LANGFUSE_HOST", host),
        ("LANGFUSE_RELEASE", release),
    ):
        if value:
            os.environ.setdefault(name, value)

    Langfuse(public_key=public_key, secret_key=secret_key, host=host, release=release)
    return LangfuseCallbackHandler(public_key=public_key)


def get_tracing_callbacks(settings: AppSettings) -> TracingCallbacks:
    """LangChain callbacks that trace scout calls to Langfuse; empty when tracing is off."""

    handler = _tracing_handler(
        settings.langfuse_public_key,
        settings.langfuse_secret_key,
        settings.langfuse_host,
        settings.langfuse_release,
    )
    return () if handler is None else (handler,)
