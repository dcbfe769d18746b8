from __future__ import annotations

from valuninja.agents.llm import ScoutLlmError
from valuninja.core.exceptions import CredentialRejected, EnvironmentAuthFailure, InvalidQueryError, ScoutError

_REJECTED_STATUSES = {401, 403}
# Throttling and server faults are never credential problems, whatever the text says.
_NEVER_REJECTED_STATUSES = {408, 429}


def require_credential(api_key: str | None) -> str:
    if not api_key or not api_key.strip():
        raise EnvironmentAuthFailure()
    return api_key


def require_query(query: str) -> str:
    cleaned = (query or "").strip()
    if not cleaned:
        raise InvalidQueryError("Query cannot be empty.", details={"field": "query"})
    return cleaned


def _mentions_credential(message: str) -> bool:
    # Brittle: any error text mentioning "key" is read as a credential problem.
    return "401" in message or "key" in message.lower()


def is_credential_rejection(exc: ScoutLlmError) -> bool:
    status = exc.status_code
    if status in _REJECTED_STATUSES:
        return True
    if status is not None and (status in _NEVER_REJECTED_STATUSES or status >= 500):
        return False
    # Gemini reports an invalid key as a plain 400, so other statuses still
    # fall through to the message check.
    return _mentions_credential(str(exc))


def remap_backend_error(exc: ScoutLlmError, fallback: str) -> ScoutError:
    if is_credential_rejection(exc):
        return CredentialRejected(details={"status": exc.status_code} if exc.status_code else None)
    return ScoutError(str(exc) or fallback)
