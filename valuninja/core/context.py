from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

_request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("valuninja_request_id", default=None)
_scout_step_ctx_var: ContextVar[Optional[str]] = ContextVar("valuninja_scout_step", default=None)
_scout_region_ctx_var: ContextVar[Optional[str]] = ContextVar("valuninja_scout_region", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex


def set_request_id(request_id: Optional[str] = None) -> Token:
    return _request_id_ctx_var.set(request_id or new_request_id())


def get_request_id() -> Optional[str]:
    return _request_id_ctx_var.get()


def reset_request_id(token: Token) -> None:
    _request_id_ctx_var.reset(token)


@contextmanager
def scout_context(step: str, region: Optional[str] = None) -> Iterator[None]:
    """
    Tag every log line emitted inside the block with the scout step (``analyze``,
    ``search``) and the shopper's region. Nested blocks restore the outer values on exit.
    """
    step_token = _scout_step_ctx_var.set(step)
    region_token = _scout_region_ctx_var.set(region)
    try:
        yield
    finally:
        _scout_region_ctx_var.reset(region_token)
        _scout_step_ctx_var.reset(step_token)


def get_scout_step() -> Optional[str]:
    return _scout_step_ctx_var.get()


def get_scout_region() -> Optional[str]:
    return _scout_region_ctx_var.get()
