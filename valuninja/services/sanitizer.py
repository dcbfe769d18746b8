from __future__ import annotations

import json
import re
from typing import Any

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def extract_json(text: str | None) -> Any | None:
    """
    Recover a JSON value from loosely formatted model output.

    Tries the text as-is, then the first fenced code block, then the span between
    the earliest opening and the latest closing brace or bracket. The fallback
    candidates have trailing commas removed and line breaks collapsed to spaces
    before parsing. Returns None when nothing parses.
    """
    if not text:
        return None

    try:
        return json.loads(text)
    except ValueError:
        pass

    candidate = _locate_candidate(text)
    cleaned = _LINE_BREAK.sub(" ", _TRAILING_COMMA.sub(r"\1", candidate))
    try:
        return json.loads(cleaned)
    except ValueError:
        return None


def _locate_candidate(text: str) -> str:
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        return fenced.group(1)

    first_brace, last_brace = text.find("{"), text.rfind("}")
    first_bracket, last_bracket = text.find("["), text.rfind("]")

    if first_brace != -1 and (first_bracket == -1 or first_brace < first_bracket):
        start = first_brace
    else:
        start = first_bracket
    if last_brace != -1 and (last_bracket == -1 or last_brace > last_bracket):
        end = last_brace
    else:
        end = last_bracket

    if start == -1 or end == -1:
        return text
    return text[start : end + 1]
