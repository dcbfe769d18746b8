from __future__ import annotations

import json

import pytest

from valuninja.services.sanitizer import extract_json


@pytest.mark.parametrize(
    "raw",
    [
        '{"a": 1, "b": [1, 2, 3]}',
        "[1, 2, 3]",
        '"just a string"',
        '{"nested": {"ok": true, "none": null}}',
    ],
)
def test_valid_json_matches_standard_parse(raw: str) -> None:
    assert extract_json(raw) == json.loads(raw)


def test_recovers_fenced_block_surrounded_by_prose() -> None:
    raw = 'Sure! ```json\n{"a":1}\n``` Hope that helps.'

    assert extract_json(raw) == {"a": 1}


def test_recovers_untagged_fence() -> None:
    raw = 'Here you go:\n```\n[{"a": 1}]\n```'

    assert extract_json(raw) == [{"a": 1}]


def test_strips_trailing_commas() -> None:
    assert extract_json('{"a":1,}') == {"a": 1}
    assert extract_json('{"items": [1, 2, ],}') == {"items": [1, 2]}


def test_locates_outermost_object_inside_prose() -> None:
    raw = 'The answer is {"products": [{"name": "X"}]} as requested.'

    assert extract_json(raw) == {"products": [{"name": "X"}]}


def test_prefers_bracket_when_it_opens_first() -> None:
    raw = 'Results: [{"a": 1}, {"b": 2}] end'

    assert extract_json(raw) == [{"a": 1}, {"b": 2}]


def test_collapses_newlines_inside_strings() -> None:
    raw = 'Output:\n{"guide": "line one\nline two"}'

    assert extract_json(raw) == {"guide": "line one line two"}


@pytest.mark.parametrize("raw", ["no json here", "", None, "} backwards {", "```json\nnot json\n```"])
def test_returns_none_when_nothing_recoverable(raw) -> None:
    assert extract_json(raw) is None
