from __future__ import annotations

from valuninja.agents.prompts import CATEGORY_ANALYSIS_PROMPT, PRODUCT_SEARCH_PROMPT


def test_category_prompt_renders_query_and_json_shape() -> None:
    text = CATEGORY_ANALYSIS_PROMPT.render({"query": "espresso machine", "country": "Canada", "currency": "CAD"})

    assert '"espresso machine"' in text
    assert "Canada" in text
    assert '"attributes": [{"key": "string"' in text
    assert '"currency": "CAD"' in text


def test_search_prompt_mentions_grounding_and_breakdown() -> None:
    text = PRODUCT_SEARCH_PROMPT.render(
        {
            "query": "4k monitor",
            "country": "USA",
            "currency": "USD",
            "user_values": '{"maxPrice": 400}',
            "location": "Online Marketplace",
        }
    )

    assert "Google Search" in text
    assert '{"maxPrice": 400}' in text
    assert '"dealStrength": 1-10' in text
    assert '"sourceUrl": "REAL URL"' in text


def test_missing_variables_render_blank() -> None:
    text = PRODUCT_SEARCH_PROMPT.render({"query": "kettle"})

    assert "User requirements: \n" in text
