from __future__ import annotations

from dataclasses import dataclass, field
from textwrap import dedent
from typing import Any, Dict

PromptVariables = Dict[str, Any]


class _SafeDict(dict):
    def __missing__(self, key: str) -> str:
        return ""


@dataclass(frozen=True)
class StructuredPrompt:
    prompt_id: str
    template: str
    _template: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_template", dedent(self.template).strip())

    def render(self, variables: PromptVariables | None = None) -> str:
        normalized = _SafeDict(**(variables or {}))
        return self._template.format_map(normalized)

    @property
    def raw(self) -> str:
        return self._template


CATEGORY_ANALYSIS_PROMPT = StructuredPrompt(
    prompt_id="scout.category_analysis.v1",
    template="""
    Mission: Analyze "{query}" for shoppers in {country}.
    Define exactly 4 key technical attributes a buyer would use to compare options.

    Return strictly JSON with this shape and nothing else:
    {{
      "attributes": [{{"key": "string", "label": "string", "type": "NUMBER|STRING|BOOLEAN", "defaultValue": "any"}}],
      "marketGuide": "2-3 sentences of expert buying advice",
      "suggestions": ["follow-up refinement 1", "follow-up refinement 2"],
      "priceRange": {{"min": number, "max": number, "currency": "{currency}"}},
      "adUnits": [{{"brand": "string", "headline": "string", "description": "string", "cta": "string"}}]
    }}

    Provide at most 4 adUnits.
    """,
)

PRODUCT_SEARCH_PROMPT = StructuredPrompt(
    prompt_id="scout.product_search.v1",
    template="""
    Mission: Identify the top 4 specific product options for "{query}" in {country}.
    User requirements: {user_values}
    Location: {location}

    Use Google Search to find CURRENT pricing and real retailer product page URLs.
    Never invent URLs; leave "sourceUrl" empty when no real product page was found.

    Output strictly JSON with this shape and nothing else:
    {{
      "summary": "Short summary of the options",
      "products": [{{
        "brand": "Brand",
        "name": "Model",
        "price": number,
        "currency": "{currency}",
        "storeName": "Merchant",
        "sourceUrl": "REAL URL",
        "description": "Analysis",
        "specs": {{"Key": "Value"}},
        "pros": ["Benefit"],
        "cons": ["Drawback"],
        "valueScore": 1-100,
        "valueBreakdown": {{
          "performance": 1-10, "buildQuality": 1-10, "featureSet": 1-10, "reliability": 1-10,
          "userSatisfaction": 1-10, "efficiency": 1-10, "innovation": 1-10, "longevity": 1-10,
          "ergonomics": 1-10, "dealStrength": 1-10
        }}
      }}]
    }}
    """,
)
