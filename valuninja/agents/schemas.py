from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from valuninja.models.analysis import AdUnit, AttributeType
from valuninja.models.products import ValueBreakdown

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
MAX_AD_UNITS = 4


def coerce_number(value: object) -> float | None:
    """Best-effort number from model output, e.g. ``"$1,299.99"`` becomes ``1299.99``."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER.search(str(value).replace(",", ""))
    return float(match.group(0)) if match else None


def _clean_text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class _RawModel(BaseModel):
    """Model output is loose: unknown keys are ignored rather than rejected."""

    model_config = ConfigDict(extra="ignore")


class RawAttribute(_RawModel):
    key: str
    label: str = ""
    type: AttributeType = AttributeType.STRING
    options: Optional[list[str]] = None
    unit: Optional[str] = None
    defaultValue: Any = None
    description: Optional[str] = None

    @field_validator("key", mode="before")
    @classmethod
    def _require_key(cls, value: object) -> str:
        key = _clean_text(value)
        if not key:
            raise ValueError("Attribute key cannot be empty.")
        return key

    @field_validator("label", mode="before")
    @classmethod
    def _label_text(cls, value: object) -> str:
        return _clean_text(value) or ""

    @field_validator("type", mode="before")
    @classmethod
    def _closed_type(cls, value: object) -> AttributeType:
        normalized = str(value or "").strip().upper()
        if normalized == AttributeType.NUMBER.value:
            return AttributeType.NUMBER
        if normalized == AttributeType.BOOLEAN.value:
            return AttributeType.BOOLEAN
        return AttributeType.STRING

    @field_validator("options", mode="before")
    @classmethod
    def _options_list(cls, value: object) -> Optional[list[str]]:
        if not isinstance(value, list):
            return None
        return [str(option) for option in value]

    @field_validator("defaultValue", mode="before")
    @classmethod
    def _scalar_default(cls, value: object) -> Any:
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        return str(value)

    @property
    def has_default(self) -> bool:
        return "defaultValue" in self.model_fields_set


class RawPriceRange(_RawModel):
    min: Optional[float] = None
    max: Optional[float] = None
    currency: Optional[str] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def _coerce_bounds(cls, value: object) -> float | None:
        return coerce_number(value)


class RawAnalysis(_RawModel):
    attributes: list[RawAttribute] = Field(default_factory=list)
    marketGuide: Optional[str] = None
    suggestions: list[str] = Field(default_factory=list)
    priceRange: Optional[RawPriceRange] = None
    adUnits: list[AdUnit] = Field(default_factory=list)

    @field_validator("attributes", mode="before")
    @classmethod
    def _keyed_attributes(cls, value: object) -> list[Any]:
        # Entries without a usable key are dropped; the rest of the response survives.
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict) and _clean_text(item.get("key"))]

    @field_validator("suggestions", mode="before")
    @classmethod
    def _suggestions_as_text(cls, value: object) -> list[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]

    @field_validator("priceRange", mode="before")
    @classmethod
    def _price_range_mapping(cls, value: object) -> object:
        return value if isinstance(value, dict) else None

    @field_validator("adUnits", mode="before")
    @classmethod
    def _ad_units(cls, value: object) -> list[dict[str, str]]:
        if not isinstance(value, list):
            return []
        units = [item for item in value if isinstance(item, dict)][:MAX_AD_UNITS]
        return [{key: _clean_text(text) or "" for key, text in unit.items()} for unit in units]

    @field_validator("marketGuide", mode="before")
    @classmethod
    def _strip_guide(cls, value: object) -> Optional[str]:
        return _clean_text(value)


class RawProduct(_RawModel):
    brand: str = ""
    name: str = ""
    price: Optional[float] = None
    currency: Optional[str] = None
    storeName: Optional[str] = None
    sourceUrl: Optional[str] = None
    description: str = ""
    specs: dict[str, str | float | int | bool] = Field(default_factory=dict)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    valueScore: Optional[int] = None
    valueBreakdown: dict[str, int] = Field(default_factory=dict)

    @field_validator("brand", "name", "description", mode="before")
    @classmethod
    def _text_or_blank(cls, value: object) -> str:
        return _clean_text(value) or ""

    @field_validator("currency", "storeName", "sourceUrl", mode="before")
    @classmethod
    def _optional_text(cls, value: object) -> Optional[str]:
        return _clean_text(value)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: object) -> float | None:
        return coerce_number(value)

    @field_validator("specs", mode="before")
    @classmethod
    def _specs_mapping(cls, value: object) -> dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        specs: dict[str, Any] = {}
        for label, spec in value.items():
            if spec is None:
                continue
            specs[str(label)] = spec if isinstance(spec, (str, int, float, bool)) else str(spec)
        return specs

    @field_validator("pros", "cons", mode="before")
    @classmethod
    def _string_list(cls, value: object) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]

    @field_validator("valueScore", mode="before")
    @classmethod
    def _coerce_score(cls, value: object) -> int | None:
        number = coerce_number(value)
        # A zero score is treated the same as a missing one.
        return round(number) if number else None

    @field_validator("valueBreakdown", mode="before")
    @classmethod
    def _known_sub_scores(cls, value: object) -> dict[str, int]:
        if not isinstance(value, dict):
            return {}
        scores: dict[str, int] = {}
        for name in ValueBreakdown.model_fields:
            number = coerce_number(value.get(name))
            if number is not None:
                scores[name] = round(number)
        return scores

    def breakdown(self) -> ValueBreakdown:
        """Sub-scores with every field present; missing ones are neutral."""
        return ValueBreakdown(**self.valueBreakdown)


class RawProductBatch(_RawModel):
    summary: Optional[str] = None
    products: list[RawProduct]

    @field_validator("summary", mode="before")
    @classmethod
    def _strip_summary(cls, value: object) -> Optional[str]:
        return _clean_text(value)
