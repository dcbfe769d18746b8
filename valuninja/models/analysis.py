from __future__ import annotations

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, Field

from valuninja.models.region import RegionInfo


class AttributeType(str, Enum):
    SELECT = "SELECT"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    STRING = "STRING"


class SpecAttribute(BaseModel):
    key: str = Field(..., description="Identifier unique within one analysis result.")
    label: str = Field(..., description="Human-readable attribute name.")
    type: AttributeType = Field(AttributeType.STRING, description="Control type used to refine the attribute.")
    options: List[str] | None = None
    unit: str | None = None
    defaultValue: str | float | int | bool | None = None
    description: str | None = None


class PriceRange(BaseModel):
    min: float = 0
    max: float = 5000
    currency: str = "USD"


class AdUnit(BaseModel):
    brand: str = ""
    headline: str = ""
    description: str = ""
    cta: str = ""


class AnalysisResult(BaseModel):
    attributes: List[SpecAttribute] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    marketGuide: str = Field(..., description="Short buying advice for the category.")
    defaultValues: dict[str, Any] = Field(default_factory=dict, description="Initial refinement values.")
    priceRange: PriceRange
    adUnits: List[AdUnit] = Field(default_factory=list, description="Speculative placeholder ad content.")
    region: RegionInfo
