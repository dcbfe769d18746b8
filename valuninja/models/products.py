from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from valuninja.models.region import RegionInfo

RetailerIcon = Literal["amazon", "google", "bestbuy", "generic", "maps"]

NEUTRAL_SUB_SCORE = 7
DEFAULT_VALUE_SCORE = 75


class RetailerLink(BaseModel):
    name: str = Field(..., description="Label shown on the outbound button")
    url: str = Field(..., description="Outbound shopping URL")
    icon: RetailerIcon = Field("generic", description="Icon hint for the front end")
    isDirect: bool | None = Field(None, description="True only for a verified merchant page")


class ValueBreakdown(BaseModel):
    performance: int = NEUTRAL_SUB_SCORE
    buildQuality: int = NEUTRAL_SUB_SCORE
    featureSet: int = NEUTRAL_SUB_SCORE
    reliability: int = NEUTRAL_SUB_SCORE
    userSatisfaction: int = NEUTRAL_SUB_SCORE
    efficiency: int = NEUTRAL_SUB_SCORE
    innovation: int = NEUTRAL_SUB_SCORE
    longevity: int = NEUTRAL_SUB_SCORE
    ergonomics: int = NEUTRAL_SUB_SCORE
    dealStrength: int = NEUTRAL_SUB_SCORE


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Random per-response identifier, never reused")
    name: str
    brand: str
    price: float | None = Field(None, description="Current price as reported by the search")
    currency: str
    storeName: str | None = Field(None, description="Merchant named by the model")
    description: str = ""
    specs: dict[str, str | float | int | bool] = Field(
        default_factory=dict, description="Sparse label to value mapping for comparison tables"
    )
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)
    sourceUrl: str = Field(..., description="Verified merchant page or a search-engine fallback")
    retailers: List[RetailerLink] = Field(..., min_length=1, description="Outbound links; element 0 is primary")
    valueScore: int = Field(DEFAULT_VALUE_SCORE, description="Overall value score between 1 and 100")
    valueBreakdown: ValueBreakdown = Field(default_factory=ValueBreakdown)


class GroundingSource(BaseModel):
    title: str = ""
    uri: str


class SearchResult(BaseModel):
    products: List[Product] = Field(default_factory=list, description="Ranked product candidates")
    summary: str = Field(..., description="Short overview of the results")
    sources: List[GroundingSource] = Field(default_factory=list, description="Search citations backing the results")
    region: RegionInfo
