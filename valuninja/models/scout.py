from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from valuninja.models.analysis import AnalysisResult
from valuninja.models.location import AffiliateConfig, UserLocation
from valuninja.models.products import SearchResult


class AnalyzeRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Free-text product query.")
    timeZone: str | None = Field(None, description="IANA time zone reported by the browser.")


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Free-text product query.")
    userValues: dict[str, Any] = Field(default_factory=dict, description="Refinement values keyed by attribute.")
    location: UserLocation | None = None
    affiliates: AffiliateConfig | None = None
    timeZone: str | None = None


class ScoutRequest(BaseModel):
    query: str = Field(..., min_length=1)
    location: UserLocation | None = None
    affiliates: AffiliateConfig | None = None
    timeZone: str | None = None


class ScoutResponse(BaseModel):
    analysis: AnalysisResult
    search: SearchResult
