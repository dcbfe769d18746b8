from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SearchMode(str, Enum):
    GLOBAL = "GLOBAL"
    HYBRID = "HYBRID"
    LOCAL = "LOCAL"


class UserLocation(BaseModel):
    latitude: float | None = Field(None, description="Latitude reported by the browser, if any.")
    longitude: float | None = Field(None, description="Longitude reported by the browser, if any.")
    zipCode: str | None = Field(None, description="ZIP or postal code hint; never format-validated.")
    address: str | None = Field(None, description="Free-form address hint.")
    excludeRegionSpecific: bool = Field(False, description="Search online marketplaces only.")
    radius: float = Field(50, ge=0, description="Search radius in km for local results.")
    localOnly: bool = Field(False, description="Restrict results to local pickup.")

    @property
    def searchMode(self) -> SearchMode:
        if self.excludeRegionSpecific:
            return SearchMode.GLOBAL
        if self.localOnly:
            return SearchMode.LOCAL
        return SearchMode.HYBRID

    def with_mode(self, mode: SearchMode) -> "UserLocation":
        return self.model_copy(
            update={
                "excludeRegionSpecific": mode is SearchMode.GLOBAL,
                "localOnly": mode is SearchMode.LOCAL,
            }
        )


class AffiliateConfig(BaseModel):
    amazonTag: str = Field("", description="Amazon Associates tracking tag.")
    ebayId: str = Field("", description="eBay Partner Network campaign id.")
    bestBuyId: str = Field("", description="Best Buy affiliate id.")
    impactId: str = Field("", description="Impact.com click id appended to direct merchant links.")
