from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RegionInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    countryName: str
    currencySymbol: str
    bestBuyDomain: str | None = None
    flag: str
