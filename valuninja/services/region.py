from __future__ import annotations

import logging
from typing import Callable, Optional

from tzlocal import get_localzone_name

from valuninja.core.config import get_settings
from valuninja.models.region import RegionInfo

logger = logging.getLogger("valuninja.region")

TimeZoneReader = Callable[[], Optional[str]]

CANADA = RegionInfo(
    domain="amazon.ca",
    countryName="Canada",
    currencySymbol="CAD",
    bestBuyDomain="bestbuy.ca",
    flag="\U0001F1E8\U0001F1E6",
)
USA = RegionInfo(
    domain="amazon.com",
    countryName="USA",
    currencySymbol="USD",
    bestBuyDomain="bestbuy.com",
    flag="\U0001F1FA\U0001F1F8",
)

_CANADIAN_ZONE_MARKERS = (
    "canada",
    "toronto",
    "vancouver",
    "edmonton",
    "winnipeg",
    "halifax",
    "st_johns",
    "regina",
    "calgary",
    "ottawa",
    "montreal",
    "quebec",
    "saskatoon",
    "victoria",
)


def read_local_time_zone() -> Optional[str]:
    return get_settings().region_time_zone or get_localzone_name()


def resolve_region(time_zone: str | None = None, *, reader: TimeZoneReader | None = None) -> RegionInfo:
    """
    Guess the shopper's country from a time-zone identifier.

    An explicit ``time_zone`` wins; otherwise ``reader`` is asked for the local zone.
    Never raises: anything unreadable resolves to the USA profile.
    """
    try:
        zone = time_zone or (reader or read_local_time_zone)()
    except Exception as exc:
        logger.warning("region.time_zone_unreadable", extra={"error": str(exc)})
        return USA

    lowered = (zone or "").lower()
    if any(marker in lowered for marker in _CANADIAN_ZONE_MARKERS):
        return CANADA
    return USA
