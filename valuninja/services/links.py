from __future__ import annotations

from typing import List, Optional, Protocol
from urllib.parse import quote, urlsplit, urlunsplit

from valuninja.models.location import AffiliateConfig
from valuninja.models.products import RetailerLink
from valuninja.models.region import RegionInfo

_PLACEHOLDER_MARKERS = ("example.com", "placeholder")


class LinkableProduct(Protocol):
    brand: str
    name: str
    storeName: Optional[str]
    sourceUrl: Optional[str]


def is_real_url(url: str | None) -> bool:
    if not url or not url.startswith("http"):
        return False
    return not any(marker in url for marker in _PLACEHOLDER_MARKERS)


def search_terms(brand: str | None, name: str | None) -> str:
    return quote(" ".join(part for part in (brand, name) if part), safe="")


def google_search_url(brand: str | None, name: str | None) -> str:
    return f"https://www.google.com/search?q={search_terms(brand, name)}"


def _is_amazon(url: str) -> bool:
    return "amazon." in (urlsplit(url).hostname or "")


def _with_query_param(url: str, name: str, value: str) -> str:
    parts = urlsplit(url)
    param = f"{name}={quote(value, safe='')}"
    query = f"{parts.query}&{param}" if parts.query else param
    return urlunsplit(parts._replace(query=query))


def build_links(
    product: LinkableProduct,
    region: RegionInfo,
    affiliates: AffiliateConfig | None = None,
) -> List[RetailerLink]:
    """
    Outbound shopping links for a product, primary link first.

    A verified merchant URL leads the list when present; Google Shopping and an
    Amazon store search on the regional domain always follow.
    """
    links: list[RetailerLink] = []
    terms = search_terms(product.brand, product.name)

    if is_real_url(product.sourceUrl):
        direct_url = product.sourceUrl
        if affiliates and affiliates.impactId and not _is_amazon(direct_url):
            direct_url = _with_query_param(direct_url, "irclickid", affiliates.impactId)
        links.append(
            RetailerLink(
                name=f"Direct: {product.storeName or 'Verified Store'}",
                url=direct_url,
                icon="generic",
                isDirect=True,
            )
        )

    links.append(
        RetailerLink(
            name="Google Shopping",
            url=f"https://www.google.com/search?q={terms}&tbm=shop",
            icon="google",
        )
    )

    amazon_url = f"https://www.{region.domain}/s?k={terms}"
    if affiliates and affiliates.amazonTag:
        amazon_url = _with_query_param(amazon_url, "tag", affiliates.amazonTag)
    links.append(RetailerLink(name="Amazon Store", url=amazon_url, icon="amazon"))

    return links
