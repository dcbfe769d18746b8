from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from typing import Any, Callable, Sequence

from pydantic import ValidationError

from valuninja.agents.llm import GroundingChunk, ScoutLlmError, ScoutLlmFactory, get_scout_llm
from valuninja.agents.prompts import PRODUCT_SEARCH_PROMPT
from valuninja.agents.schemas import RawProduct, RawProductBatch
from valuninja.core.config import get_settings
from valuninja.core.context import scout_context
from valuninja.core.exceptions import MalformedResponse
from valuninja.core.langfuse import get_tracing_callbacks
from valuninja.models.location import AffiliateConfig, SearchMode, UserLocation
from valuninja.models.products import DEFAULT_VALUE_SCORE, GroundingSource, Product, SearchResult
from valuninja.models.region import RegionInfo
from valuninja.services.backend import remap_backend_error, require_credential, require_query
from valuninja.services.links import build_links, google_search_url, is_real_url
from valuninja.services.region import resolve_region
from valuninja.services.sanitizer import extract_json

logger = logging.getLogger("valuninja.scout.products")

DEFAULT_SUMMARY = "Search results generated."

RegionResolver = Callable[[str | None], RegionInfo]


def new_product_id() -> str:
    return uuid.uuid4().hex[:12]


def describe_location(location: UserLocation | None) -> str:
    """Location context for the search prompt, following the shopper's search mode."""
    if location is None:
        return "Online Marketplace"

    mode = location.searchMode
    if mode is SearchMode.GLOBAL:
        return "Online marketplaces only; ignore local store availability"
    if not location.zipCode:
        return "Online Marketplace"

    radius = f"{location.radius:g}"
    if mode is SearchMode.LOCAL:
        return f"Local pickup only, within {radius} km of {location.zipCode}"
    return f"Searching near {location.zipCode} (within {radius} km); online retailers are also acceptable"


def collect_sources(citations: Sequence[GroundingChunk]) -> list[GroundingSource]:
    return [GroundingSource(title=chunk.title, uri=chunk.uri) for chunk in citations if is_real_url(chunk.uri)]


def recover_source_url(product: RawProduct, sources: Sequence[GroundingSource]) -> str | None:
    """
    Best-effort merchant URL from search citations.

    Picks the first citation whose title mentions the brand or the model name. This
    is an approximation: a citation about a sibling product can match as well.
    """
    needles = [needle.lower() for needle in (product.brand, product.name) if needle]
    if not needles:
        return None
    for source in sources:
        title = source.title.lower()
        if any(needle in title for needle in needles):
            return source.uri
    return None


class ProductSearchService:
    """Runs the grounded product search and turns model output into display-ready products."""

    def __init__(
        self,
        llm_factory: ScoutLlmFactory,
        *,
        api_key: str | None,
        default_affiliates: AffiliateConfig | None = None,
        region_resolver: RegionResolver = resolve_region,
    ) -> None:
        self._llm_factory = llm_factory
        self._api_key = api_key
        self._default_affiliates = default_affiliates
        self._resolve_region = region_resolver

    @classmethod
    def from_settings(cls) -> "ProductSearchService":
        settings = get_settings()
        return cls(
            get_scout_llm(settings, callbacks=get_tracing_callbacks(settings)),
            api_key=settings.resolved_api_key,
            default_affiliates=settings.default_affiliates,
        )

    async def search_async(
        self,
        query: str,
        user_values: dict[str, Any] | None = None,
        location: UserLocation | None = None,
        affiliates: AffiliateConfig | None = None,
        *,
        time_zone: str | None = None,
    ) -> SearchResult:
        query = require_query(query)
        require_credential(self._api_key)

        region = self._resolve_region(time_zone)
        with scout_context("search", region.countryName):
            return await self._search(query, region, user_values, location, affiliates)

    async def _search(
        self,
        query: str,
        region: RegionInfo,
        user_values: dict[str, Any] | None,
        location: UserLocation | None,
        affiliates: AffiliateConfig | None,
    ) -> SearchResult:
        prompt = PRODUCT_SEARCH_PROMPT.render(
            {
                "query": query,
                "country": region.countryName,
                "currency": region.currencySymbol,
                "user_values": json.dumps(user_values or {}, default=str),
                "location": describe_location(location),
            }
        )

        start = time.perf_counter()
        logger.info(
            "scout.search.start",
            extra={"query": query, "mode": location.searchMode.value if location else None},
        )
        try:
            llm = self._llm_factory()
            response = await llm.generate_async(prompt, prompt_id=PRODUCT_SEARCH_PROMPT.prompt_id, grounded=True)
        except ScoutLlmError as exc:
            logger.warning(
                "scout.search.error",
                extra={"query": query, "error": str(exc), "status_code": exc.status_code},
            )
            raise remap_backend_error(exc, "Product search failed due to an unknown error.") from exc

        batch = self._parse_batch(response.text)
        sources = collect_sources(response.citations)
        products = [
            self._to_product(raw, region, sources, affiliates or self._default_affiliates)
            for raw in batch.products
        ]

        logger.info(
            "scout.search.success",
            extra={
                "query": query,
                "products": len(products),
                "sources": len(sources),
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return SearchResult(
            products=products,
            summary=batch.summary or DEFAULT_SUMMARY,
            sources=sources,
            region=region,
        )

    def search(
        self,
        query: str,
        user_values: dict[str, Any] | None = None,
        location: UserLocation | None = None,
        affiliates: AffiliateConfig | None = None,
        *,
        time_zone: str | None = None,
    ) -> SearchResult:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(
                self.search_async(query, user_values, location, affiliates, time_zone=time_zone)
            )

        raise RuntimeError("search() cannot be called from an active event loop; use search_async().")

    @staticmethod
    def _parse_batch(text: str) -> RawProductBatch:
        data = extract_json(text)
        if data is None:
            raise MalformedResponse("Search results could not be decoded. The AI returned an invalid format.")
        if not isinstance(data, dict) or not isinstance(data.get("products"), list):
            raise MalformedResponse("No products identified for this query.")
        try:
            return RawProductBatch.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponse(
                "Search results did not match the expected shape.",
                details={"errors": exc.error_count()},
            ) from exc

    @staticmethod
    def _to_product(
        raw: RawProduct,
        region: RegionInfo,
        sources: Sequence[GroundingSource],
        affiliates: AffiliateConfig | None,
    ) -> Product:
        verified_url = raw.sourceUrl
        if not is_real_url(verified_url):
            verified_url = recover_source_url(raw, sources)
            if verified_url:
                logger.info(
                    "scout.search.url_recovered",
                    extra={"brand": raw.brand, "product": raw.name, "uri": verified_url},
                )

        linkable = raw.model_copy(update={"sourceUrl": verified_url})
        return Product(
            id=new_product_id(),
            name=raw.name,
            brand=raw.brand,
            price=raw.price,
            currency=raw.currency or region.currencySymbol,
            storeName=raw.storeName,
            description=raw.description,
            specs=raw.specs,
            pros=raw.pros,
            cons=raw.cons,
            sourceUrl=verified_url if is_real_url(verified_url) else google_search_url(raw.brand, raw.name),
            retailers=build_links(linkable, region, affiliates),
            valueScore=raw.valueScore or DEFAULT_VALUE_SCORE,
            valueBreakdown=raw.breakdown(),
        )
