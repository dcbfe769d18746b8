from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable

from pydantic import ValidationError

from valuninja.agents.llm import ScoutLlmError, ScoutLlmFactory, get_scout_llm
from valuninja.agents.prompts import CATEGORY_ANALYSIS_PROMPT
from valuninja.agents.schemas import RawAnalysis
from valuninja.core.config import get_settings
from valuninja.core.context import scout_context
from valuninja.core.exceptions import MalformedResponse
from valuninja.core.langfuse import get_tracing_callbacks
from valuninja.models.analysis import AnalysisResult, PriceRange, SpecAttribute
from valuninja.models.region import RegionInfo
from valuninja.services.backend import remap_backend_error, require_credential, require_query
from valuninja.services.region import resolve_region
from valuninja.services.sanitizer import extract_json

logger = logging.getLogger("valuninja.scout.analysis")

DEFAULT_MARKET_GUIDE = "Analyzing market conditions..."
DEFAULT_MAX_PRICE = 5000

RegionResolver = Callable[[str | None], RegionInfo]


def seed_default_values() -> dict[str, Any]:
    return {"minPrice": 0, "maxPrice": None, "customQuery": ""}


class CategoryAnalyzer:
    """Asks the AI backend which attributes matter when shopping for a query."""

    def __init__(
        self,
        llm_factory: ScoutLlmFactory,
        *,
        api_key: str | None,
        region_resolver: RegionResolver = resolve_region,
    ) -> None:
        self._llm_factory = llm_factory
        self._api_key = api_key
        self._resolve_region = region_resolver

    @classmethod
    def from_settings(cls) -> "CategoryAnalyzer":
        settings = get_settings()
        return cls(
            get_scout_llm(settings, callbacks=get_tracing_callbacks(settings)),
            api_key=settings.resolved_api_key,
        )

    async def analyze_async(self, query: str, *, time_zone: str | None = None) -> AnalysisResult:
        query = require_query(query)
        require_credential(self._api_key)

        region = self._resolve_region(time_zone)
        with scout_context("analyze", region.countryName):
            return await self._analyze(query, region)

    async def _analyze(self, query: str, region: RegionInfo) -> AnalysisResult:
        prompt = CATEGORY_ANALYSIS_PROMPT.render(
            {"query": query, "country": region.countryName, "currency": region.currencySymbol}
        )

        start = time.perf_counter()
        logger.info("scout.analyze.start", extra={"query": query})
        try:
            llm = self._llm_factory()
            response = await llm.generate_async(prompt, prompt_id=CATEGORY_ANALYSIS_PROMPT.prompt_id)
        except ScoutLlmError as exc:
            logger.warning(
                "scout.analyze.error",
                extra={"query": query, "error": str(exc), "status_code": exc.status_code},
            )
            raise remap_backend_error(exc, "Failed to analyze category") from exc

        result = self._build_result(response.text, region)
        logger.info(
            "scout.analyze.success",
            extra={
                "query": query,
                "attributes": len(result.attributes),
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return result

    def analyze(self, query: str, *, time_zone: str | None = None) -> AnalysisResult:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.analyze_async(query, time_zone=time_zone))

        raise RuntimeError("analyze() cannot be called from an active event loop; use analyze_async().")

    def _build_result(self, text: str, region: RegionInfo) -> AnalysisResult:
        data = extract_json(text or "{}")
        if not isinstance(data, dict):
            raise MalformedResponse("Category analysis could not be parsed. The AI returned an invalid format.")
        try:
            raw = RawAnalysis.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponse(
                "Category analysis did not match the expected shape.",
                details={"errors": exc.error_count()},
            ) from exc

        attributes: list[SpecAttribute] = []
        default_values = seed_default_values()
        seen: set[str] = set()
        for attribute in raw.attributes:
            if attribute.key in seen:
                continue
            seen.add(attribute.key)
            attributes.append(
                SpecAttribute(
                    key=attribute.key,
                    label=attribute.label or attribute.key,
                    type=attribute.type,
                    options=attribute.options,
                    unit=attribute.unit,
                    defaultValue=attribute.defaultValue,
                    description=attribute.description,
                )
            )
            if attribute.has_default:
                default_values[attribute.key] = attribute.defaultValue

        price_range = PriceRange(min=0, max=DEFAULT_MAX_PRICE, currency=region.currencySymbol)
        if raw.priceRange is not None:
            price_range = PriceRange(
                min=raw.priceRange.min if raw.priceRange.min is not None else price_range.min,
                max=raw.priceRange.max if raw.priceRange.max is not None else price_range.max,
                currency=raw.priceRange.currency or price_range.currency,
            )

        return AnalysisResult(
            attributes=attributes,
            suggestions=raw.suggestions,
            marketGuide=raw.marketGuide or DEFAULT_MARKET_GUIDE,
            defaultValues=default_values,
            priceRange=price_range,
            adUnits=raw.adUnits,
            region=region,
        )
