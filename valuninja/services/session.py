from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol

from valuninja.core.exceptions import AppError, InvalidQueryError
from valuninja.models.analysis import AnalysisResult
from valuninja.models.location import AffiliateConfig, UserLocation
from valuninja.models.products import SearchResult

logger = logging.getLogger("valuninja.scout.session")


class Analyzer(Protocol):
    async def analyze_async(self, query: str, *, time_zone: str | None = None) -> AnalysisResult:
        ...


class ProductSearcher(Protocol):
    async def search_async(
        self,
        query: str,
        user_values: dict[str, Any] | None = None,
        location: UserLocation | None = None,
        affiliates: AffiliateConfig | None = None,
        *,
        time_zone: str | None = None,
    ) -> SearchResult:
        ...


class ScoutStage(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    LOADING_PRODUCTS = "LOADING_PRODUCTS"
    SEARCHING = "SEARCHING"
    RESULTS = "RESULTS"


@dataclass
class ScoutFailure:
    type: str
    message: str


@dataclass
class ScoutState:
    query: str = ""
    stage: ScoutStage = ScoutStage.IDLE
    analysis: Optional[AnalysisResult] = None
    userValues: dict[str, Any] = field(default_factory=dict)
    search: Optional[SearchResult] = None
    error: Optional[ScoutFailure] = None


class ScoutSession:
    """
    Sequences category analysis and product search for one shopper.

    Every ``start``/``refine`` call takes a new generation. Work finishing for an older
    generation is dropped, so the most recently started request always owns the state.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        searcher: ProductSearcher,
        *,
        location: UserLocation | None = None,
        affiliates: AffiliateConfig | None = None,
        time_zone: str | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._searcher = searcher
        self.location = location
        self.affiliates = affiliates
        self.time_zone = time_zone
        self.state = ScoutState()
        self._generation = 0

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, generation: int, step: str) -> bool:
        if generation == self._generation:
            return False
        logger.info(
            "scout.session.stale_discarded",
            extra={"step": step, "generation": generation, "current_generation": self._generation},
        )
        return True

    def _fail(self, exc: AppError) -> None:
        logger.warning("scout.session.failed", extra={"error_type": exc.error_type, "error": exc.message})
        self.state.stage = ScoutStage.IDLE
        self.state.search = None
        self.state.error = ScoutFailure(type=exc.error_type, message=exc.message)

    async def start(self, query: str) -> bool:
        """Analyze then search. Returns False when the run failed or was superseded."""
        generation = self._next_generation()
        self.state = ScoutState(query=query, stage=ScoutStage.ANALYZING)

        try:
            analysis = await self._analyzer.analyze_async(query, time_zone=self.time_zone)
        except AppError as exc:
            if not self._is_stale(generation, "analyze"):
                self._fail(exc)
            return False
        if self._is_stale(generation, "analyze"):
            return False

        self.state.analysis = analysis
        self.state.userValues = dict(analysis.defaultValues)
        self.state.stage = ScoutStage.LOADING_PRODUCTS
        return await self._search(generation, "search")

    async def refine(self, user_values: dict[str, Any]) -> bool:
        """Re-run the product search for the current query with updated refinement values."""
        if not self.state.query:
            raise InvalidQueryError("No active query to refine.")

        generation = self._next_generation()
        self.state.userValues = {**self.state.userValues, **user_values}
        self.state.stage = ScoutStage.SEARCHING
        self.state.error = None
        return await self._search(generation, "refine")

    async def _search(self, generation: int, step: str) -> bool:
        try:
            result = await self._searcher.search_async(
                self.state.query,
                self.state.userValues,
                self.location,
                self.affiliates,
                time_zone=self.time_zone,
            )
        except AppError as exc:
            if not self._is_stale(generation, step):
                self._fail(exc)
            return False
        if self._is_stale(generation, step):
            return False

        self.state.search = result
        self.state.stage = ScoutStage.RESULTS
        return True

    def reset(self) -> None:
        self._next_generation()
        self.state = ScoutState()
