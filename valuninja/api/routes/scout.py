from fastapi import APIRouter, Depends

from valuninja.api.routes.analysis import get_category_analyzer
from valuninja.api.routes.products import get_product_search_service
from valuninja.models.scout import ScoutRequest, ScoutResponse
from valuninja.services.analysis import CategoryAnalyzer
from valuninja.services.products import ProductSearchService

router = APIRouter(prefix="/scout", tags=["scout"])


@router.post("", response_model=ScoutResponse)
async def run_scout(
    request: ScoutRequest,
    analyzer: CategoryAnalyzer = Depends(get_category_analyzer),
    service: ProductSearchService = Depends(get_product_search_service),
) -> ScoutResponse:
    """Category analysis followed by a product search seeded with the analysis defaults."""
    analysis = await analyzer.analyze_async(request.query, time_zone=request.timeZone)
    search = await service.search_async(
        request.query,
        analysis.defaultValues,
        request.location,
        request.affiliates,
        time_zone=request.timeZone,
    )
    return ScoutResponse(analysis=analysis, search=search)
