from fastapi import APIRouter, Depends

from valuninja.models.products import SearchResult
from valuninja.models.scout import SearchRequest
from valuninja.services.products import ProductSearchService

router = APIRouter(prefix="/products", tags=["products"])


def get_product_search_service() -> ProductSearchService:
    return ProductSearchService.from_settings()


@router.post("/search", response_model=SearchResult)
async def search_products(
    request: SearchRequest,
    service: ProductSearchService = Depends(get_product_search_service),
) -> SearchResult:
    return await service.search_async(
        request.query,
        request.userValues,
        request.location,
        request.affiliates,
        time_zone=request.timeZone,
    )
