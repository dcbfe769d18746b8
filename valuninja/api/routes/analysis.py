from fastapi import APIRouter, Depends

from valuninja.models.analysis import AnalysisResult
from valuninja.models.scout import AnalyzeRequest
from valuninja.services.analysis import CategoryAnalyzer

router = APIRouter(prefix="/analyze", tags=["analysis"])


def get_category_analyzer() -> CategoryAnalyzer:
    return CategoryAnalyzer.from_settings()


@router.post("", response_model=AnalysisResult)
async def analyze_category(
    request: AnalyzeRequest,
    analyzer: CategoryAnalyzer = Depends(get_category_analyzer),
) -> AnalysisResult:
    return await analyzer.analyze_async(request.query, time_zone=request.timeZone)
