"""Category chart endpoints (bar and pie share one implementation)."""
from fastapi import APIRouter, Depends, Request

from web.schemas import CategoryChartResponse, MonthParams
from web.services.stats_service import StatsService
from ._deps import RATE_LIMIT, error_response, get_stats_service, limiter

router = APIRouter()


@router.get("/bar-chart-data", response_model=CategoryChartResponse)
@limiter.limit(RATE_LIMIT)
async def bar_chart_data(
    request: Request,
    params: MonthParams = Depends(),
    service: StatsService = Depends(get_stats_service),
):
    """Transactions per category for a month, for a bar chart."""
    try:
        return await service.category_counts(params.month)
    except Exception as e:
        return error_response("Error fetching bar chart data", e, include_error=False)


@router.get("/pie-chart-data", response_model=CategoryChartResponse)
@limiter.limit(RATE_LIMIT)
async def pie_chart_data(
    request: Request,
    params: MonthParams = Depends(),
    service: StatsService = Depends(get_stats_service),
):
    """Transactions per category for a month, for a pie chart."""
    try:
        return await service.category_counts(params.month)
    except Exception as e:
        return error_response("Error fetching pie chart data", e, include_error=False)
