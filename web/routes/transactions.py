"""Seeding, transaction listing, statistics, price chart and combined endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from core.seed_loader import SeedLoader
from core.validators import is_known_month, validate_limit, validate_page, validate_search
from web.schemas import (
    CombinedResponse,
    ErrorResponse,
    ListTransactionsParams,
    MonthParams,
    PriceDistributionResponse,
    StatsResponse,
    TransactionListResponse,
)
from web.services.combined_service import CombinedService
from web.services.stats_service import StatsService
from web.services.transaction_service import TransactionService
from web.routes.api._deps import (
    RATE_LIMIT,
    ValidationError,
    error_response,
    get_combined_service,
    get_logger,
    get_seed_loader,
    get_stats_service,
    get_transaction_service,
    limiter,
)

router = APIRouter(tags=["transactions"])
logger = get_logger(__name__)

ERROR_RESPONSES = {500: {"model": ErrorResponse}}


def _log_unknown_month(month):
    if month and not is_known_month(month):
        logger.info(f"Unknown month {month!r}; no transactions will match")


@router.get("/initialize", response_class=PlainTextResponse)
@limiter.limit("5/minute")
async def initialize(request: Request, loader: SeedLoader = Depends(get_seed_loader)):
    """Replace every transaction with the remote dataset."""
    try:
        await loader.reinitialize()
    except Exception as e:
        logger.error(f"Initialization failed: {e}")
        return PlainTextResponse("Error initializing database", status_code=500)
    return PlainTextResponse("Database Initialized", status_code=200)


@router.get("/transactions", response_model=TransactionListResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def list_transactions(
    request: Request,
    params: ListTransactionsParams = Depends(),
    service: TransactionService = Depends(get_transaction_service),
):
    """Paginated transactions, optionally searched and narrowed to a month."""
    try:
        validate_page(params.page)
        validate_limit(params.limit)
        params.search = validate_search(params.search)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _log_unknown_month(params.month)
    try:
        return await service.list_transactions(params)
    except Exception as e:
        return error_response("Error fetching transactions", e)


@router.get("/transactions/stats", response_model=StatsResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def transaction_stats(
    request: Request,
    params: MonthParams = Depends(),
    service: StatsService = Depends(get_stats_service),
):
    """Total sales and sold/unsold item counts for a month."""
    _log_unknown_month(params.month)
    try:
        return await service.stats(params.month)
    except Exception as e:
        return error_response("Error fetching statistics", e)


@router.get("/transactions/chart", response_model=PriceDistributionResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def transaction_chart(
    request: Request,
    params: MonthParams = Depends(),
    service: StatsService = Depends(get_stats_service),
):
    """Price-range histogram for a month."""
    _log_unknown_month(params.month)
    try:
        return {"priceDistribution": await service.price_distribution(params.month)}
    except Exception as e:
        return error_response("Error fetching chart data", e)


@router.get("/combined", response_model=CombinedResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMIT)
async def combined(
    request: Request,
    params: MonthParams = Depends(),
    service: CombinedService = Depends(get_combined_service),
):
    """First page of transactions, statistics and price histogram for a month."""
    _log_unknown_month(params.month)
    try:
        return await service.combined(params.month)
    except Exception as e:
        return error_response("Error fetching combined data", e)
