"""Health check and metrics endpoints."""
import time

from fastapi import APIRouter, Depends, Request

from core.config import VERSION
from core.duckdb_store import TransactionStore
from core.observability import Timer, get_correlation_id, metrics
from web.schemas import HealthResponse
from ._deps import START_TIME, get_logger, get_store, limiter

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
@limiter.limit("60/minute")
async def health_check(request: Request, store: TransactionStore = Depends(get_store)):
    """Health check endpoint for Docker/load balancer monitoring."""
    try:
        with Timer("health_check_store") as timer:
            stats = await store.get_stats()
        store_status = {
            "status": "connected",
            "latency_ms": round(timer.elapsed_ms, 2),
            "transactions": stats["transactions"],
        }
    except Exception as e:
        logger.warning(f"Health check store query failed: {e}")
        store_status = {"status": f"error: {e}"}

    return {
        "status": "healthy" if store_status["status"] == "connected" else "degraded",
        "version": VERSION,
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
        "store": store_status,
    }


@router.get("/metrics")
@limiter.limit("60/minute")
async def get_metrics_endpoint(request: Request):
    """In-process request, error and timing metrics."""
    return {
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
        **metrics.get_stats(),
    }
