"""Shared dependencies for route modules."""
import time

from fastapi import Request
from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import config
from core.duckdb_store import TransactionStore
from core.exceptions import ValidationError
from core.observability import get_logger
from core.seed_loader import SeedLoader
from web.services.combined_service import CombinedService
from web.services.stats_service import StatsService
from web.services.transaction_service import TransactionService

# Shared limiter instance, also installed on app.state
limiter = Limiter(key_func=get_remote_address, enabled=config.web.rate_limit_enabled)
RATE_LIMIT = config.web.rate_limit

# Track startup time for uptime calculation
START_TIME = time.time()

logger = get_logger(__name__)


# Components are built once by create_app() and kept on app.state

def get_store(request: Request) -> TransactionStore:
    return request.app.state.store


def get_seed_loader(request: Request) -> SeedLoader:
    return request.app.state.seed_loader


def get_transaction_service(request: Request) -> TransactionService:
    return request.app.state.transaction_service


def get_stats_service(request: Request) -> StatsService:
    return request.app.state.stats_service


def get_combined_service(request: Request) -> CombinedService:
    return request.app.state.combined_service


def error_response(message: str, exc: Exception = None, include_error: bool = True) -> ORJSONResponse:
    """
    500 response for a failed operation.

    Body is {"message": ..., "error": ...}, or {"error": message} when
    include_error is False.
    """
    if exc is not None:
        logger.error(f"{message}: {type(exc).__name__}: {exc}", exc_info=exc)
    if not include_error:
        return ORJSONResponse(status_code=500, content={"error": message})
    return ORJSONResponse(
        status_code=500,
        content={"message": message, "error": str(exc) if exc is not None else None},
    )


__all__ = [
    "limiter",
    "RATE_LIMIT",
    "START_TIME",
    "get_logger",
    "get_store",
    "get_seed_loader",
    "get_transaction_service",
    "get_stats_service",
    "get_combined_service",
    "error_response",
    "ValidationError",
]
