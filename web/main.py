"""
FastAPI application for the transactions backend.

Run with:
    uvicorn web.main:app --port 5000
or:
    python -m web.main
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.gzip import GZipMiddleware

from core.config import ConfigurationError, VERSION, config, validate_config
from core.duckdb_store import TransactionStore
from core.exceptions import SeedError
from core.observability import get_logger, setup_logging
from core.seed_loader import SeedLoader
from web.middleware import RequestLoggingMiddleware, RequestTimeoutMiddleware
from web.routes import api, transactions
from web.routes.api._deps import limiter
from web.services.combined_service import CombinedService
from web.services.stats_service import StatsService
from web.services.transaction_service import TransactionService

logger = get_logger(__name__)


def create_app(
    store: Optional[TransactionStore] = None,
    seed_loader: Optional[SeedLoader] = None,
) -> FastAPI:
    """
    Build the application around an explicit store handle.

    The store, seed loader and services are created here once and shared by
    every request through app.state.
    """
    store = store or TransactionStore()
    seed_loader = seed_loader or SeedLoader(store)
    transaction_service = TransactionService(store)
    stats_service = StatsService(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Transactions backend starting...")

        # Fail fast with clear errors
        try:
            validate_config()
        except ConfigurationError as e:
            logger.critical(f"Configuration error: {e}")
            raise SystemExit(1)

        await store.connect()

        if config.seed.seed_on_startup:
            try:
                await seed_loader.reinitialize()
            except SeedError as e:
                # Non-fatal - /initialize can be retried by hand
                logger.error(f"Startup seeding failed: {e}")

        logger.info("Transactions backend ready")
        yield

        await store.close()
        logger.info("Transactions backend stopped")

    app = FastAPI(
        title="Transactions Dashboard API",
        description="Search, statistics and chart data over product sale transactions",
        version=VERSION,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.state.store = store
    app.state.seed_loader = seed_loader
    app.state.transaction_service = transaction_service
    app.state.stats_service = stats_service
    app.state.combined_service = CombinedService(transaction_service, stats_service)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for {get_remote_address(request)}")
        return JSONResponse(
            status_code=429,
            content={
                "message": "Rate limit exceeded",
                "error": "Too many requests. Please try again later.",
                "retry_after": exc.detail,
            }
        )

    # Adds correlation IDs and timing
    app.add_middleware(RequestLoggingMiddleware)
    # Must be AFTER logging so correlation_id is set when timeout fires
    app.add_middleware(RequestTimeoutMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(transactions.router)
    app.include_router(api.router, prefix="/api")

    return app


setup_logging(
    level=os.getenv("LOG_LEVEL", "INFO"),
    json_format=os.getenv("LOG_FORMAT", "text") == "json",
)

app = create_app()


if __name__ == "__main__":
    uvicorn.run("web.main:app", host=config.web.host, port=config.web.port)
