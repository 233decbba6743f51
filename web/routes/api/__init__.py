"""
Routes mounted under /api.

Each sub-module defines its own APIRouter which is composed
into the top-level router exposed by this package.
"""
from fastapi import APIRouter

from .charts import router as charts_router
from .health import router as health_router

router = APIRouter(tags=["api"])

router.include_router(health_router)
router.include_router(charts_router)
