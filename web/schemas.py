"""
Pydantic models for API requests and responses.

Request parameter structures name every optional field an endpoint accepts;
response models document the JSON shapes.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════════════════
# REQUEST PARAMETERS
# ═══════════════════════════════════════════════════════════════════════════════

class ListTransactionsParams(BaseModel):
    """Parameters of the paginated transaction listing."""
    page: int = Field(1, description="1-based page number")
    limit: int = Field(10, description="Records per page")
    search: str = Field("", description="Case-insensitive substring of title, description or category")
    month: Optional[str] = Field(None, description="Month name, e.g. 'March'; omitted means any month")


class MonthParams(BaseModel):
    """Parameters of the month-scoped statistics and chart endpoints."""
    month: Optional[str] = Field(None, description="Month name; unknown or missing matches nothing")


# ═══════════════════════════════════════════════════════════════════════════════
# TRANSACTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class TransactionResponse(BaseModel):
    """One transaction record."""
    id: int
    title: str
    description: str
    category: str
    price: float
    sold: bool
    image: Optional[str] = None
    dateOfSale: str = Field(description="Sale timestamp, ISO-8601 UTC")


class TransactionListResponse(BaseModel):
    """A page of transactions."""
    transactions: List[TransactionResponse]
    totalPages: int = Field(description="ceil(matching records / limit)")
    currentPage: int


# ═══════════════════════════════════════════════════════════════════════════════
# STATISTICS & CHARTS
# ═══════════════════════════════════════════════════════════════════════════════

class StatsResponse(BaseModel):
    """Sales statistics for one month."""
    totalSales: float = Field(description="Sum of price over sold records")
    totalSoldItems: int
    totalUnsoldItems: int


class PriceBucketResponse(BaseModel):
    """One price-range bucket of the histogram."""
    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, float, str] = Field(alias="_id", description="Lower boundary, or 'Other'")
    range: str = Field(description="Display label, e.g. '100-200' or '900-above'")
    count: int


class PriceDistributionResponse(BaseModel):
    priceDistribution: List[PriceBucketResponse]


class CategoryChartResponse(BaseModel):
    """Parallel arrays of category labels and record counts."""
    labels: List[str]
    data: List[int]


class CombinedResponse(BaseModel):
    """Listing, statistics and price histogram for one month."""
    transactions: TransactionListResponse
    statistics: StatsResponse
    chart: PriceDistributionResponse


# ═══════════════════════════════════════════════════════════════════════════════
# ERRORS & HEALTH
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorResponse(BaseModel):
    message: str
    error: Optional[str] = None


class StoreStats(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    transactions: Optional[int] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status: healthy or degraded")
    version: str
    uptime_seconds: int
    correlation_id: Optional[str] = None
    store: StoreStats
