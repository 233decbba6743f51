"""
Monthly statistics and chart data: sales totals, price histogram and
per-category counts.
"""
from typing import Any, Dict, List, Optional

from core.duckdb_store import TransactionStore
from core.filters import GroupSpec, PriceBuckets, TransactionFilter
from core.models import bucket_label
from core.observability import get_logger

logger = get_logger(__name__)


class StatsService:
    """Month-scoped aggregations over the transaction store."""

    def __init__(self, store: TransactionStore, buckets: PriceBuckets = None):
        self.store = store
        self.buckets = buckets or PriceBuckets()

    async def stats(self, month: Optional[str]) -> Dict[str, Any]:
        """
        Total sales value and sold/unsold counts for a month.

        A missing or unknown month matches nothing, so every figure is 0.
        """
        sold_filter = TransactionFilter.for_month(month, sold=True)
        unsold_filter = TransactionFilter.for_month(month, sold=False)

        sales = await self.store.aggregate(GroupSpec(sum_field="price", filter=sold_filter))
        sold_count = await self.store.count(sold_filter)
        unsold_count = await self.store.count(unsold_filter)

        return {
            "totalSales": sales[0]["total"] if sales else 0,
            "totalSoldItems": sold_count,
            "totalUnsoldItems": unsold_count,
        }

    async def price_distribution(self, month: Optional[str]) -> List[Dict[str, Any]]:
        """
        Histogram of a month's records over the price buckets.

        Every bucket is listed in ascending order, empty ones with count 0.
        A trailing default bucket appears only when some price falls outside
        all boundaries.
        """
        groups = await self.store.aggregate(
            GroupSpec(key=self.buckets, filter=TransactionFilter.for_month(month))
        )
        counts = {group["_id"]: group["count"] for group in groups}

        boundaries = self.buckets.boundaries
        distribution = [
            {"_id": lower, "range": bucket_label(lower, upper), "count": counts.get(lower, 0)}
            for lower, upper in zip(boundaries, boundaries[1:])
        ]

        if self.buckets.default in counts:
            distribution.append({
                "_id": self.buckets.default,
                "range": self.buckets.default,
                "count": counts[self.buckets.default],
            })
            logger.warning(
                f"{counts[self.buckets.default]} transactions priced outside all buckets",
                extra={"month": month},
            )

        return distribution

    async def category_counts(self, month: Optional[str]) -> Dict[str, List[Any]]:
        """
        Number of a month's records per category, as parallel label/count arrays.

        Serves both the bar-chart and the pie-chart endpoints.
        """
        groups = await self.store.aggregate(
            GroupSpec(key="category", filter=TransactionFilter.for_month(month))
        )
        return {
            "labels": [group["_id"] for group in groups],
            "data": [group["count"] for group in groups],
        }
