"""
Transaction listing: search, month filter and pagination over the store.
"""
import math
from typing import Any, Dict

from core.duckdb_store import TransactionStore
from core.filters import TransactionFilter
from core.models import month_filter_value
from core.observability import get_logger
from web.schemas import ListTransactionsParams

logger = get_logger(__name__)


def total_pages(count: int, limit: int) -> int:
    """Number of pages needed to show `count` records `limit` at a time."""
    return math.ceil(count / limit)


def build_listing_filter(params: ListTransactionsParams) -> TransactionFilter:
    """
    Search filter, narrowed to a month when one is given.

    An empty month means no month constraint; an unknown month name matches
    nothing.
    """
    month = month_filter_value(params.month) if params.month else None
    return TransactionFilter(search=params.search or "", month=month)


class TransactionService:
    """Paginated, searchable transaction listing."""

    def __init__(self, store: TransactionStore):
        self.store = store

    async def list_transactions(self, params: ListTransactionsParams) -> Dict[str, Any]:
        """
        Return one page of matching transactions.

        Returns:
            {"transactions": [...], "totalPages": int, "currentPage": int}
        """
        query = build_listing_filter(params)
        offset = (params.page - 1) * params.limit

        transactions = await self.store.find(query, limit=params.limit, offset=offset)
        count = await self.store.count(query)

        logger.debug(
            "Listed transactions",
            extra={"page": params.page, "limit": params.limit, "matched": count},
        )
        return {
            "transactions": [t.to_dict() for t in transactions],
            "totalPages": total_pages(count, params.limit),
            "currentPage": params.page,
        }
