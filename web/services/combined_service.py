"""
Combined dashboard view: listing, statistics and price histogram in one call.
"""
import asyncio
from typing import Any, Dict, Optional

from core.config import config
from core.exceptions import CompositionError
from core.observability import get_logger
from web.schemas import ListTransactionsParams
from web.services.stats_service import StatsService
from web.services.transaction_service import TransactionService

logger = get_logger(__name__)


class CombinedService:
    """Fans out to the listing and statistics services and merges the results."""

    def __init__(self, transactions: TransactionService, stats: StatsService):
        self.transactions = transactions
        self.stats = stats

    async def combined(self, month: Optional[str]) -> Dict[str, Any]:
        """
        Run the three sub-queries concurrently and merge them.

        The listing is the first page with the default page size.

        Raises:
            CompositionError: Wrapping the first sub-query failure. Siblings
                              still running are not cancelled; their results
                              are discarded.
        """
        params = ListTransactionsParams(
            page=config.pagination.default_page,
            limit=config.pagination.default_limit,
            month=month,
        )

        try:
            listing, statistics, distribution = await asyncio.gather(
                self.transactions.list_transactions(params),
                self.stats.stats(month),
                self.stats.price_distribution(month),
            )
        except Exception as e:
            logger.error(f"Combined view failed: {type(e).__name__}: {e}")
            raise CompositionError("Error fetching combined data", cause=e) from e

        return {
            "transactions": listing,
            "statistics": statistics,
            "chart": {"priceDistribution": distribution},
        }
