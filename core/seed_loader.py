"""
Seed loader: replaces the store contents with a remote JSON dataset.

The replace is clear-then-insert. It is not atomic: readers running during a
reseed may see an empty or partially filled store, and a failed insert after
a successful delete leaves the store empty. No retries are attempted.
"""
from typing import Any, Dict, List, Optional

import httpx

from core.config import config
from core.duckdb_store import TransactionStore
from core.exceptions import FetchError, SeedError, TransactionsError
from core.observability import Timer, get_correlation_id, get_logger

logger = get_logger(__name__)


class SeedLoader:
    """
    Fetches the dataset over HTTP and reseeds the store.

    Usage:
        loader = SeedLoader(store)
        inserted = await loader.reinitialize()

    An `httpx.AsyncClient` may be injected (tests pass one built on
    `httpx.MockTransport`); otherwise a short-lived client is created per fetch.
    """

    def __init__(
        self,
        store: TransactionStore,
        source_url: str = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = None,
    ):
        self.store = store
        self.source_url = source_url or config.seed.source_url
        self.timeout = timeout or config.seed.request_timeout
        self._client = client

    async def fetch(self) -> List[Dict[str, Any]]:
        """
        GET the dataset.

        Raises:
            FetchError: On network failure, non-2xx status, or a body that
                        is not a JSON array
        """
        headers = {"Accept": "application/json"}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Request-ID"] = correlation_id

        try:
            if self._client is not None:
                response = await self._client.get(self.source_url, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.source_url, headers=headers)
        except httpx.HTTPError as e:
            raise FetchError(f"Could not reach {self.source_url}", str(e)) from e

        if not response.is_success:
            raise FetchError(
                f"Dataset request failed with HTTP {response.status_code}",
                response.reason_phrase,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError("Dataset response is not valid JSON", str(e)) from e

        if not isinstance(payload, list):
            raise FetchError(
                "Dataset response is not a JSON array",
                f"got {type(payload).__name__}",
            )

        return payload

    async def reinitialize(self) -> int:
        """
        Fetch the dataset, delete every record, then insert the fetched batch.

        Returns:
            Number of records inserted

        Raises:
            SeedError: If the fetch, the delete or the insert failed
        """
        logger.info("Reseeding store", extra={"source": self.source_url})

        with Timer("reseed", logger) as timer:
            try:
                items = await self.fetch()
                deleted = await self.store.delete_all()
                inserted = await self.store.insert_many(items)
            except TransactionsError as e:
                logger.error(f"Reseed failed: {e}")
                raise SeedError("Error initializing database", str(e)) from e

        logger.info(
            f"Store reseeded: {inserted} transactions",
            extra={"deleted": deleted, "duration_ms": round(timer.elapsed_ms, 2)},
        )
        return inserted
