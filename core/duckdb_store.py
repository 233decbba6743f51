"""
DuckDB record store for transactions.

Provides bulk replace, filtered pagination, counting and grouped aggregation
over the single `transactions` table. The store handle is constructed
explicitly and passed to every service that needs it.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import duckdb
import pandas as pd

from core.config import MEMORY_DB, config
from core.exceptions import QueryTimeoutError, StoreQueryError, StoreWriteError
from core.filters import GroupSpec, PriceBuckets, TransactionFilter
from core.models import Transaction
from core.observability import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS transactions_id_seq START 1;

CREATE TABLE IF NOT EXISTS transactions (
    id BIGINT PRIMARY KEY DEFAULT nextval('transactions_id_seq'),
    title VARCHAR NOT NULL,
    description VARCHAR NOT NULL,
    category VARCHAR NOT NULL,
    price DOUBLE NOT NULL,
    sold BOOLEAN NOT NULL,
    image VARCHAR,
    date_of_sale TIMESTAMP NOT NULL  -- naive UTC
);
"""

INSERT_COLUMNS = ("title", "description", "category", "price", "sold", "image", "date_of_sale")
SELECT_COLUMNS = ("id",) + INSERT_COLUMNS


def _row_to_transaction(row: tuple) -> Transaction:
    return Transaction(
        id=row[0],
        title=row[1],
        description=row[2],
        category=row[3],
        price=row[4],
        sold=row[5],
        image=row[6],
        date_of_sale=row[7],
    )


class TransactionStore:
    """
    Async-compatible DuckDB store for transaction records.

    DuckDB connections are not safe for concurrent use, so every operation
    holds `_lock` and runs on a single-worker thread pool to keep the event
    loop free.
    """

    def __init__(
        self,
        db_path: str = None,
        query_timeout: float = None,
        write_timeout: float = None,
    ):
        self.db_path = db_path or config.store.path
        self.query_timeout = query_timeout or config.store.query_timeout
        self.write_timeout = write_timeout or config.store.write_timeout
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = asyncio.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._total_queries = 0

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        """Open the connection, create the schema and the worker thread."""
        async with self._lock:
            if self._connection is not None:
                return

            if self.db_path != MEMORY_DB:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            self._connection = duckdb.connect(self.db_path)
            self._connection.execute(SCHEMA_SQL)
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="duckdb")
            logger.info(f"DuckDB connected: {self.db_path}")

    async def close(self) -> None:
        async with self._lock:
            if self._executor:
                self._executor.shutdown(wait=True)
                self._executor = None

            if self._connection:
                self._connection.close()
                self._connection = None
                logger.info("DuckDB connection closed")

    @asynccontextmanager
    async def connection(self):
        """Yield the connection while holding the store lock."""
        if self._connection is None:
            await self.connect()
        async with self._lock:
            yield self._connection

    async def _run(self, func: Callable[[duckdb.DuckDBPyConnection], Any], sql: str, timeout: float) -> Any:
        """Run `func(conn)` on the worker thread with a timeout."""
        async with self.connection() as conn:
            self._total_queries += 1
            loop = asyncio.get_running_loop()
            try:
                return await asyncio.wait_for(
                    loop.run_in_executor(self._executor, func, conn),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                raise QueryTimeoutError(sql, timeout)

    async def _fetch_all(self, sql: str, params: list = None) -> List[tuple]:
        try:
            return await self._run(
                lambda conn: conn.execute(sql, params or []).fetchall(),
                sql,
                self.query_timeout,
            )
        except duckdb.Error as e:
            raise StoreQueryError("Query failed", str(e)) from e

    async def _fetch_one(self, sql: str, params: list = None) -> Optional[tuple]:
        rows = await self._fetch_all(sql, params)
        return rows[0] if rows else None

    # ─── Writes ──────────────────────────────────────────────────────────────

    async def insert_many(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Append a batch of dataset records.

        The batch is written in one transaction; a malformed record rejects
        the whole batch.

        Returns:
            Number of records inserted

        Raises:
            StoreWriteError: On malformed input or a database write failure
        """
        if records is None or isinstance(records, (str, bytes, dict)):
            raise StoreWriteError("Records must be a list of objects")

        rows = []
        for index, item in enumerate(records):
            try:
                transaction = Transaction.from_api(item)
            except (KeyError, ValueError, TypeError) as e:
                raise StoreWriteError(
                    f"Malformed record at index {index}", repr(e), index=index
                ) from e
            rows.append({column: getattr(transaction, column) for column in INSERT_COLUMNS})

        if not rows:
            return 0

        df = pd.DataFrame(rows, columns=list(INSERT_COLUMNS))
        df["date_of_sale"] = pd.to_datetime(df["date_of_sale"])
        df["image"] = df["image"].astype(pd.StringDtype())

        columns = ", ".join(INSERT_COLUMNS)
        sql = f"INSERT INTO transactions ({columns}) SELECT {columns} FROM incoming"

        def _insert(conn: duckdb.DuckDBPyConnection) -> int:
            conn.register("incoming", df)
            conn.execute("BEGIN TRANSACTION")
            try:
                conn.execute(sql)
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise
            finally:
                conn.unregister("incoming")
            return len(df)

        try:
            inserted = await self._run(_insert, sql, self.write_timeout)
        except duckdb.Error as e:
            raise StoreWriteError("Insert failed", str(e)) from e

        logger.info(f"Inserted {inserted} transactions")
        return inserted

    async def delete_all(self) -> int:
        """Remove every record. Idempotent; returns the number removed."""
        sql = "DELETE FROM transactions"
        try:
            result = await self._run(
                lambda conn: conn.execute(sql).fetchone(), sql, self.write_timeout
            )
        except duckdb.Error as e:
            raise StoreWriteError("Delete failed", str(e)) from e

        deleted = result[0] if result else 0
        logger.info(f"Deleted {deleted} transactions")
        return deleted

    # ─── Reads ───────────────────────────────────────────────────────────────

    async def find(
        self,
        filter: TransactionFilter = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Transaction]:
        """Return at most `limit` matching records from `offset`, in insertion order."""
        where, params = (filter or TransactionFilter()).to_sql()
        sql = (
            f"SELECT {', '.join(SELECT_COLUMNS)} FROM transactions "
            f"WHERE {where} ORDER BY id LIMIT ? OFFSET ?"
        )
        rows = await self._fetch_all(sql, params + [limit, offset])
        return [_row_to_transaction(row) for row in rows]

    async def count(self, filter: TransactionFilter = None) -> int:
        where, params = (filter or TransactionFilter()).to_sql()
        row = await self._fetch_one(f"SELECT COUNT(*) FROM transactions WHERE {where}", params)
        return row[0] if row else 0

    async def aggregate(self, group: GroupSpec) -> List[Dict[str, Any]]:
        """
        Group matching records and count them, summing `group.sum_field` if set.

        Returns:
            One dict per non-empty group: {"_id": key, "count": n[, "total": sum]}.
            Bucket keys are the bucket's lower boundary, or its default label
            for out-of-range values; bucket groups come in ascending order with
            the default last. Column groups are ordered by key.
        """
        where, params = group.filter.to_sql()

        if isinstance(group.key, PriceBuckets):
            key_sql = group.key.to_sql()
        elif group.key is None:
            key_sql = "NULL"
        else:
            key_sql = group.key

        select = [f"{key_sql} AS group_key", "COUNT(*) AS count"]
        if group.sum_field:
            select.append(f"COALESCE(SUM({group.sum_field}), 0) AS total")

        sql = f"SELECT {', '.join(select)} FROM transactions WHERE {where}"
        if group.key is not None:
            sql += " GROUP BY group_key ORDER BY group_key"

        rows = await self._fetch_all(sql, params)

        results = []
        for row in rows:
            if row[1] == 0:
                # Ungrouped aggregate over an empty match set
                continue
            result = {"_id": self._group_id(group.key, row[0]), "count": row[1]}
            if group.sum_field:
                result["total"] = row[2]
            results.append(result)

        # Default bucket (index -1) sorts first in SQL; it belongs last
        if isinstance(group.key, PriceBuckets) and results and results[0]["_id"] == group.key.default:
            results.append(results.pop(0))
        return results

    @staticmethod
    def _group_id(key: Any, value: Any) -> Any:
        if isinstance(key, PriceBuckets):
            if value < 0:
                return key.default
            return key.lower_bounds[value]
        return value

    async def get_stats(self) -> Dict[str, Any]:
        """Record count and sale date range, for health checks."""
        row = await self._fetch_one(
            "SELECT COUNT(*), MIN(date_of_sale), MAX(date_of_sale) FROM transactions"
        )
        count, min_date, max_date = row
        return {
            "transactions": count,
            "date_range": {
                "min": min_date.isoformat() if min_date else None,
                "max": max_date.isoformat() if max_date else None,
            },
            "total_queries": self._total_queries,
        }
