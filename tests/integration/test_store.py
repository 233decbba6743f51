"""
Integration tests for core/duckdb_store.py against an in-memory DuckDB.
"""
import math

import pytest

from core.duckdb_store import TransactionStore
from core.exceptions import StoreWriteError
from core.filters import GroupSpec, PriceBuckets, TransactionFilter
from core.models import INVALID_MONTH


class TestInsertAndDelete:

    @pytest.mark.asyncio
    async def test_insert_many_returns_count(self, store, sample_records):
        assert await store.insert_many(sample_records) == len(sample_records)
        assert await store.count() == len(sample_records)

    @pytest.mark.asyncio
    async def test_insert_empty_batch(self, store):
        assert await store.insert_many([]) == 0
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_insert_appends(self, store, sample_records, january_records):
        await store.insert_many(sample_records)
        await store.insert_many(january_records)
        assert await store.count() == len(sample_records) + len(january_records)

    @pytest.mark.asyncio
    async def test_malformed_record_rejects_batch(self, store, sample_records):
        del sample_records[3]["price"]
        with pytest.raises(StoreWriteError) as exc_info:
            await store.insert_many(sample_records)
        assert exc_info.value.index == 3
        assert await store.count() == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [None, "not a list", {"title": "x"}])
    async def test_rejects_non_list(self, store, payload):
        with pytest.raises(StoreWriteError):
            await store.insert_many(payload)

    @pytest.mark.asyncio
    async def test_delete_all(self, seeded_store, sample_records):
        assert await seeded_store.delete_all() == len(sample_records)
        assert await seeded_store.count() == 0

    @pytest.mark.asyncio
    async def test_delete_all_idempotent(self, store):
        assert await store.delete_all() == 0
        assert await store.delete_all() == 0

    @pytest.mark.asyncio
    async def test_ids_assigned_in_insertion_order(self, seeded_store, sample_records):
        found = await seeded_store.find(limit=100)
        ids = [t.id for t in found]
        assert ids == sorted(ids)
        assert [t.title for t in found] == [r["title"] for r in sample_records]


class TestFind:

    @pytest.mark.asyncio
    async def test_limit_and_offset(self, seeded_store, sample_records):
        page = await seeded_store.find(limit=2, offset=2)
        assert [t.title for t in page] == [sample_records[2]["title"], sample_records[3]["title"]]

    @pytest.mark.asyncio
    async def test_offset_past_end(self, seeded_store):
        assert await seeded_store.find(limit=10, offset=100) == []

    @pytest.mark.asyncio
    async def test_round_trips_fields(self, seeded_store):
        first = (await seeded_store.find(limit=1))[0]
        assert first.title == "Mens Casual Premium Slim Fit T-Shirts"
        assert first.price == pytest.approx(22.3)
        assert first.sold is True
        assert first.image == "https://img.test/1.jpg"
        assert first.date_of_sale.month == 3

    @pytest.mark.asyncio
    async def test_search_case_insensitive(self, seeded_store):
        found = await seeded_store.find(TransactionFilter(search="JACKET"), limit=10)
        assert {t.title for t in found} == {"Mens Cotton Jacket", "Rain Jacket Women Windbreaker"}

    @pytest.mark.asyncio
    async def test_search_matches_description(self, seeded_store):
        found = await seeded_store.find(TransactionFilter(search="usb"), limit=10)
        assert [t.category for t in found] == ["electronics"]

    @pytest.mark.asyncio
    async def test_search_matches_category(self, seeded_store):
        assert await seeded_store.count(TransactionFilter(search="clothing")) == 4

    @pytest.mark.asyncio
    async def test_search_is_literal(self, seeded_store):
        # Regex and LIKE metacharacters are not interpreted
        assert await seeded_store.count(TransactionFilter(search=".*")) == 0
        assert await seeded_store.count(TransactionFilter(search="%")) == 1  # "100% Polyester"

    @pytest.mark.asyncio
    async def test_month_filter(self, seeded_store):
        assert await seeded_store.count(TransactionFilter(month=3)) == 3
        assert await seeded_store.count(TransactionFilter(month=7)) == 2

    @pytest.mark.asyncio
    async def test_month_is_utc(self, seeded_store):
        # 2022-01-01T02:00+05:30 is still December in UTC
        assert await seeded_store.count(TransactionFilter(month=12)) == 2
        assert await seeded_store.count(TransactionFilter(month=1)) == 0

    @pytest.mark.asyncio
    async def test_invalid_month_matches_nothing(self, seeded_store):
        assert await seeded_store.count(TransactionFilter(month=INVALID_MONTH)) == 0

    @pytest.mark.asyncio
    async def test_combined_filter(self, seeded_store):
        f = TransactionFilter(search="jacket", month=12)
        found = await seeded_store.find(f, limit=10)
        assert [t.title for t in found] == ["Rain Jacket Women Windbreaker"]


class TestAggregate:

    @pytest.mark.asyncio
    async def test_sum_single_group(self, seeded_store):
        result = await seeded_store.aggregate(
            GroupSpec(sum_field="price", filter=TransactionFilter(month=3, sold=True))
        )
        assert len(result) == 1
        assert result[0]["count"] == 2
        assert result[0]["total"] == pytest.approx(717.3)

    @pytest.mark.asyncio
    async def test_empty_match_returns_no_groups(self, seeded_store):
        result = await seeded_store.aggregate(
            GroupSpec(sum_field="price", filter=TransactionFilter(month=INVALID_MONTH))
        )
        assert result == []

    @pytest.mark.asyncio
    async def test_group_by_category(self, seeded_store):
        result = await seeded_store.aggregate(
            GroupSpec(key="category", filter=TransactionFilter(month=3))
        )
        assert result == [
            {"_id": "jewelery", "count": 1},
            {"_id": "men's clothing", "count": 2},
        ]

    @pytest.mark.asyncio
    async def test_price_buckets(self, seeded_store):
        result = await seeded_store.aggregate(
            GroupSpec(key=PriceBuckets(), filter=TransactionFilter(month=3))
        )
        assert result == [
            {"_id": 0, "count": 1},
            {"_id": 100, "count": 1},
            {"_id": 600, "count": 1},
        ]

    @pytest.mark.asyncio
    async def test_bucket_boundaries_inclusive_lower(self, store):
        records = [
            {"title": f"item {p}", "description": "d", "category": "c", "price": p,
             "sold": True, "dateOfSale": "2021-05-01T00:00:00Z"}
            for p in (0, 99.99, 100, 899.99, 900, 100000)
        ]
        await store.insert_many(records)
        result = await store.aggregate(GroupSpec(key=PriceBuckets()))
        assert result == [
            {"_id": 0, "count": 2},
            {"_id": 100, "count": 1},
            {"_id": 800, "count": 1},
            {"_id": 900, "count": 2},
        ]

    @pytest.mark.asyncio
    async def test_out_of_range_goes_to_default_last(self, store):
        records = [
            {"title": "refund", "description": "d", "category": "c", "price": -5,
             "sold": False, "dateOfSale": "2021-05-01T00:00:00Z"},
            {"title": "item", "description": "d", "category": "c", "price": 250,
             "sold": True, "dateOfSale": "2021-05-01T00:00:00Z"},
        ]
        await store.insert_many(records)
        result = await store.aggregate(GroupSpec(key=PriceBuckets()))
        assert result == [
            {"_id": 200, "count": 1},
            {"_id": "Other", "count": 1},
        ]

    @pytest.mark.asyncio
    async def test_custom_buckets(self, seeded_store):
        buckets = PriceBuckets(boundaries=(0, 50, math.inf), default="Unpriced")
        result = await seeded_store.aggregate(GroupSpec(key=buckets))
        assert result == [{"_id": 0, "count": 3}, {"_id": 50, "count": 4}]


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_lazy_connect(self, sample_records):
        store = TransactionStore(db_path=":memory:")
        assert not store.is_connected
        try:
            await store.insert_many(sample_records)
            assert store.is_connected
        finally:
            await store.close()
        assert not store.is_connected

    @pytest.mark.asyncio
    async def test_file_backed_store_persists(self, tmp_path, sample_records):
        path = str(tmp_path / "nested" / "transactions.duckdb")
        store = TransactionStore(db_path=path)
        await store.insert_many(sample_records)
        await store.close()

        reopened = TransactionStore(db_path=path)
        try:
            assert await reopened.count() == len(sample_records)
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_get_stats(self, seeded_store, sample_records):
        stats = await seeded_store.get_stats()
        assert stats["transactions"] == len(sample_records)
        assert stats["date_range"]["min"].startswith("2021-03-02")
        assert stats["date_range"]["max"].startswith("2021-12-31")
