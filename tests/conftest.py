"""
Pytest configuration and shared fixtures.
"""
import os

# Must be set before core.config is imported anywhere
os.environ["TRANSACTIONS_DB_PATH"] = ":memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"

from typing import Any, Callable, Dict, List

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from core.duckdb_store import TransactionStore
from core.seed_loader import SeedLoader

SOURCE_URL = "https://dataset.test/product_transaction.json"


@pytest.fixture
def sample_records() -> List[Dict[str, Any]]:
    """Dataset items spread over March, July and December 2021."""
    return [
        {
            "id": 1,
            "title": "Mens Casual Premium Slim Fit T-Shirts",
            "description": "Slim-fitting style, contrast raglan long sleeve",
            "price": 22.3,
            "category": "men's clothing",
            "image": "https://img.test/1.jpg",
            "sold": True,
            "dateOfSale": "2021-03-27T20:29:54+05:30",
        },
        {
            "id": 2,
            "title": "Mens Cotton Jacket",
            "description": "Great outerwear jackets for Spring/Autumn/Winter",
            "price": 155.99,
            "category": "men's clothing",
            "image": "https://img.test/2.jpg",
            "sold": False,
            "dateOfSale": "2021-03-15T10:00:00Z",
        },
        {
            "id": 3,
            "title": "John Hardy Women's Legends Naga Bracelet",
            "description": "From our Legends Collection, the Naga was inspired by the dragon",
            "price": 695,
            "category": "jewelery",
            "image": "https://img.test/3.jpg",
            "sold": True,
            "dateOfSale": "2021-03-02T08:00:00Z",
        },
        {
            "id": 4,
            "title": "WD 2TB Elements Portable External Hard Drive",
            "description": "USB 3.0 and USB 2.0 compatibility, fast data transfers",
            "price": 64,
            "category": "electronics",
            "image": "https://img.test/4.jpg",
            "sold": True,
            "dateOfSale": "2021-07-11T12:00:00Z",
        },
        {
            "id": 5,
            "title": "Samsung 49-Inch Curved Gaming Monitor",
            "description": "49 inch super ultrawide 32:9 curved gaming monitor",
            "price": 999.99,
            "category": "electronics",
            "image": "https://img.test/5.jpg",
            "sold": False,
            "dateOfSale": "2021-07-20T12:00:00Z",
        },
        {
            "id": 6,
            "title": "Opna Women's Short Sleeve Moisture",
            "description": "100% Polyester, machine wash",
            "price": 7.95,
            "category": "women's clothing",
            "image": "https://img.test/6.jpg",
            "sold": False,
            # 2021-12-31T20:30Z in UTC
            "dateOfSale": "2022-01-01T02:00:00+05:30",
        },
        {
            "id": 7,
            "title": "Rain Jacket Women Windbreaker",
            "description": "Lightweight, perfect for trips or casual wear",
            "price": 39.99,
            "category": "women's clothing",
            "image": "https://img.test/7.jpg",
            "sold": True,
            "dateOfSale": "2021-12-05T09:00:00Z",
        },
    ]


@pytest.fixture
def january_records() -> List[Dict[str, Any]]:
    """Three January 2023 sales priced 50, 150 and 950."""
    return [
        {
            "title": "Budget Earbuds",
            "description": "Wired earbuds",
            "price": 50,
            "category": "electronics",
            "sold": True,
            "dateOfSale": "2023-01-05T10:00:00Z",
        },
        {
            "title": "Denim Jacket",
            "description": "Classic fit",
            "price": 150,
            "category": "men's clothing",
            "sold": False,
            "dateOfSale": "2023-01-12T10:00:00Z",
        },
        {
            "title": "Gold Ring",
            "description": "18k gold",
            "price": 950,
            "category": "jewelery",
            "sold": True,
            "dateOfSale": "2023-01-28T10:00:00Z",
        },
    ]


@pytest_asyncio.fixture
async def store():
    """Empty in-memory store."""
    store = TransactionStore(db_path=":memory:")
    await store.connect()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def seeded_store(store, sample_records):
    """In-memory store holding sample_records."""
    await store.insert_many(sample_records)
    return store


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by `handler`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def json_dataset_handler(payload: Any, status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)
    return handler


@pytest.fixture
def make_client():
    """
    Build a TestClient around a fresh in-memory store whose seed source
    answers with `payload`. The store is seeded through /initialize unless
    seed=False.
    """
    clients = []

    def _make(payload: Any, status_code: int = 200, seed: bool = True) -> TestClient:
        from web.main import create_app

        store = TransactionStore(db_path=":memory:")
        loader = SeedLoader(
            store,
            source_url=SOURCE_URL,
            client=mock_http_client(json_dataset_handler(payload, status_code)),
        )
        client = TestClient(create_app(store=store, seed_loader=loader))
        client.__enter__()
        clients.append(client)
        if seed:
            response = client.get("/initialize")
            assert response.status_code == 200, response.text
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, sample_records) -> TestClient:
    """TestClient over a store seeded with sample_records."""
    return make_client(sample_records)


@pytest.fixture
def http_client_for():
    """Factory: AsyncClient answered by a handler(request) -> httpx.Response."""
    return mock_http_client


@pytest.fixture
def dataset_client_for():
    """Factory: AsyncClient that always answers with `payload` as JSON."""
    def _make(payload: Any, status_code: int = 200) -> httpx.AsyncClient:
        return mock_http_client(json_dataset_handler(payload, status_code))
    return _make
