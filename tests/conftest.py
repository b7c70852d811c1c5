"""Shared pytest configuration and fixtures.

Fakes live in tests/fakes.py so test modules can build their own.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

import pytest

from inventory_seeder.config import Settings
from inventory_seeder.llm_parser import validate_record
from inventory_seeder.models import Record
from inventory_seeder.vectorstore_mongo import MongoVectorStore
from tests.fakes import FakeCollection, FakeMongoClient


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ──────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────


def _record_dict(i: int) -> Dict[str, Any]:
    return {
        "item_id": f"item-{i:03d}",
        "item_name": f"Chair {i}",
        "item_description": f"Comfortable chair model {i}.",
        "brand": "Nordic Home",
        "manufacturer_address": {
            "street": f"{i} Birch Lane",
            "city": "Oslo",
            "state": "Oslo",
            "postal_code": "0150",
            "country": "Norway",
        },
        "prices": {"full_price": 100.0 + i, "sale_price": 80.0 + i},
        "categories": ["Seating", "Living Room"],
        "user_reviews": [
            {"review_date": "2024-03-01", "rating": 4, "comment": "Very comfy."},
        ],
        "notes": "Ships flat-packed.",
    }


@pytest.fixture
def record_dict() -> Callable[[int], Dict[str, Any]]:
    """Factory for valid raw record dicts, as the LLM would emit them."""
    return _record_dict


@pytest.fixture
def make_records() -> Callable[[int], List[Record]]:
    def _make(n: int) -> List[Record]:
        return [validate_record(_record_dict(i)) for i in range(1, n + 1)]

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(mongodb_uri="mongodb://fake:27017", openai_api_key="sk-test")


@pytest.fixture
def mongo_client() -> FakeMongoClient:
    return FakeMongoClient()


@pytest.fixture
def store(settings: Settings, mongo_client: FakeMongoClient) -> MongoVectorStore:
    return MongoVectorStore(settings, client=mongo_client, index_poll_s=0.5, index_drop_attempts=5, sleep=lambda seconds: None)


@pytest.fixture
def collection(store: MongoVectorStore) -> FakeCollection:
    return store.collection
