"""
pytest configuration and fixtures
Services run against the in-memory pool from fake_db; no database required.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

import pytest
from fastapi.testclient import TestClient

from database import connection
from fake_db import FakePool, FakeStore
from services.customer_service import CustomerService


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def pool(store):
    """Install a fake pool as the application's database pool"""
    fake_pool = FakePool(store)
    connection.set_db_pool(fake_pool)
    yield fake_pool
    connection.set_db_pool(None)


@pytest.fixture
def service(pool) -> CustomerService:
    return CustomerService()


@pytest.fixture
def client(pool):
    """HTTP client for the app; unhandled errors come back as 500 responses"""
    from app import create_app

    with TestClient(create_app(use_lifespan=False), raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def customer_payload():
    return {
        "first_name": "A",
        "last_name": "B",
        "phone_number": "1234567890",
        "address_details": "X",
        "city": "Y",
        "state": "Z",
        "pin_code": "123456",
    }
