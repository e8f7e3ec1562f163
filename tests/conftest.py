"""
Pytest fixtures for the inventory services.

Every test gets its own SQLite database file under ``tmp_path``; the three
service apps built by ``create_app`` share it, the way the deployed
services share one database.
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from stockroom.core.config import Settings
from stockroom.core.logging_config import configure_logging, reset_logging
from stockroom.db.database import Database
from stockroom.main import create_app


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    reset_logging()
    configure_logging(logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}"


@pytest.fixture
def settings(database_url):
    s = Settings(database_url=database_url)
    s.log_level = "DEBUG"
    s.cors_origins = ["*"]
    s.default_min_stock = 5
    s.default_max_stock = 100
    return s


@pytest.fixture
async def database(database_url):
    db = Database(database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def apps(settings, database):
    built = {name: create_app(name, settings) for name in ("products", "stock", "suppliers")}
    yield built
    for app in built.values():
        await app.state.database.dispose()


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.fixture
async def products_client(apps):
    async with _client(apps["products"]) as client:
        yield client


@pytest.fixture
async def stock_client(apps):
    async with _client(apps["stock"]) as client:
        yield client


@pytest.fixture
async def suppliers_client(apps):
    async with _client(apps["suppliers"]) as client:
        yield client
