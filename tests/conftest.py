import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from posledger.core.db import Database, close_db
from posledger.core.schema import init_db
from posledger.main import create_app
from posledger.repositories import Repositories

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db():
    """A fresh in-memory database with the current schema installed."""
    database = Database(MEMORY_URL)
    await init_db(database)
    yield database
    await close_db(database)


@pytest_asyncio.fixture
async def repos(db):
    return Repositories(db)


@pytest.fixture
def client():
    # The context manager runs the lifespan, which installs the schema
    with TestClient(create_app(MEMORY_URL)) as test_client:
        yield test_client
