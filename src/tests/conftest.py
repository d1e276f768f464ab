import pytest
from httpx import AsyncClient, ASGITransport
from app import app, get_repository, limiter
from core.repository import InMemorySwoshRepository


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_rate_limits():
    # Every test talks to the API from the same client address
    limiter.reset()


@pytest.fixture
def repo():
    return InMemorySwoshRepository()


@pytest.fixture
async def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    async with AsyncClient(base_url="http://test", transport=ASGITransport(app=app)) as client:
        yield client
    app.dependency_overrides.clear()
