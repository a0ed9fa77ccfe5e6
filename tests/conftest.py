"""
Pytest configuration and shared fixtures.
"""
import pytest
from httpx import ASGITransport, AsyncClient

from fakes import FakeDataSource
from tradeshare.api.main import app, get_datasource


@pytest.fixture
def datasource():
    return FakeDataSource()


@pytest.fixture
async def client(datasource):
    """Async HTTP client for testing FastAPI endpoints against a fake datasource."""
    app.dependency_overrides[get_datasource] = lambda: datasource
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
