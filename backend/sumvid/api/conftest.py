"""API test fixtures.

Provides an async HTTP client wired to the FastAPI app with the DI container
and the database session overridden. Available to all colocated API tests
under api/.

Pattern:
    1. Override get_container -> returns test_container (real services over fakes)
    2. Override get_db        -> returns the AsyncMock ``db`` fixture
    3. Authenticate with a real bearer token from ``_auth_headers``
    4. Test hits the endpoint, asserts on HTTP response + fake state
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sumvid.api.auth import issue_token
from sumvid.api.deps import get_container, get_db


def _auth_headers(user_id: int = 1) -> dict[str, str]:
    """Authorization header carrying a valid token for *user_id*."""
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


@pytest_asyncio.fixture
async def client(test_container, db):
    """Async HTTP client with faked DI container and database session."""
    from sumvid.main import app

    async def _fake_db():
        yield db

    app.dependency_overrides[get_container] = lambda: test_container
    app.dependency_overrides[get_db] = _fake_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
