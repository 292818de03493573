"""API test fixtures — ASGI client over the real app with components on app.state.

Invariants:
    - The lifespan is NOT run: fixtures put the same components it would build on app.state
    - Every test gets a fresh temp database, blob directory, and boundary fakes

Design Decisions:
    - httpx ASGITransport: exercises routing, dependencies, and error handlers in-process
"""

import pytest
from httpx import ASGITransport, AsyncClient

from soundlike.main import app


@pytest.fixture
async def client(db, blob_store, identity, fanout, settings):
    app.state.settings = settings
    app.state.db = db
    app.state.blob_store = blob_store
    app.state.identity_provider = identity
    app.state.fanout = fanout
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def auth(identity):
    """Register a user with the fake provider and return request headers."""

    def _auth(uid: str, display_name: str | None = None, verified: bool = True) -> dict:
        token = identity.add_user(
            uid, display_name=display_name,
            email=f"{uid}@example.com", verified=verified,
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth
