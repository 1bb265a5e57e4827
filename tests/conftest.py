"""
Shared fixtures: an app wired to an in-memory SQLite database.
"""

import httpx
import pytest_asyncio

from config.settings import Settings
from database.session import init_models
from main import create_app

TEST_SETTINGS = Settings(
    jwt_secret="test-secret",
    password_cost=4,
    password_salt_mode="random",
    database_url="sqlite+aiosqlite://",
)


@pytest_asyncio.fixture
async def app():
    application = create_app(TEST_SETTINGS)
    await init_models(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
