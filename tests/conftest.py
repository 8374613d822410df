"""
Test configuration and fixtures for the A11y Assist API.

Environment is set before the app is imported so the settings singleton
picks up the test database and secrets.
"""

import asyncio
import os
import tempfile
from typing import Generator, Optional

from dotenv import load_dotenv

load_dotenv()

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["SECRET_KEY"] = "test-demand-secret"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["SCANNER_API_URL"] = ""
os.environ["SCANNER_API_TOKEN"] = ""
os.environ["SCAN_POLL_INTERVAL"] = "0.01"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

from app.features.pages.models.page import ContentElement, FileReference, MediaFile, Page
from app.platform.auth import create_access_token
from app.platform.db.session import SessionLocal


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Test client with the app lifespan running, so tables exist and the
    shared ContentFetcher is on app.state.
    """
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


def make_auth_headers(user_id: int = 1, workspace: int = 0, languages: Optional[list] = None) -> dict:
    claims = {"sub": str(user_id), "workspace": workspace}
    if languages is not None:
        claims["languages"] = languages
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def auth_headers():
    return make_auth_headers()


@pytest.fixture
def headers_for():
    """Factory for tokens with a different editor, workspace or language list."""
    return make_auth_headers


@pytest.fixture
def seed(client):
    """
    Empty the page tables, then return a helper that inserts rows and hands
    them back with ids populated.
    """

    async def _reset():
        async with SessionLocal() as db:
            for model in (ContentElement, FileReference, MediaFile, Page):
                await db.execute(delete(model))
            await db.commit()

    asyncio.run(_reset())

    def _seed(*objects):
        async def _add():
            async with SessionLocal() as db:
                db.add_all(objects)
                await db.commit()
                for obj in objects:
                    await db.refresh(obj)

        asyncio.run(_add())
        return objects[0] if len(objects) == 1 else objects

    return _seed


@pytest.fixture
def load():
    """Read a row back through a fresh session."""

    def _load(model, object_id):
        async def _get():
            async with SessionLocal() as db:
                return await db.get(model, object_id)

        return asyncio.run(_get())

    return _load
