"""
Test fixtures for AI Trends tests.
"""

import os
import tempfile

import httpx
import pytest
from click.testing import CliRunner

from src.analyzers.base import LLMProvider
from src.database import Database
from src.errors import ProviderError, ScrapeError
from src.scouts.jina import JinaClient
from src.scraper.scraper import ScrapedTool
from src.throttle import Throttle, no_sleep


class StubProvider(LLMProvider):
    """LLM provider returning a canned response, or raising ProviderError."""

    def __init__(self, response: str = None, name: str = 'stub', error: str = None):
        self.response = response
        self.name = name
        self.error = error
        self.prompts = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise ProviderError(self.error)
        return self.response


class FakeScraper:
    """Scraper serving ScrapedTool objects from a dict; unknown URLs fail."""

    def __init__(self, pages: dict):
        self.pages = pages
        self.calls = []

    def scrape(self, url: str, bypass_cache: bool = False) -> ScrapedTool:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            raise ScrapeError(f"Reader failed for {url}")
        if isinstance(page, Exception):
            raise page
        return page


def make_jina_client(handler) -> JinaClient:
    """JinaClient whose HTTP calls go to handler(request) -> httpx.Response."""
    return JinaClient(
        api_key='test-key',
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        throttle=Throttle(0, sleep=no_sleep),
    )


@pytest.fixture
def runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing.

    Uses check_same_thread=False to allow use with FastAPI TestClient
    which runs in a different thread.
    """
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = f.name

    db = Database(db_path, check_same_thread=False)
    db.init_schema()

    yield db

    # Cleanup
    db.close()
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def temp_db_path():
    """Return a path to a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = f.name

    yield db_path

    # Cleanup
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def mock_config(monkeypatch, temp_db_path):
    """Mock the config loading to use temp database."""
    def mock_load_config():
        return {
            "database": {"path": temp_db_path},
            "logging": {"level": "WARNING"},
            "api_keys": {}
        }

    monkeypatch.setattr("src.cli.load_config", mock_load_config)
    monkeypatch.setattr("src.config.load_config", mock_load_config)

    return temp_db_path


@pytest.fixture
def category_id(temp_db):
    """A seeded 'Coding AI' category."""
    return temp_db.add_category("Coding AI", "coding-ai", icon="Code", description="Tools for coding ai")


@pytest.fixture
def approved_tool(temp_db, category_id):
    """An approved tool with a website, ready for metrics and refresh runs."""
    tool_id = temp_db.add_tool(
        name="Example",
        slug="example",
        tagline="An example AI tool",
        logo="https://example.ai/logo.png",
        category_id=category_id,
        status="approved",
        description="Example helps you write code faster.",
        website="https://example.ai",
    )
    return temp_db.get_tool(tool_id)


@pytest.fixture
def scraped_example():
    """Scraped data for https://example.ai."""
    return ScrapedTool(
        name="Example",
        website="https://example.ai",
        tagline="An example AI tool",
        description="Example helps you write code faster.",
        features=["Autocomplete for every editor", "Chat with your codebase"],
        pricing={"model": "freemium"},
        logo="https://example.ai/logo.png",
        github="https://github.com/example/example",
        tags=["ai", "developer tools"],
        raw_content="Example helps you write code faster.",
    )


API_CONFIG = {
    "database": {"enabled": True},
    "app": {"url": "https://aitrends.example"},
    "cron": {"secret": "cron-secret"},
}


@pytest.fixture
def client(temp_db):
    """FastAPI test client backed by the temporary database.

    The app lifespan is not entered, so no database is opened from config.
    """
    from fastapi.testclient import TestClient
    from web.api import deps
    from web.api.main import app

    app.dependency_overrides[deps.get_db] = lambda: temp_db
    app.dependency_overrides[deps.get_config] = lambda: API_CONFIG

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    """Authorization header for a freshly registered admin."""
    client.post("/api/auth/register", json={
        "username": "admin",
        "email": "admin@example.com",
        "password": "password123",
    })
    response = client.post("/api/auth/login", json={"username": "admin", "password": "password123"})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
