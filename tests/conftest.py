"""Pytest configuration and fixtures."""

from typing import Any

import pytest
from fastapi.testclient import TestClient
from helpers import FakeOrderSource, InMemoryDocumentStore

from order_sync_service.api.dependencies import (
    get_background_runner,
    get_document_store,
    get_order_source,
)
from order_sync_service.config import Settings, get_settings
from order_sync_service.main import create_app
from order_sync_service.services.retry import RetryPolicy


class RecordingRunner:
    """Background runner that records launches instead of scheduling them."""

    def __init__(self) -> None:
        self.launched: list[str] = []

    def launch(self, job_id: str, coro: Any) -> None:
        self.launched.append(job_id)
        coro.close()


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        postgres_host="localhost",
        postgres_user="test",
        postgres_password="test",
        postgres_db="test_db",
        shopify_store_url="https://test-shop.myshopify.com",
        shopify_access_token="shpat_test",
        sync_page_delay_seconds=0.0,
        store_retry_delay_seconds=0.0,
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def source() -> FakeOrderSource:
    return FakeOrderSource()


@pytest.fixture
def retry() -> RetryPolicy:
    """Retry policy with no delay between attempts."""
    return RetryPolicy(max_attempts=3, initial_delay=0.0)


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def app(
    test_settings: Settings,
    store: InMemoryDocumentStore,
    source: FakeOrderSource,
    runner: RecordingRunner,
) -> Any:
    """Create test application wired to in-memory fakes."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_order_source] = lambda: source
    app.dependency_overrides[get_background_runner] = lambda: runner
    app.state.order_source = source
    return app


@pytest.fixture
def client(app: Any) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)
