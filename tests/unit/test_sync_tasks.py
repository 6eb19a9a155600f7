"""Unit tests for the Celery order sync tasks, run eagerly."""

from contextlib import asynccontextmanager

import pytest
from helpers import FakeOrderSource, InMemoryDocumentStore, make_nodes, paginate

from order_sync_service.config import get_settings
from order_sync_service.exceptions import UpstreamError
from order_sync_service.services.order_sync import OrderSyncService
from order_sync_service.services.retry import RetryPolicy
from sync_worker.tasks import sync_orders as tasks


@pytest.fixture
def wire_service(monkeypatch: pytest.MonkeyPatch, store: InMemoryDocumentStore):
    """Point the tasks at an in-memory store and the given order source."""

    def wire(source: FakeOrderSource) -> None:
        @asynccontextmanager
        async def fake_open_sync_service(settings=None):
            yield OrderSyncService(source, store, RetryPolicy(3, 0.0), page_delay=0)

        monkeypatch.setattr(tasks, "open_sync_service", fake_open_sync_service)

    return wire


def test_bounded_sync_task(wire_service, store: InMemoryDocumentStore) -> None:
    wire_service(FakeOrderSource(open_orders=make_nodes(3)))

    result = tasks.sync_orders_from_shopify(limit=10)
    assert result == {"synced": 3, "skipped": 0, "errors": 0}


def test_bounded_sync_task_retries_upstream_errors(wire_service) -> None:
    wire_service(FakeOrderSource(open_orders_error=UpstreamError("down")))

    # Called directly, Task.retry re-raises the original exception
    with pytest.raises(UpstreamError):
        tasks.sync_orders_from_shopify(limit=10)


def test_full_sync_task_completes(wire_service, store: InMemoryDocumentStore) -> None:
    wire_service(FakeOrderSource(pages=paginate(make_nodes(12), 5)))

    result = tasks.run_full_order_sync()
    assert result["status"] == "completed"
    assert result["synced"] == 12
    assert result["job_id"].startswith("sync_")
    [job] = store.documents("sync-jobs")
    assert job["status"] == "completed"


def test_full_sync_task_reports_failure(wire_service, store: InMemoryDocumentStore) -> None:
    wire_service(FakeOrderSource(fail_on_page=0, error=UpstreamError("down")))

    result = tasks.run_full_order_sync()
    assert result["status"] == "failed"
    assert result["error"] == "down"
    [job] = store.documents("sync-jobs")
    assert job["status"] == "failed"


def test_beat_schedule_defaults(test_settings) -> None:
    from sync_worker.main import build_beat_schedule

    schedule = build_beat_schedule(test_settings)
    assert list(schedule) == ["sync-open-orders"]
    assert schedule["sync-open-orders"]["task"].endswith("sync_orders_from_shopify")


def test_beat_schedule_with_nightly_full_sync(test_settings) -> None:
    from sync_worker.main import build_beat_schedule

    settings = test_settings.model_copy(update={"sync_full_schedule_hour": 3})
    schedule = build_beat_schedule(settings)
    assert schedule["full-order-sync"]["task"].endswith("run_full_order_sync")


def test_full_sync_task_runs_without_time_limit() -> None:
    from sync_worker.main import app

    assert app.conf.task_time_limit is None
    assert app.conf.task_soft_time_limit is None
    assert tasks.run_full_order_sync.time_limit is None
    assert tasks.run_full_order_sync.soft_time_limit is None


def test_bounded_sync_task_is_time_limited() -> None:
    limit = get_settings().bounded_sync_time_limit_seconds
    assert tasks.sync_orders_from_shopify.time_limit == limit
