"""Celery application for the order sync worker."""

from typing import Any

from celery import Celery
from celery.schedules import crontab

from order_sync_service.config import Settings, get_settings
from order_sync_service.logging_config import configure_logging

SYNC_QUEUE = "sync"
TASKS_MODULE = "sync_worker.tasks.sync_orders"


def build_beat_schedule(settings: Settings) -> dict[str, dict[str, Any]]:
    """Periodic bounded sync, plus a nightly full sync when an hour is configured."""
    schedule: dict[str, dict[str, Any]] = {
        "sync-open-orders": {
            "task": f"{TASKS_MODULE}.sync_orders_from_shopify",
            "schedule": crontab(minute=f"*/{settings.sync_orders_interval_minutes}"),
        },
    }
    if settings.sync_full_schedule_hour is not None:
        schedule["full-order-sync"] = {
            "task": f"{TASKS_MODULE}.run_full_order_sync",
            "schedule": crontab(minute=0, hour=settings.sync_full_schedule_hour),
        }
    return schedule


def create_celery_app(settings: Settings) -> Celery:
    """Create and configure the worker's Celery application."""
    celery_app = Celery(
        "sync_worker",
        broker=settings.celery_broker,
        backend=settings.celery_backend,
        include=[TASKS_MODULE],
    )
    celery_app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_track_started=True,
        worker_prefetch_multiplier=1,
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        task_default_queue=SYNC_QUEUE,
        task_routes={"sync_worker.tasks.*": {"queue": SYNC_QUEUE}},
        beat_schedule=build_beat_schedule(settings),
    )
    return celery_app


settings = get_settings()
configure_logging(settings)

app = create_celery_app(settings)


def run() -> None:
    """Run the Celery worker."""
    app.worker_main(["worker", "--loglevel=info", "-Q", SYNC_QUEUE])


if __name__ == "__main__":
    run()
