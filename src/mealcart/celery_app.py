"""Celery application configuration for background task processing."""

import os

from celery import Celery

from mealcart.config import get_settings

settings = get_settings()

# Result backend uses the sync driver
RESULT_BACKEND_URL = settings.sync_database_url.replace("postgresql://", "db+postgresql://")

# Create Celery application
celery_app = Celery(
    "mealcart",
    broker=settings.redis_url,
    backend=RESULT_BACKEND_URL,
    include=[
        "mealcart.tasks.shopping",
    ],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution settings
    task_acks_late=True,  # Acknowledge after task completes (for reliability)
    task_reject_on_worker_lost=True,  # Requeue if worker dies
    worker_prefetch_multiplier=1,  # One task at a time per worker
    # Result settings
    result_expires=86400 * 7,  # Results expire after 7 days
    # Retry settings (default for all tasks)
    task_default_retry_delay=30,
    task_max_retries=3,
    # Queue routing
    task_routes={
        "mealcart.tasks.shopping.*": {"queue": "shopping"},
    },
    # Logging
    worker_hijack_root_logger=False,  # Don't hijack root logger
)

if os.name == "nt":
    celery_app.conf.update(
        worker_pool="solo",  # Use solo pool on Windows
    )
