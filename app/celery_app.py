"""
Celery application initialization and configuration.
This module sets up Celery to use Redis as the message broker.
"""

import os

from celery import Celery
from kombu import Exchange, Queue

from app import settings  # noqa: F401  (loads .env before the URLs are read)

# Get configuration from environment variables
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
SESSION_PURGE_INTERVAL_SECONDS = int(os.getenv("SESSION_PURGE_INTERVAL_SECONDS", "3600"))

# Initialize Celery app
app = Celery(
    "issue_tracker",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# Configure task settings
app.conf.update(
    # Task serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution
    task_track_started=True,
    task_time_limit=10 * 60,  # Kill task after 10 minutes
    task_soft_time_limit=9 * 60,

    # Retry behavior
    task_acks_late=True,  # Task acknowledged after execution
    worker_prefetch_multiplier=1,

    # Task routes and queues
    task_routes={
        "app.tasks.celery_tasks.purge_expired_sessions": {"queue": "maintenance"},
    },
    task_queues=[
        Queue("default", Exchange("default"), routing_key="default"),
        Queue("maintenance", Exchange("maintenance"), routing_key="maintenance"),
    ],

    # Periodic jobs, run with `celery -A app.celery_app beat`
    beat_schedule={
        "purge-expired-sessions": {
            "task": "app.tasks.celery_tasks.purge_expired_sessions",
            "schedule": float(SESSION_PURGE_INTERVAL_SECONDS),
        },
    },
)

# Explicitly import task modules to ensure they're registered
from app.tasks import celery_tasks  # noqa: E402, F401
