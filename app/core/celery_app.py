"""
Celery application configuration.

Redis is both the message broker and the result backend. Celery beat drives
the job newsletter; run it next to a worker:

    celery -A app.core.celery_app worker --beat --loglevel=info
"""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging
from app.core.config import settings
from app.core.logging_config import setup_logging

# Create Celery instance
celery_app = Celery(
    "jobsphere_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL
)

# Configure Celery
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task behavior
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,

    # Result backend
    result_expires=3600,  # Results expire after 1 hour

    # Worker behavior
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,
    worker_hijack_root_logger=False,

    # Periodic tasks
    beat_schedule={
        "send-job-newsletter": {
            "task": "send_job_newsletter",
            "schedule": float(settings.NEWSLETTER_INTERVAL_SECONDS),
        },
    },
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Workers log exactly like the API process."""
    setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)


# Auto-discover tasks from app.tasks module
celery_app.autodiscover_tasks(['app'])
