from celery import Celery
from app.core.config import settings

NOTIFICATION_TASKS = "app.tasks.notification_tasks"

# Budget alert e-mails are the only background work; the API never waits on them
celery_app = Celery(
    "expense_tracker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[NOTIFICATION_TASKS],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=3600,
    timezone="UTC",
    enable_utc=True,
    broker_connection_retry_on_startup=True,
    task_default_queue="default",
    task_routes={
        f"{NOTIFICATION_TASKS}.*": {"queue": "priority"},
    },
    task_annotations={
        f"{NOTIFICATION_TASKS}.send_budget_alert_email": {"rate_limit": "60/m"},
    },
    task_time_limit=60,
)

if __name__ == "__main__":
    celery_app.start()
