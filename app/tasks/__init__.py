# Tasks package
from .notification_tasks import send_budget_alert_email

__all__ = [
    "send_budget_alert_email",
]
