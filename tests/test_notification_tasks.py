from decimal import Decimal
import uuid

import pytest
import resend

from app.core.config import settings
from app.schemas.alert import AlertTier, BudgetAlert
from app.services.alert_service import queue_alert_email
from app.services.email_service import EmailService
from app.tasks.notification_tasks import send_budget_alert_email


@pytest.fixture
def outbox(monkeypatch):
    sent = []
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test_key")
    monkeypatch.setattr(resend.Emails, "send", lambda params: sent.append(params) or {"id": "email_1"})
    return sent


def test_send_budget_alert_email_delivers_through_resend(outbox):
    result = send_budget_alert_email("alice@example.com", "Food budget 100%", "Alert: over budget")

    assert result == {"status": "sent", "email": "alice@example.com", "subject": "Food budget 100%"}
    [params] = outbox
    assert params["to"] == ["alice@example.com"]
    assert params["from"] == settings.EMAIL_FROM
    assert params["subject"] == "Food budget 100%"
    assert "Alert: over budget" in params["html"]


def test_send_budget_alert_email_reports_provider_failure(monkeypatch, outbox):
    def rejected(params):
        raise RuntimeError("invalid api key")

    monkeypatch.setattr(resend.Emails, "send", rejected)

    result = send_budget_alert_email("alice@example.com", "Food budget 90%", "Warning")

    assert result["status"] == "failed"


def test_send_budget_alert_email_is_skipped_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "RESEND_API_KEY", None)
    calls = []
    monkeypatch.setattr(resend.Emails, "send", lambda params: calls.append(params))

    result = send_budget_alert_email("alice@example.com", "Food budget 90%", "Warning")

    assert result["status"] == "skipped"
    assert calls == []


def test_email_service_escapes_message(outbox):
    assert EmailService().send_budget_alert("bob@example.com", "Food budget 90%", "<b>95%</b> used") is True
    assert "&lt;b&gt;95%&lt;/b&gt;" in outbox[0]["html"]


def test_queue_alert_email_publishes_without_retrying(monkeypatch):
    queued = []
    monkeypatch.setattr(
        send_budget_alert_email, "apply_async", lambda args=None, **options: queued.append((args, options))
    )
    alert = BudgetAlert(
        tier=AlertTier.EXCEEDED,
        budget_id=uuid.uuid4(),
        category_name="Food",
        budget_amount=Decimal("100.00"),
        spending=Decimal("105.00"),
        percentage=Decimal("105.0"),
        message="Alert: You've exceeded your Food budget by $5.00 (105.0% used)",
    )

    queue_alert_email("alice@example.com", alert)

    [(args, options)] = queued
    assert args == ("alice@example.com", "Food budget 100%", alert.message)
    assert options["retry"] is False
