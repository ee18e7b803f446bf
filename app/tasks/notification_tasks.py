import logging

from app.core.celery_app import celery_app
from app.services.email_service import EmailService

logger = logging.getLogger(__name__)

@celery_app.task
def send_budget_alert_email(email: str, subject: str, message: str):
    """Deliver a budget alert by e-mail for users who opted into EMAIL/BOTH"""
    service = EmailService()
    if not service.is_configured:
        logger.warning(f"RESEND_API_KEY not set, budget alert for {email} not e-mailed")
        return {
            "status": "skipped",
            "email": email,
            "subject": subject
        }

    logger.info(f"📧 Sending budget alert to {email}: {subject}")
    if not service.send_budget_alert(email, subject, message):
        logger.error(f"❌ Failed to send budget alert to {email}")
        return {
            "status": "failed",
            "email": email,
            "subject": subject
        }

    logger.info(f"✅ Budget alert sent to {email}")
    return {
        "status": "sent",
        "email": email,
        "subject": subject
    }
