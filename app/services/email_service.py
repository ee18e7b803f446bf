from html import escape
from typing import Optional
import logging

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self, api_key: Optional[str] = None, sender: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        resend.api_key = self.api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def send_budget_alert(self, to: str, subject: str, message: str) -> bool:
        html = f"""
        <div style='font-family: Inter, Arial, sans-serif; line-height:1.6;'>
            <h2>{escape(subject)}</h2>
            <p>{escape(message)}</p>
            <p>You can change how budget alerts reach you in your notification preferences.</p>
        </div>
        """
        try:
            resend.Emails.send({
                "from": self.sender,
                "to": [to],
                "subject": subject,
                "html": html,
            })
            return True
        except Exception as e:
            logger.error(f"Budget alert e-mail to {to} failed: {str(e)}")
            return False
