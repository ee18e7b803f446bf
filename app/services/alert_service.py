"""
Budget threshold alerts.

After every change to an EXPENSE transaction the affected budget is
re-evaluated:

- 90% <= usage < 100%  -> "90%" warning
- usage >= 100%        -> "100%" alert, which supersedes the warning

Alerting is a best-effort side channel. Nothing in here may fail the
transaction mutation that triggered it, so read errors and store errors are
logged and turn into "no alert".
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Callable, Iterable, List, Optional
from datetime import date, datetime
from decimal import Decimal
import logging

from app.models.transaction import TransactionTypeEnum
from app.models.user import NotificationMethodEnum
from app.schemas.alert import AlertTier, BudgetAlert
from app.schemas.budget import BudgetProgress
from app.services.alert_store import AlertStore
from app.services.budget_service import BudgetService
from app.services.user_service import UserService
from app.utils import decimal_utils as dec
from app.utils.audit import audit

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = Decimal("90")
EXCEEDED_THRESHOLD = Decimal("100")

Notifier = Callable[[str, BudgetAlert], None]


def build_alert(progress: BudgetProgress) -> Optional[BudgetAlert]:
    """Turn a freshly calculated progress into at most one alert"""
    percentage = progress.percentage
    spending = dec.format_decimal(progress.spending, 2)
    limit = dec.format_decimal(progress.budget_amount, 2)
    percent_text = dec.format_decimal(percentage, 1)

    if percentage >= EXCEEDED_THRESHOLD:
        overspend = dec.format_decimal(dec.subtract(progress.spending, progress.budget_amount), 2)
        tier = AlertTier.EXCEEDED
        message = (
            f"Alert: You've exceeded your {progress.category_name} budget "
            f"by ${overspend} ({percent_text}% used)"
        )
    elif percentage >= WARNING_THRESHOLD:
        tier = AlertTier.WARNING
        message = (
            f"Warning: You've used {percent_text}% of your {progress.category_name} "
            f"budget (${spending} of ${limit})"
        )
    else:
        return None

    return BudgetAlert(
        tier=tier,
        budget_id=progress.budget_id,
        category_name=progress.category_name,
        budget_amount=progress.budget_amount,
        spending=progress.spending,
        percentage=percentage,
        message=message,
    )


def queue_alert_email(email: str, alert: BudgetAlert) -> None:
    from app.tasks.notification_tasks import send_budget_alert_email
    # Publish once; an unreachable broker must not stall the request
    send_budget_alert_email.apply_async(
        args=(email, f"{alert.category_name} budget {alert.tier.value}", alert.message),
        retry=False,
    )


class AlertService:
    def __init__(self, db: Session, store: AlertStore, notifier: Optional[Notifier] = None):
        self.db = db
        self.store = store
        self.notifier = notifier or queue_alert_email
        self.budgets = BudgetService(db)
        self.users = UserService(db)

    def check_budget_alert(
        self,
        user_id,
        category_id,
        transaction_date: date,
        alerts_enabled: Optional[bool] = None,
    ) -> Optional[BudgetAlert]:
        """
        Evaluate the budget covering (category, month of transaction_date).

        alerts_enabled is the user's budget_alerts_enabled flag; it is looked
        up when not given. Returns None when alerts are off, when there is no
        budget for that month, below 90%, or when a read fails.
        """
        try:
            if alerts_enabled is None:
                alerts_enabled = self.users.get_budget_alerts_enabled(user_id)
            if not alerts_enabled:
                return None

            budget = self.budgets.find_budget(user_id, category_id, transaction_date)
            if not budget:
                return None

            progress = self.budgets.calculate_budget_progress(budget.id, user_id)
            if not progress:
                return None

            return build_alert(progress)
        except SQLAlchemyError:
            logger.exception(f"Error checking budget alert for user {user_id}, category {category_id}")
            return None

    def check_multiple_budget_alerts(
        self, user_id, category_ids: Iterable, transaction_date: date
    ) -> List[BudgetAlert]:
        """Evaluate several categories at once, e.g. after a bulk import"""
        try:
            alerts_enabled = self.users.get_budget_alerts_enabled(user_id)
        except SQLAlchemyError:
            logger.exception(f"Error reading alert preference for user {user_id}")
            return []

        alerts = []
        for category_id in dict.fromkeys(category_ids):
            alert = self.check_budget_alert(user_id, category_id, transaction_date, alerts_enabled)
            if alert:
                alerts.append(alert)
        return alerts

    def evaluate_and_store_alert(self, user_id, category_id, transaction_date: date) -> Optional[BudgetAlert]:
        """Evaluate, hold the result as pending and return it. Never raises."""
        try:
            alert = self.check_budget_alert(user_id, category_id, transaction_date)
            if alert is None:
                return None

            inserted = self.store.store(user_id, alert)
            if alert.tier == AlertTier.EXCEEDED:
                # The overspend alert replaces the earlier warning for this budget
                self.store.clear_one(user_id, alert.budget_id, AlertTier.WARNING)

            if inserted:
                audit("budget_alert.stored", user_id=user_id, budget_id=alert.budget_id,
                      tier=alert.tier, percentage=alert.percentage)
                self._notify(user_id, alert)
            return alert
        except Exception:
            logger.exception(f"Budget alert evaluation failed for user {user_id}")
            return None

    def evaluate_transaction_change(
        self, user_id, transaction_type: TransactionTypeEnum, category_id, transaction_date: datetime
    ) -> Optional[BudgetAlert]:
        """Only categorized EXPENSE transactions can move a budget"""
        if transaction_type != TransactionTypeEnum.EXPENSE or not category_id:
            return None
        return self.evaluate_and_store_alert(user_id, category_id, transaction_date)

    def _notify(self, user_id, alert: BudgetAlert) -> None:
        user = self.users.get_user_by_id(user_id)
        if not user or user.notification_method not in (NotificationMethodEnum.EMAIL, NotificationMethodEnum.BOTH):
            return
        try:
            self.notifier(user.email, alert)
        except Exception as e:
            logger.error(f"❌ Failed to queue budget alert email for user {user_id}: {str(e)}")

    # --- Pending alerts for the notification surface ---

    def get_pending_alerts(self, user_id) -> List[BudgetAlert]:
        return self.store.get_pending(user_id)

    def get_alert_count(self, user_id) -> int:
        return self.store.count(user_id)

    def dismiss_alert(self, user_id, budget_id, tier: AlertTier) -> bool:
        removed = self.store.clear_one(user_id, budget_id, tier)
        if removed:
            audit("budget_alert.dismissed", user_id=user_id, budget_id=budget_id, tier=AlertTier(tier))
        return removed

    def clear_alerts(self, user_id) -> None:
        self.store.clear_all(user_id)
        audit("budget_alert.cleared", user_id=user_id)
