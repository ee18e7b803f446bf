from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from datetime import datetime
import logging

from app.models.transaction import Transaction, TransactionTypeEnum
from app.schemas.alert import BudgetAlert
from app.schemas.transaction import TransactionCreate, TransactionUpdate
from app.services.alert_service import AlertService
from app.services.category_service import CategoryService
from app.core.exceptions import NotFoundError
from app.utils.dates import first_day_of_month

logger = logging.getLogger(__name__)


class TransactionService:
    """
    Transaction CRUD. Every mutation re-evaluates the budget of the affected
    category and month once it has been committed; the resulting alert (if
    any) is returned next to the transaction.
    """

    def __init__(self, db: Session, alerts: AlertService):
        self.db = db
        self.alerts = alerts

    def list_transactions(
        self,
        user_id,
        skip: int = 0,
        limit: int = 50,
        transaction_type: Optional[TransactionTypeEnum] = None,
        category_id=None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Transaction]:
        query = self.db.query(Transaction).filter(Transaction.user_id == user_id)

        if transaction_type:
            query = query.filter(Transaction.type == transaction_type)
        if category_id:
            query = query.filter(Transaction.category_id == category_id)
        if start_date:
            query = query.filter(Transaction.date >= start_date)
        if end_date:
            query = query.filter(Transaction.date <= end_date)

        return query.order_by(Transaction.date.desc()).offset(skip).limit(limit).all()

    def get_transaction(self, transaction_id, user_id) -> Transaction:
        transaction = self.db.query(Transaction).filter(
            Transaction.id == transaction_id,
            Transaction.user_id == user_id  # Row-level security
        ).first()
        if not transaction:
            raise NotFoundError("Transaction not found")
        return transaction

    def create_transaction(self, user_id, data: TransactionCreate) -> Tuple[Transaction, Optional[BudgetAlert]]:
        if data.category_id:
            CategoryService.get_category(self.db, user_id, data.category_id)

        transaction = Transaction(user_id=user_id, **data.dict())
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)

        alert = self.alerts.evaluate_transaction_change(
            user_id, transaction.type, transaction.category_id, transaction.date
        )
        return transaction, alert

    def update_transaction(self, transaction_id, user_id, data: TransactionUpdate) -> Tuple[Transaction, Optional[BudgetAlert]]:
        transaction = self.get_transaction(transaction_id, user_id)

        update_data = data.dict(exclude_unset=True)
        if update_data.get("category_id"):
            CategoryService.get_category(self.db, user_id, update_data["category_id"])

        previous = (transaction.type, transaction.category_id, first_day_of_month(transaction.date))
        previous_date = transaction.date

        for field, value in update_data.items():
            if value is None and field not in ("category_id", "description"):
                continue
            setattr(transaction, field, value)

        self.db.commit()
        self.db.refresh(transaction)

        current = (transaction.type, transaction.category_id, first_day_of_month(transaction.date))
        if previous != current:
            # The budget the transaction moved away from changed as well
            self.alerts.evaluate_transaction_change(user_id, previous[0], previous[1], previous_date)

        alert = self.alerts.evaluate_transaction_change(
            user_id, transaction.type, transaction.category_id, transaction.date
        )
        return transaction, alert

    def delete_transaction(self, transaction_id, user_id) -> Optional[BudgetAlert]:
        transaction = self.get_transaction(transaction_id, user_id)
        transaction_type, category_id, transaction_date = (
            transaction.type, transaction.category_id, transaction.date
        )

        self.db.delete(transaction)
        self.db.commit()

        return self.alerts.evaluate_transaction_change(user_id, transaction_type, category_id, transaction_date)
