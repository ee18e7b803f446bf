from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

from app.core.database import Base
from app.core.types import GUID
from app.models.category import CategoryTypeEnum

class PaymentMethodEnum(enum.Enum):
    CASH = "CASH"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    OTHER = "OTHER"

# Transactions share the EXPENSE/INCOME vocabulary with categories
TransactionTypeEnum = CategoryTypeEnum

class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_budget_lookup", "user_id", "category_id", "type", "date"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), ForeignKey("users.id"), nullable=False)
    type = Column(SQLEnum(TransactionTypeEnum, name="transactiontypeenum"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=False)  # Display label
    category_id = Column(GUID(), ForeignKey("categories.id"), nullable=True)  # Budget tracking link
    date = Column(DateTime, nullable=False)
    description = Column(String(200), nullable=True)
    payment_method = Column(SQLEnum(PaymentMethodEnum, name="paymentmethodenum"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="transactions")
    category_ref = relationship("Category", back_populates="transactions")
