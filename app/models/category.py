from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

from app.core.database import Base
from app.core.types import GUID


class CategoryTypeEnum(enum.Enum):
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", "type", name="uq_categories_user_name_type"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), ForeignKey("users.id"), nullable=True)  # Null for predefined categories
    name = Column(String(100), nullable=False)
    type = Column(SQLEnum(CategoryTypeEnum, name="categorytypeenum"), nullable=False)
    is_predefined = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="categories")
    budgets = relationship("Budget", back_populates="category")
    transactions = relationship("Transaction", back_populates="category_ref")
