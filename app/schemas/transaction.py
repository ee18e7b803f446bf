from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import uuid

from app.models.transaction import TransactionTypeEnum, PaymentMethodEnum
from app.schemas.alert import BudgetAlert

MAX_TRANSACTION_AMOUNT = Decimal("99999999.99")


def _not_in_future(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return value
    if value.tzinfo is not None:
        now = datetime.now(value.tzinfo)
        if value > now:
            raise ValueError("date cannot be in the future")
        return value.replace(tzinfo=None)
    if value > datetime.now():
        raise ValueError("date cannot be in the future")
    return value


class TransactionBase(BaseModel):
    type: TransactionTypeEnum
    amount: Decimal = Field(..., gt=0, le=MAX_TRANSACTION_AMOUNT, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=100)
    category_id: Optional[uuid.UUID] = None  # Links the transaction to budget tracking
    date: datetime
    description: Optional[str] = Field(None, max_length=200)
    payment_method: PaymentMethodEnum

class TransactionCreate(TransactionBase):

    @validator("date")
    def date_not_in_future(cls, v):
        return _not_in_future(v)

class TransactionUpdate(BaseModel):
    type: Optional[TransactionTypeEnum] = None
    amount: Optional[Decimal] = Field(None, gt=0, le=MAX_TRANSACTION_AMOUNT, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    category_id: Optional[uuid.UUID] = None
    date: Optional[datetime] = None
    description: Optional[str] = Field(None, max_length=200)
    payment_method: Optional[PaymentMethodEnum] = None

    @validator("date")
    def date_not_in_future(cls, v):
        return _not_in_future(v)

class Transaction(TransactionBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TransactionMutationResult(BaseModel):
    """Mutation response; alert is set when the change crossed a budget threshold"""
    transaction: Optional[Transaction] = None
    message: Optional[str] = None
    alert: Optional[BudgetAlert] = None
