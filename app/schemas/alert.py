from pydantic import BaseModel
from decimal import Decimal
from enum import Enum
import uuid


class AlertTier(str, Enum):
    WARNING = "90%"
    EXCEEDED = "100%"

    @classmethod
    def from_path(cls, value: str) -> "AlertTier":
        """Accept "90", "90%", "100" or "100%" as used in URLs"""
        normalized = value.strip()
        if not normalized.endswith("%"):
            normalized = f"{normalized}%"
        return cls(normalized)


class BudgetAlert(BaseModel):
    tier: AlertTier
    budget_id: uuid.UUID
    category_name: str
    budget_amount: Decimal
    spending: Decimal
    percentage: Decimal
    message: str

    @property
    def key(self) -> str:
        """Dedup key inside a user's pending alerts"""
        return f"{self.budget_id}:{self.tier.value}"


class AlertCount(BaseModel):
    count: int
