# Import all models here for Alembic
from app.models.user import User
from app.models.category import Category
from app.models.transaction import Transaction
from app.models.budget import Budget

__all__ = [
    "User",
    "Category",
    "Transaction",
    "Budget",
]
