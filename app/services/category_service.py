from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
import logging
import uuid

from app.models.category import Category, CategoryTypeEnum
from app.models.transaction import Transaction
from app.models.budget import Budget
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.core.exceptions import NotFoundError, ValidationError, ConflictError, ProtectedCategoryError

logger = logging.getLogger(__name__)

# Shared categories available to every user
PREDEFINED_CATEGORIES = {
    CategoryTypeEnum.EXPENSE: [
        "Food",
        "Rent",
        "Travel",
        "Transportation",
        "Entertainment",
        "Healthcare",
        "Utilities",
        "Shopping",
        "Education",
    ],
    CategoryTypeEnum.INCOME: ["Salary", "Freelance", "Investment", "Gift", "Other"],
}


class CategoryService:

    @staticmethod
    def seed_predefined_categories(db: Session) -> int:
        """Insert missing predefined categories. Returns number inserted; safe to re-run."""
        inserted = 0
        for category_type, names in PREDEFINED_CATEGORIES.items():
            for name in names:
                exists = db.query(Category).filter(
                    Category.user_id.is_(None),
                    Category.name == name,
                    Category.type == category_type
                ).first()
                if exists:
                    continue
                db.add(Category(name=name, type=category_type, is_predefined=True, user_id=None))
                inserted += 1

        if inserted:
            db.commit()
            logger.info(f"Seeded {inserted} predefined categories")
        return inserted

    @staticmethod
    def get_user_categories(db: Session, user_id: uuid.UUID, category_type: Optional[CategoryTypeEnum] = None) -> List[Category]:
        """Predefined categories plus the user's own, optionally filtered by type"""
        query = db.query(Category).filter(
            or_(Category.user_id == user_id, Category.is_predefined == True)
        )
        if category_type is not None:
            query = query.filter(Category.type == category_type)
        return query.order_by(Category.is_predefined.desc(), Category.name).all()

    @staticmethod
    def get_category(db: Session, user_id: uuid.UUID, category_id: uuid.UUID) -> Category:
        category = db.query(Category).filter(
            Category.id == category_id,
            or_(Category.user_id == user_id, Category.is_predefined == True)
        ).first()
        if not category:
            raise NotFoundError("Category not found")
        return category

    @staticmethod
    def _name_taken(db: Session, user_id: uuid.UUID, name: str, category_type: CategoryTypeEnum, exclude_id=None) -> bool:
        query = db.query(Category).filter(
            or_(Category.user_id == user_id, Category.is_predefined == True),
            Category.name.ilike(name),
            Category.type == category_type
        )
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def create_category(db: Session, user_id: uuid.UUID, category_data: CategoryCreate) -> Category:
        """Create a custom category for a user"""
        category_name = category_data.name.strip()
        if not category_name:
            raise ValidationError("Category name is required")

        if CategoryService._name_taken(db, user_id, category_name, category_data.type):
            raise ConflictError(f"Category '{category_name}' already exists")

        category = Category(
            user_id=user_id,
            name=category_name,
            type=category_data.type,
            is_predefined=False,
        )
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def update_category(db: Session, user_id: uuid.UUID, category_id: uuid.UUID, category_data: CategoryUpdate) -> Category:
        """Rename a custom category. Predefined categories are read-only."""
        category = CategoryService.get_category(db, user_id, category_id)
        if category.is_predefined:
            raise ProtectedCategoryError("Predefined categories cannot be modified")

        new_name = category_data.name.strip()
        if not new_name:
            raise ValidationError("Category name is required")

        if new_name != category.name:
            if CategoryService._name_taken(db, user_id, new_name, category.type, exclude_id=category.id):
                raise ConflictError(f"Category '{new_name}' already exists")
            category.name = new_name

        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def is_referenced(db: Session, category_id: uuid.UUID) -> bool:
        """True once a budget or a transaction points at the category"""
        if db.query(Budget.id).filter(Budget.category_id == category_id).first():
            return True
        return db.query(Transaction.id).filter(Transaction.category_id == category_id).first() is not None

    @staticmethod
    def delete_category(db: Session, user_id: uuid.UUID, category_id: uuid.UUID) -> None:
        category = CategoryService.get_category(db, user_id, category_id)
        if category.is_predefined:
            raise ProtectedCategoryError("Predefined categories cannot be deleted")

        if CategoryService.is_referenced(db, category.id):
            raise ProtectedCategoryError("Category is used by budgets or transactions and cannot be deleted")

        db.delete(category)
        db.commit()
