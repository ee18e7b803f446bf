from sqlalchemy.orm import Session
from app.models.user import User
from app.schemas.user import UserPreferencesUpdate
from app.core.exceptions import NotFoundError
from typing import Optional

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_user_by_id(self, user_id) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_budget_alerts_enabled(self, user_id) -> bool:
        """Global budget alert opt-out; unknown users never get alerts"""
        enabled = self.db.query(User.budget_alerts_enabled).filter(User.id == user_id).scalar()
        return bool(enabled)

    def update_preferences(self, user_id, update: UserPreferencesUpdate) -> User:
        user = self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        # Only fields present in the request change; reminder_time may be cleared with null
        update_data = update.dict(exclude_unset=True)
        for field, value in update_data.items():
            if value is None and field != "reminder_time":
                continue
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        return user
