from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
import uuid
from app.models.user import NotificationMethodEnum

REMINDER_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

class UserNotificationPreferences(BaseModel):
    budget_alerts_enabled: bool
    daily_reminders_enabled: bool
    reminder_time: Optional[str] = Field(None, pattern=REMINDER_TIME_PATTERN)
    notification_method: NotificationMethodEnum

    class Config:
        from_attributes = True

class UserPreferencesUpdate(BaseModel):
    budget_alerts_enabled: Optional[bool] = None
    daily_reminders_enabled: Optional[bool] = None
    reminder_time: Optional[str] = Field(None, pattern=REMINDER_TIME_PATTERN)
    notification_method: Optional[NotificationMethodEnum] = None

class User(BaseModel):
    id: uuid.UUID
    email: EmailStr
    name: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
