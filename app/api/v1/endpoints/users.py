from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_active_user
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.schemas.user import User as UserSchema, UserNotificationPreferences, UserPreferencesUpdate
from app.services.user_service import UserService

router = APIRouter()

@router.get("/me", response_model=UserSchema)
async def get_me(current_user: User = Depends(get_current_active_user)):
    return current_user

@router.get("/me/preferences", response_model=UserNotificationPreferences)
async def get_preferences(current_user: User = Depends(get_current_active_user)):
    """Get notification preferences"""
    return current_user

@router.put("/me/preferences", response_model=UserNotificationPreferences)
async def update_preferences(
    preferences: UserPreferencesUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Update notification preferences; only the fields sent are changed"""
    try:
        return UserService(db).update_preferences(current_user.id, preferences)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
