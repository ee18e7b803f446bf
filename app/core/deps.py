from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import verify_token
from app.models.user import User
from app.services.alert_service import AlertService
from app.services.alert_store import AlertStore, get_alert_store
from app.services.budget_service import BudgetService
from app.services.category_suggestion_service import CategorySuggestionService
from app.services.dashboard_service import DashboardService
from app.services.transaction_service import TransactionService
from app.services.user_service import UserService

security = HTTPBearer()

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    token = credentials.credentials
    email = verify_token(token)

    if email is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = UserService(db).get_user_by_email(email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user

async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current active user"""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account has been deactivated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user

def get_alert_service(
    db: Session = Depends(get_db),
    store: AlertStore = Depends(get_alert_store)
) -> AlertService:
    return AlertService(db, store)

def get_budget_service(db: Session = Depends(get_db)) -> BudgetService:
    return BudgetService(db)

def get_transaction_service(
    db: Session = Depends(get_db),
    alerts: AlertService = Depends(get_alert_service)
) -> TransactionService:
    return TransactionService(db, alerts)

def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)

def get_category_suggestion_service(db: Session = Depends(get_db)) -> CategorySuggestionService:
    return CategorySuggestionService(db)
