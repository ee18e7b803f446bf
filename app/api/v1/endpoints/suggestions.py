from fastapi import APIRouter, Depends

from app.core.deps import get_current_active_user, get_category_suggestion_service
from app.models.user import User
from app.schemas.category import CategorySuggestionRequest, CategorySuggestionResponse
from app.services.category_suggestion_service import CategorySuggestionService

router = APIRouter()

@router.post("/category", response_model=CategorySuggestionResponse)
async def suggest_category(
    request: CategorySuggestionRequest,
    current_user: User = Depends(get_current_active_user),
    suggestions: CategorySuggestionService = Depends(get_category_suggestion_service)
):
    """Suggest a category for a transaction description"""
    return suggestions.suggest_category(current_user.id, request.description, request.type)
