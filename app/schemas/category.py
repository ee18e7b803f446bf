from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum
import uuid

from app.models.category import CategoryTypeEnum


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryTypeEnum


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    # Only the name of a custom category can change
    name: str = Field(..., min_length=1, max_length=100)


class CategoryResponse(CategoryBase):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    is_predefined: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SuggestionMethod(str, Enum):
    KEYWORD = "keyword"
    HISTORICAL = "historical"
    NONE = "none"


class CategorySuggestionRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=200)
    type: CategoryTypeEnum


class CategorySuggestion(BaseModel):
    category: str
    category_id: Optional[uuid.UUID] = None  # Set when the user can see a category with that name
    confidence: int = Field(..., ge=0, le=100)
    reason: str


class CategorySuggestionResponse(BaseModel):
    suggestion: Optional[CategorySuggestion] = None
    method: SuggestionMethod
