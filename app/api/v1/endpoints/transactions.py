from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional
from datetime import datetime
import uuid

from app.core.deps import get_current_active_user, get_transaction_service
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.models.transaction import TransactionTypeEnum
from app.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    Transaction as TransactionSchema,
    TransactionMutationResult,
)
from app.services.transaction_service import TransactionService

router = APIRouter()

@router.get("/", response_model=List[TransactionSchema])
async def get_transactions(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    type: Optional[TransactionTypeEnum] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: User = Depends(get_current_active_user),
    transactions: TransactionService = Depends(get_transaction_service)
):
    """Get transactions with filters"""
    return transactions.list_transactions(
        current_user.id,
        skip=skip,
        limit=limit,
        transaction_type=type,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
    )

@router.post("/", response_model=TransactionMutationResult, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_create: TransactionCreate,
    current_user: User = Depends(get_current_active_user),
    transactions: TransactionService = Depends(get_transaction_service)
):
    """Create a new transaction; the response carries a budget alert when one fired"""
    try:
        transaction, alert = transactions.create_transaction(current_user.id, transaction_create)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return TransactionMutationResult(
        transaction=TransactionSchema.model_validate(transaction),
        alert=alert,
    )

@router.get("/{transaction_id}", response_model=TransactionSchema)
async def get_transaction(
    transaction_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    transactions: TransactionService = Depends(get_transaction_service)
):
    """Get a specific transaction"""
    try:
        return transactions.get_transaction(transaction_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.put("/{transaction_id}", response_model=TransactionMutationResult)
async def update_transaction(
    transaction_id: uuid.UUID,
    transaction_update: TransactionUpdate,
    current_user: User = Depends(get_current_active_user),
    transactions: TransactionService = Depends(get_transaction_service)
):
    """Update a transaction"""
    try:
        transaction, alert = transactions.update_transaction(transaction_id, current_user.id, transaction_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return TransactionMutationResult(
        transaction=TransactionSchema.model_validate(transaction),
        alert=alert,
    )

@router.delete("/{transaction_id}", response_model=TransactionMutationResult)
async def delete_transaction(
    transaction_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    transactions: TransactionService = Depends(get_transaction_service)
):
    """Delete a transaction"""
    try:
        alert = transactions.delete_transaction(transaction_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return TransactionMutationResult(message="Transaction deleted successfully", alert=alert)
