from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
from datetime import date
from uuid import UUID
from sqlalchemy.orm import Session

from finance_tracker.auth import get_current_user_id
from finance_tracker.db.core import NotFoundError, get_db
from finance_tracker.models.transaction import TransactionCreate, TransactionResponse, TransactionFilter, CategoryTotal, DailyTotal
from finance_tracker.crud.crud_transaction import (
    create_db_transaction,
    read_db_transaction,
    read_db_transactions,
)
from finance_tracker.services import analytics

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)


def get_transaction_filter(date_from: Optional[date] = None, date_to: Optional[date] = None) -> TransactionFilter:
    try:
        return TransactionFilter(date_from=date_from, date_to=date_to)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> TransactionResponse:
    try:
        db_transaction = create_db_transaction(db, user_id, transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return TransactionResponse.model_validate(db_transaction)


@router.get("/")
def read_transactions(
    user_id: int = Depends(get_current_user_id),
    filters: TransactionFilter = Depends(get_transaction_filter),
    db: Session = Depends(get_db)
) -> List[TransactionResponse]:
    """
    List the current user's transactions, newest first, optionally within an inclusive date range.
    """
    return [TransactionResponse.model_validate(t) for t in read_db_transactions(db, user_id, filters)]


@router.get("/summary/by-category")
def read_expense_by_category(
    user_id: int = Depends(get_current_user_id),
    filters: TransactionFilter = Depends(get_transaction_filter),
    db: Session = Depends(get_db)
) -> List[CategoryTotal]:
    return analytics.expense_by_category(read_db_transactions(db, user_id, filters))


@router.get("/summary/daily")
def read_daily_totals(
    user_id: int = Depends(get_current_user_id),
    filters: TransactionFilter = Depends(get_transaction_filter),
    db: Session = Depends(get_db)
) -> List[DailyTotal]:
    return analytics.daily_totals(read_db_transactions(db, user_id, filters))


@router.get("/{transaction_id}")
def read_transaction(
    transaction_id: UUID,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> TransactionResponse:
    db_transaction = read_db_transaction(db, transaction_id=transaction_id, user_id=user_id)
    if not db_transaction:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return TransactionResponse.model_validate(db_transaction)
