from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from finance_tracker.auth import get_current_user_id
from finance_tracker.crud import crud_budget
from finance_tracker.models import budget as budget_models
from finance_tracker.db.core import get_db, NotFoundError, InvalidInputError
from finance_tracker.services.budget_progress import compute_budget_progress
from finance_tracker.services.months import parse_month, current_month_start

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


def get_month_param(month: Optional[str] = None) -> Optional[date]:
    if month is None:
        return None
    try:
        return parse_month(month)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/", response_model=budget_models.BudgetResponse)
def upsert_budget(
    budget: budget_models.BudgetUpsert,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create the budget for (month, category), or replace its amount if it exists.
    """
    try:
        return crud_budget.upsert_db_budget(db=db, user_id=user_id, budget_data=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[budget_models.BudgetResponse])
def read_budgets(
    user_id: int = Depends(get_current_user_id),
    month: Optional[date] = Depends(get_month_param),
    db: Session = Depends(get_db)
):
    """
    Retrieve the current user's budgets, for one month or for all months.
    """
    return crud_budget.read_db_budgets(db=db, user_id=user_id, month=month)


@router.get("/progress", response_model=List[budget_models.BudgetProgress])
def read_budget_progress(
    user_id: int = Depends(get_current_user_id),
    month: Optional[date] = Depends(get_month_param),
    db: Session = Depends(get_db)
):
    """
    Budgeted vs. spent per category for a month (defaults to the current month).
    """
    return compute_budget_progress(db=db, user_id=user_id, month=month or current_month_start())
