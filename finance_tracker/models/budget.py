from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date
from decimal import Decimal

from finance_tracker.models.transaction import CATEGORY_MAX_LENGTH, clean_category
from finance_tracker.services.months import parse_month

# ===== BUDGET PYDANTIC MODELS =====

class BudgetUpsert(BaseModel):
    month: date = Field(..., description="Budget month as YYYY-MM or any date in the month")
    category: str = Field(..., max_length=CATEGORY_MAX_LENGTH, description="Category label the budget covers")
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2, description="Positive target amount")

    @field_validator('month', mode='before')
    @classmethod
    def validate_month(cls, v) -> date:
        return parse_month(v)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v: str) -> str:
        v = clean_category(v)
        if v is None:
            raise ValueError('Category must not be blank')
        return v


class BudgetResponse(BaseModel):
    month: date
    category: str
    amount: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BudgetProgress(BaseModel):
    """Budgeted vs. actual spend for one category in one month"""
    month: date
    category: str
    budget_amount: Decimal
    spent: Decimal
    remaining: Decimal  # negative when over budget
