from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID
from enum import Enum
from typing_extensions import Self

# Read-time bucket for transactions recorded without a category
UNCATEGORIZED = "Uncategorized"
CATEGORY_MAX_LENGTH = 100


def clean_category(v: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace; blank becomes None."""
    if v is None:
        return None
    v = v.strip()
    return v or None


# ===== TRANSACTION PYDANTIC MODELS =====

class TransactionKindEnum(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


class TransactionCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2, description="Positive amount, at most 2 decimal places")
    kind: TransactionKindEnum = Field(..., description="Income or Expense")
    category: Optional[str] = Field(None, max_length=CATEGORY_MAX_LENGTH, description="Free-text category label")
    transaction_date: date = Field(
        ...,
        validation_alias=AliasChoices("date", "transaction_date"),
        description="Calendar date of the transaction",
    )
    description: Optional[str] = Field(None, max_length=500, description="Transaction description")

    @field_validator('category')
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return clean_category(v)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TransactionResponse(BaseModel):
    """Transaction data returned to client"""
    id: UUID
    amount: Decimal
    kind: TransactionKindEnum
    category: str
    transaction_date: date = Field(..., serialization_alias="date")
    description: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator('kind', mode='before')
    @classmethod
    def validate_kind(cls, v):
        # ORM rows carry the db-layer enum
        return getattr(v, "value", v)

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v: Optional[str]) -> str:
        return clean_category(v) or UNCATEGORIZED


class TransactionFilter(BaseModel):
    """Inclusive date range for ledger queries"""
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @model_validator(mode="after")
    def check_range(self) -> Self:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must be on or before date_to")
        return self


class CategoryTotal(BaseModel):
    category: str
    total: Decimal


class DailyTotal(BaseModel):
    day: date = Field(..., serialization_alias="date")
    income: Decimal
    expense: Decimal
    net: Decimal
