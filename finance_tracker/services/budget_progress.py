"""
Budget Progress Service

Compares each of a user's budgets for one month against the expenses recorded
in the same month and category. Nothing is persisted or cached: every call
folds the ledger as it stands at query time.
"""
from sqlalchemy.orm import Session
from sqlalchemy import and_, asc
from datetime import date
from decimal import Decimal
from typing import Dict, List

from finance_tracker.db.core import BudgetDB, TransactionDB, TransactionKind
from finance_tracker.models.budget import BudgetProgress
from finance_tracker.services.months import month_range

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce a driver value (Decimal, int, or SQLite's float/None) to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT)


def compute_budget_progress(db: Session, user_id: int, month: date) -> List[BudgetProgress]:
    """
    Budget vs. actual spend for every budget the user has in ``month``.

    ``spent`` sums Expense transactions dated in ``[month_start, next_month_start)``
    whose category equals the budget's category exactly (case-sensitive, no
    trimming at read time). ``remaining`` is ``budget - spent`` and goes negative
    when the budget is overrun. Output is ordered by category.

    The matching amounts are summed here as Decimals rather than with SQL SUM:
    SQLite stores NUMERIC columns as REAL, so a database-side sum would add
    binary floats.
    """
    start, end = month_range(month)

    rows = (
        db.query(BudgetDB.budget_id, BudgetDB.category, BudgetDB.amount, TransactionDB.amount)
        .outerjoin(
            TransactionDB,
            and_(
                TransactionDB.user_id == BudgetDB.user_id,
                TransactionDB.kind == TransactionKind.EXPENSE,
                TransactionDB.category == BudgetDB.category,
                TransactionDB.transaction_date >= start,
                TransactionDB.transaction_date < end,
            ),
        )
        .filter(BudgetDB.user_id == user_id, BudgetDB.month == start)
        .order_by(asc(BudgetDB.category), asc(BudgetDB.budget_id))
        .all()
    )

    budgets: Dict[int, tuple] = {}
    spent: Dict[int, Decimal] = {}
    for budget_id, category, budget_amount, expense_amount in rows:
        if budget_id not in budgets:
            budgets[budget_id] = (category, to_money(budget_amount))
            spent[budget_id] = Decimal("0.00")
        if expense_amount is not None:
            spent[budget_id] += to_money(expense_amount)

    # dicts keep insertion order, which is the query's category order
    return [
        BudgetProgress(
            month=start,
            category=category,
            budget_amount=budget_amount,
            spent=spent[budget_id],
            remaining=budget_amount - spent[budget_id],
        )
        for budget_id, (category, budget_amount) in budgets.items()
    ]
