from sqlalchemy.orm import Session
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy import desc, asc
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from finance_tracker.db.core import BudgetDB, UserDB, NotFoundError, InvalidInputError, check_backend, utcnow
from finance_tracker.models.budget import BudgetUpsert
from finance_tracker.services.months import month_start
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


# ===== DATABASE OPERATIONS =====

def upsert_db_budget(db: Session, user_id: int, budget_data: BudgetUpsert,
                     now: Optional[datetime] = None) -> BudgetDB:
    """
    Insert or replace the budget for (user, month, category).

    Runs as one ``INSERT ... ON CONFLICT DO UPDATE`` against the unique
    constraint, so concurrent upserts for the same key can never produce two
    rows; the last one to commit decides the amount. On conflict only the
    amount and ``updated_at`` change.
    """
    if budget_data.amount is None or Decimal(budget_data.amount) <= 0:
        raise InvalidInputError("Amount must be greater than zero")

    user = db.query(UserDB).filter(UserDB.db_id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    insert = _UPSERT_DIALECTS[check_backend(db.get_bind().dialect.name)]

    now = now or utcnow()
    month = month_start(budget_data.month)
    stmt = insert(BudgetDB).values(
        user_id=user_id,
        month=month,
        category=budget_data.category,
        amount=budget_data.amount,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[BudgetDB.user_id, BudgetDB.month, BudgetDB.category],
        set_={
            "amount": stmt.excluded.amount,
            "updated_at": stmt.excluded.updated_at,
        },
    )

    try:
        db_budget = db.scalars(
            stmt.returning(BudgetDB),
            execution_options={"populate_existing": True},
        ).one()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(f"Upserted budget {month:%Y-%m}/{budget_data.category} for user {user.id}")
    return db_budget


def read_db_budgets(db: Session, user_id: int, month: Optional[date] = None) -> List[BudgetDB]:
    """
    List a user's budgets.

    With a month: that month only, ordered by category. Without: every month,
    newest month first, then by category.
    """
    query = db.query(BudgetDB).filter(BudgetDB.user_id == user_id)

    if month:
        query = query.filter(BudgetDB.month == month_start(month))
        return query.order_by(asc(BudgetDB.category)).all()

    return query.order_by(desc(BudgetDB.month), asc(BudgetDB.category)).all()
