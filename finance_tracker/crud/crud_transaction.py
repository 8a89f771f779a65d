from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import asc, desc
from typing import Optional, List
from decimal import Decimal
from uuid import uuid4, UUID

from finance_tracker.db.core import TransactionDB, UserDB, NotFoundError, InvalidInputError, TransactionKind, utcnow
from finance_tracker.models.transaction import TransactionCreate, TransactionFilter, clean_category
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, user_id: int, transaction_data: TransactionCreate) -> TransactionDB:
    """Append a transaction to the user's ledger"""

    # Schemas may be built without validation (model_construct); re-check the invariant
    if transaction_data.amount is None or Decimal(transaction_data.amount) <= 0:
        raise InvalidInputError("Amount must be greater than zero")

    user = db.query(UserDB).filter(UserDB.db_id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    db_transaction = TransactionDB(
        id=uuid4(),
        user_id=user_id,
        transaction_date=transaction_data.transaction_date,
        amount=transaction_data.amount,
        kind=TransactionKind(transaction_data.kind.value),
        category=clean_category(transaction_data.category),
        description=transaction_data.description,
        created_at=utcnow()
    )

    try:
        db.add(db_transaction)
        db.commit()
        db.refresh(db_transaction)
        return db_transaction
    except IntegrityError:
        db.rollback()
        raise InvalidInputError("Transaction creation failed due to database constraint")


def read_db_transaction(db: Session, transaction_id: UUID, user_id: int) -> Optional[TransactionDB]:
    """Read one of the user's transactions; another user's transaction reads as missing"""
    return db.query(TransactionDB).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.user_id == user_id
    ).first()


def read_db_transactions(db: Session, user_id: int, filters: Optional[TransactionFilter] = None) -> List[TransactionDB]:
    """
    List a user's transactions, newest date first.

    Transactions on the same date keep their creation order, oldest first.
    """
    query = db.query(TransactionDB).filter(TransactionDB.user_id == user_id)

    if filters:
        if filters.date_from:
            query = query.filter(TransactionDB.transaction_date >= filters.date_from)
        if filters.date_to:
            query = query.filter(TransactionDB.transaction_date <= filters.date_to)

    return query.order_by(
        desc(TransactionDB.transaction_date),
        asc(TransactionDB.created_at),
        asc(TransactionDB.db_id)
    ).all()
