import sqlite3
from typing import Optional
from sqlalchemy import create_engine, event, ForeignKey, Index, UniqueConstraint, CheckConstraint, String, DECIMAL, DateTime, Date
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.types import Enum
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column
from datetime import datetime, date, timezone
from uuid import UUID
from decimal import Decimal
import enum

from finance_tracker.config import DATABASE_URL, SQL_ECHO


# ===== ERROR TAXONOMY =====

class NotFoundError(Exception):
    """Resource does not exist or is owned by someone else; both look the same."""
    pass


class InvalidInputError(ValueError):
    """Malformed or out-of-range request data."""
    pass


class ConflictError(Exception):
    """Uniqueness violation on registration."""
    pass


class UnauthorizedError(Exception):
    """Missing, invalid or expired session, or a failed credential check."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class UnsupportedBackendError(RuntimeError):
    """DATABASE_URL names a database the service cannot run on."""
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class TransactionKind(enum.Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        UniqueConstraint("username", name="uq_user_username"),
    )

    # Core User Identification
    db_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[UUID] = mapped_column(unique=True, nullable=False)

    # Authentication (username and email are stored lower-cased)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Activity Tracking
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships: a user owns everything below and takes it along on delete
    sessions = relationship("SessionDB", back_populates="user", cascade="all, delete-orphan")
    transactions = relationship("TransactionDB", back_populates="user", cascade="all, delete-orphan")
    budgets = relationship("BudgetDB", back_populates="user", cascade="all, delete-orphan")


class SessionDB(Base):
    __tablename__ = "sessions"

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_session_token_hash"),
        Index("idx_sessions_user", "user_id"),
        Index("idx_sessions_expires_at", "expires_at"),
    )

    db_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[UUID] = mapped_column(unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id", ondelete="CASCADE"), nullable=False)

    # SHA-256 hex digest of the bearer token; the raw token is never stored
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    user = relationship("UserDB", back_populates="sessions")


class TransactionDB(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        Index("idx_transactions_user_date", "user_id", "transaction_date"),
        Index("idx_transactions_user_kind_category", "user_id", "kind", "category"),
    )

    # Core Transaction Identification
    db_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[UUID] = mapped_column(unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id", ondelete="CASCADE"), nullable=False)

    # Basic Transaction Data
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    kind: Mapped[TransactionKind] = mapped_column(Enum(TransactionKind, name="transaction_kind"), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100))  # NULL reads as "Uncategorized"
    description: Mapped[Optional[str]] = mapped_column(String(500))

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user = relationship("UserDB", back_populates="transactions")


class BudgetDB(Base):
    __tablename__ = "budgets"

    __table_args__ = (
        # One budget per user/month/category; the upsert conflicts on this
        UniqueConstraint("user_id", "month", "category", name="uq_user_month_category"),
        CheckConstraint("amount > 0", name="ck_budget_amount_positive"),
        Index("idx_budgets_user_month", "user_id", "month"),
    )

    # Primary Key
    budget_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Foreign Key
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id", ondelete="CASCADE"), nullable=False)

    # Budget Data
    month: Mapped[date] = mapped_column(Date, nullable=False)  # first day of the month
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("UserDB", back_populates="budgets")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SUPPORTED_BACKENDS = ("postgresql", "sqlite")


def check_backend(name: str) -> str:
    # The budget upsert relies on ON CONFLICT, which only these dialects provide here
    if name not in SUPPORTED_BACKENDS:
        raise UnsupportedBackendError(
            f"Unsupported database backend '{name}'; use one of: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return name


def build_engine(url: str = DATABASE_URL, echo: bool = SQL_ECHO) -> Engine:
    check_backend(make_url(url).get_backend_name())
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = build_engine()
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    finally:
        database.close()
