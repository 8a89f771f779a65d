from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional
from uuid import uuid4, UUID
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

from finance_tracker.config import ARGON2_TIME_COST, ARGON2_MEMORY_COST, ARGON2_PARALLELISM
from finance_tracker.db.core import UserDB, NotFoundError, ConflictError, UnauthorizedError, utcnow
from finance_tracker.models.user import normalize_username, normalize_email, check_password
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)

# One message for every failed login, whatever the cause
INVALID_CREDENTIALS = "Invalid username/email or password"


# ===== PASSWORD HASHING UTILITIES =====

# Argon2id; PasswordHasher is stateless and safe to share across threads
password_hasher = PasswordHasher(
    time_cost=ARGON2_TIME_COST,
    memory_cost=ARGON2_MEMORY_COST,
    parallelism=ARGON2_PARALLELISM,
)

# Verified against when no user matches, so a miss costs the same as a wrong password
_DUMMY_HASH = password_hasher.hash("dummy-password-for-timing")


def hash_password(password: str) -> str:
    """Hash a password with Argon2id and a fresh random salt; returns the PHC string"""
    return password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    try:
        return password_hasher.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHashError):
        return False


# ===== DATABASE OPERATIONS =====

def register_user(db: Session, username: str, email: str, password: str) -> UUID:
    """
    Create a new user and return its public identifier.

    Username and email are normalized to lower case, so uniqueness of both is
    case-insensitive. Raises InvalidInputError on a format violation and
    ConflictError if the username or email is already registered.
    """
    username = normalize_username(username)
    email = normalize_email(email)
    check_password(password)

    if db.query(UserDB).filter(UserDB.email == email).first():
        raise ConflictError("Email already registered")

    if db.query(UserDB).filter(UserDB.username == username).first():
        raise ConflictError("Username already taken")

    db_user = UserDB(
        id=uuid4(),
        email=email,
        username=username,
        password_hash=hash_password(password),
        created_at=utcnow(),
        updated_at=utcnow()
    )

    try:
        db.add(db_user)
        db.commit()
    except IntegrityError:
        # A concurrent registration won the race for the same username/email
        db.rollback()
        raise ConflictError("Username or email already registered")

    logger.info(f"Registered user {db_user.id}")
    return db_user.id


def verify_credentials(db: Session, identifier: str, password: str) -> UserDB:
    """
    Check a username-or-email and password pair.

    Raises UnauthorizedError with the same message whether the user does not
    exist or the password is wrong.
    """
    identifier = (identifier or "").strip().lower()

    user = db.query(UserDB).filter(
        or_(UserDB.username == identifier, UserDB.email == identifier)
    ).first()

    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.info("Login failed")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        logger.info("Login failed")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)

    return user


def read_db_user(db: Session, user_id: int = None, user_uuid: UUID = None) -> Optional[UserDB]:
    """Read a user by internal id or public UUID"""

    query = db.query(UserDB)

    if user_id:
        return query.filter(UserDB.db_id == user_id).first()
    elif user_uuid:
        return query.filter(UserDB.id == user_uuid).first()
    else:
        raise ValueError("Must provide at least one identifier (user_id or user_uuid)")


def delete_db_user(db: Session, user_id: int) -> bool:
    """Delete a user together with its sessions, transactions and budgets in one commit"""

    db_user = db.query(UserDB).filter(UserDB.db_id == user_id).first()
    if not db_user:
        raise NotFoundError(f"User with id {user_id} not found")

    try:
        db.delete(db_user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise

    logger.info(f"Deleted user {db_user.id}")
    return True
