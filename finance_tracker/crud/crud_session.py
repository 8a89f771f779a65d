"""
Session issuing, validation and revocation.

A session is a storage-backed record keyed by the SHA-256 digest of an opaque
bearer token. Expiry is absolute and fixed at issuance; validation never extends
it. Revocation deletes the row and commits before returning, so a token that was
logged out cannot validate afterwards from any instance.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, Tuple
from datetime import datetime, timedelta
from uuid import uuid4
import hashlib
import secrets

from finance_tracker.config import SESSION_TTL_HOURS
from finance_tracker.db.core import SessionDB, UserDB, NotFoundError, UnauthorizedError, utcnow
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)

TOKEN_BYTES = 32  # 256 bits of entropy
INVALID_SESSION = "Invalid or expired session"


# ===== UTILITY FUNCTIONS =====

def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Digest under which a token is stored and looked up."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


# ===== DATABASE OPERATIONS =====

def issue_session(db: Session, user_id: int, now: Optional[datetime] = None,
                  ttl: Optional[timedelta] = None) -> Tuple[str, SessionDB]:
    """Create a session for a user and return ``(raw token, session row)``"""

    user = db.query(UserDB).filter(UserDB.db_id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    now = now or utcnow()
    ttl = ttl or timedelta(hours=SESSION_TTL_HOURS)
    token = generate_token()

    db_session = SessionDB(
        id=uuid4(),
        user_id=user_id,
        token_hash=hash_token(token),
        created_at=now,
        expires_at=now + ttl,
    )

    try:
        db.add(db_session)
        db.commit()
        db.refresh(db_session)
    except IntegrityError:
        db.rollback()
        raise

    logger.info(f"Issued session {db_session.id} for user {user.id}")
    return token, db_session


def validate_session(db: Session, token: Optional[str], now: Optional[datetime] = None) -> int:
    """
    Resolve a bearer token to its owning user's internal id.

    Raises UnauthorizedError if the token is missing, unknown, or expired
    (``now >= expires_at``). Expired rows that have not been swept yet are
    filtered here.
    """
    if not token:
        raise UnauthorizedError(INVALID_SESSION)

    now = now or utcnow()
    db_session = db.query(SessionDB).filter(SessionDB.token_hash == hash_token(token)).first()

    if db_session is None or now >= db_session.expires_at:
        raise UnauthorizedError(INVALID_SESSION)

    return db_session.user_id


def revoke_session(db: Session, token: Optional[str]) -> bool:
    """Delete the session behind a token. Returns False if there was nothing to revoke"""
    if not token:
        return False

    deleted = db.query(SessionDB).filter(
        SessionDB.token_hash == hash_token(token)
    ).delete(synchronize_session=False)
    db.commit()

    if deleted:
        logger.info("Revoked session")
    return bool(deleted)


def revoke_user_sessions(db: Session, user_id: int) -> int:
    """Delete every session belonging to a user"""
    deleted = db.query(SessionDB).filter(
        SessionDB.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()
    return deleted


def purge_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    """Housekeeping sweep: delete all sessions whose expiry has passed"""
    now = now or utcnow()
    deleted = db.query(SessionDB).filter(
        SessionDB.expires_at <= now
    ).delete(synchronize_session=False)
    db.commit()

    logger.info(f"Purged {deleted} expired session(s)")
    return deleted


def count_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    return db.query(SessionDB).filter(SessionDB.expires_at <= now).count()
