from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from finance_tracker.crud import crud_session
from finance_tracker.db.core import get_db, UnauthorizedError

# auto_error=False so a missing header gets the same 401 as a bad token
bearer_scheme = HTTPBearer(auto_error=False)


def unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_current_user_id(
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> int:
    """
    Resolve the bearer token to the caller's user id.

    Every user-scoped route depends on this, so an invalid session is rejected
    before the route body runs.
    """
    if not token:
        raise unauthorized("Not authenticated")
    try:
        return crud_session.validate_session(db, token)
    except UnauthorizedError as e:
        raise unauthorized(str(e))
