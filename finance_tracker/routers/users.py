from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from finance_tracker.auth import get_bearer_token, get_current_user_id, unauthorized
from finance_tracker.crud import crud_user, crud_session
from finance_tracker.models import user as user_models
from finance_tracker.models.session import LoginResponse
from finance_tracker.db.core import get_db, NotFoundError, ConflictError, InvalidInputError, UnauthorizedError

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_user(user: user_models.UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user. Responds 201 with no body.
    """
    try:
        crud_user.register_user(db, username=user.username, email=user.email, password=user.password)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return Response(status_code=status.HTTP_201_CREATED)


@router.post("/login", response_model=LoginResponse)
def login(user_login: user_models.UserLogin, db: Session = Depends(get_db)):
    """
    Check credentials and issue a session token.
    """
    try:
        user = crud_user.verify_credentials(db, identifier=user_login.identifier, password=user_login.password)
    except UnauthorizedError as e:
        raise unauthorized(str(e))

    token, session = crud_session.issue_session(db, user_id=user.db_id)
    return LoginResponse(user_id=user.id, session_token=token, expires_at=session.expires_at)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(token: Optional[str] = Depends(get_bearer_token), db: Session = Depends(get_db)):
    """
    Revoke the presented session. Revoking an unknown or expired token is not an error.
    """
    crud_session.revoke_session(db, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/logout-all", status_code=status.HTTP_204_NO_CONTENT)
def logout_everywhere(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """
    Revoke every session of the current user, this one included.
    """
    crud_session.revoke_user_sessions(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=user_models.UserResponse)
def read_current_user(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """
    Retrieve the authenticated user's profile.
    """
    db_user = crud_user.read_db_user(db, user_id=user_id)
    if db_user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return db_user


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_current_user(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """
    Delete the authenticated user along with all sessions, transactions and budgets.
    """
    try:
        crud_user.delete_db_user(db, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
