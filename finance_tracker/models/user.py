from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
import re

from finance_tracker.db.core import InvalidInputError


USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

_EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
_USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')


# ===== CREDENTIAL FORMAT RULES =====
# Shared by the request schemas and the credential store so the server enforces
# them no matter how a registration arrives.

def normalize_username(v: str) -> str:
    v = (v or "").strip()
    if not USERNAME_MIN_LENGTH <= len(v) <= USERNAME_MAX_LENGTH:
        raise InvalidInputError(
            f'Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters long'
        )
    if not _USERNAME_PATTERN.match(v):
        raise InvalidInputError('Username can only contain letters, numbers, hyphens, and underscores')
    return v.lower()


def normalize_email(v: str) -> str:
    v = (v or "").strip()
    if len(v) > EMAIL_MAX_LENGTH or not _EMAIL_PATTERN.match(v):
        raise InvalidInputError('Invalid email format')
    return v.lower()


def check_password(v: str) -> str:
    v = v or ""
    if len(v) < PASSWORD_MIN_LENGTH:
        raise InvalidInputError(f'Password must be at least {PASSWORD_MIN_LENGTH} characters long')
    if len(v) > PASSWORD_MAX_LENGTH:
        raise InvalidInputError(f'Password must be at most {PASSWORD_MAX_LENGTH} characters long')
    if not re.search(r'[A-Z]', v):
        raise InvalidInputError('Password must contain at least one uppercase letter')
    if not re.search(r'[a-z]', v):
        raise InvalidInputError('Password must contain at least one lowercase letter')
    if not re.search(r'\d', v):
        raise InvalidInputError('Password must contain at least one number')
    return v


# ===== USER PYDANTIC MODELS =====

class UserCreate(BaseModel):
    username: str = Field(..., description="Username (3-50 characters)")
    email: str = Field(..., description="User's email address")
    password: str = Field(..., description="Password (8-128 characters, mixed case and a digit)")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        return normalize_username(v)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password(v)


class UserLogin(BaseModel):
    identifier: str = Field(..., description="Username or email")
    password: str = Field(..., description="User's password")

    @field_validator('identifier')
    @classmethod
    def validate_login_identifier(cls, v: str) -> str:
        return v.lower().strip()


class UserResponse(BaseModel):
    """User data returned to client - no sensitive info"""
    id: UUID
    email: str
    username: str
    last_login_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
