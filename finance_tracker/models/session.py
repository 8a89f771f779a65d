from pydantic import BaseModel, field_validator
from datetime import datetime, timezone
from uuid import UUID


# ===== SESSION PYDANTIC MODELS =====

class LoginResponse(BaseModel):
    user_id: UUID
    session_token: str
    token_type: str = "bearer"
    expires_at: datetime

    @field_validator('expires_at')
    @classmethod
    def validate_expires_at(cls, v: datetime) -> datetime:
        # Stored as naive UTC; clients get an explicit offset
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
