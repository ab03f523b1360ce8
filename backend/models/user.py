from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator
from models.common import UserRole


class User(BaseModel):
    id:          str
    email:       str
    role:        UserRole = UserRole.USER
    created_at:  datetime
    last_log_in: Optional[datetime] = None


class UserCreate(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v
