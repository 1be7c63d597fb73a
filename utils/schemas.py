"""
Pydantic schemas for the Taskvault API and its storage records.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator


# ═══════════════════════════════════════════════════════════════════════════════
# Partial updates
# ═══════════════════════════════════════════════════════════════════════════════


class _Unset:
    """Marker for "field not supplied", distinct from an explicit ``None``."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def present_fields(**fields: Any) -> Dict[str, Any]:
    """Keep only the keyword arguments that were actually supplied."""
    return {name: value for name, value in fields.items() if value is not UNSET}


# ═══════════════════════════════════════════════════════════════════════════════
# Records / views
# ═══════════════════════════════════════════════════════════════════════════════


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class UserView(BaseModel):
    """A user as it may leave the service.  Has no password field at all."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserRecord(UserView):
    """Storage-side user; ``password_hash`` is only loaded on request."""

    password_hash: Optional[str] = Field(None, exclude=True, repr=False)

    def to_view(self) -> UserView:
        return UserView.model_validate(self.model_dump())


class TaskView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class Claim(BaseModel):
    subject: str
    email: str
    issued_at: int
    expires_at: int


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


# ═══════════════════════════════════════════════════════════════════════════════
# Request bodies
# ═══════════════════════════════════════════════════════════════════════════════

# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > _BCRYPT_MAX_BYTES:
        raise ValueError(f"password must be at most {_BCRYPT_MAX_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=8), AfterValidator(_check_password_bytes)]


class SignUpRequest(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=50)
    password: Password


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    password: Optional[Password] = None

    @field_validator("email", "name", "password")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class CreateTaskRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class UpdateTaskRequest(BaseModel):
    """
    Partial task update.

    Only fields present in the request body are applied.  ``status`` is
    free-form here; the service decides which spellings it accepts.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[str] = None

    @field_validator("title", "status")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not null")
        return value
