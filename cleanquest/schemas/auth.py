"""Account and session schemas."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from cleanquest.schemas.family import FamilyProfile


class Account(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    password_hash: str = Field(alias="passwordHash")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )


class SessionUser(BaseModel):
    id: str
    username: str
    age: int = 0


class AccountRegisterRequest(BaseModel):
    username: str
    password: str
    password_confirm: str


class AccountRegisterResponse(BaseModel):
    username: str
    message: str


class LoginRequest(BaseModel):
    username: str
    password: str


class SessionResponse(BaseModel):
    logged_in: bool
    user: Optional[SessionUser] = None
    family: Optional[FamilyProfile] = None
