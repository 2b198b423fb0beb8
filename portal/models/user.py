"""User data models for the directory"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

Role = Literal["admin", "user"]
ROLES = ("admin", "user")
DEFAULT_ROLE = "user"


def normalize_role(role: Optional[str]) -> str:
    """Single source of truth for role values.

    Missing or blank roles become ``"user"``; anything outside
    ``admin``/``user`` is rejected.
    """
    value = (role or "").strip().lower() or DEFAULT_ROLE
    if value not in ROLES:
        raise ValueError(f"Role must be one of {', '.join(ROLES)}")
    return value


class UserPublic(BaseModel):
    """User record as exposed over HTTP (no password)"""
    id: int
    username: str
    email: str
    role: Role = DEFAULT_ROLE
    created_at: datetime

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value):
        return normalize_role(value)


class UserRecord(UserPublic):
    """Full directory record. Password is an opaque credential string."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    password: str

    def public(self) -> UserPublic:
        return UserPublic(**self.model_dump(exclude={"password"}))
