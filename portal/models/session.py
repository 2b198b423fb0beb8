"""Session data model"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .user import DEFAULT_ROLE, Role, normalize_role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRecord(BaseModel):
    """Point-in-time snapshot of a user's identity taken at login.

    The role is copied from the user record and is not re-checked against
    the directory afterwards.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    username: str
    email: str
    role: Role = DEFAULT_ROLE
    login_time: datetime = Field(default_factory=_utcnow, alias="loginTime")

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value):
        return normalize_role(value)
