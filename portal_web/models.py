"""Request models for the portal HTTP API"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from portal.models.user import normalize_role


class LoginRequest(BaseModel):
    # plain str: malformed emails must fail like any other bad credential
    email: str = ""
    password: str = ""


class CreateUserRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=255)
    # stored and matched verbatim, no address normalization
    email: str = Field(min_length=1, max_length=100)
    role: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("role")
    @classmethod
    def _normalize_role(cls, value):
        return normalize_role(value)
