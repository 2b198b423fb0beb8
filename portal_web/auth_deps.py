"""
FastAPI dependencies for authentication and authorization.

Services live on ``app.state`` and are reached through the dependencies
below, so tests and alternative deployments can swap them out.
"""

from typing import Optional

from fastapi import Depends, Request

from portal.auth.session_store import SessionStore
from portal.models.session import SessionRecord
from portal.services.user_directory import UserDirectory
from portal.utils.config import Settings
from portal.utils.exceptions import Forbidden, Unauthenticated

DEFAULT_COOKIE_NAME = "sessionId"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_user_directory(request: Request) -> UserDirectory:
    return request.app.state.user_directory


def extract_token(request: Request, cookie_name: str = DEFAULT_COOKIE_NAME) -> Optional[str]:
    """Extract session token from request.

    The Authorization header wins over the cookie. The header may carry
    ``Bearer <token>`` or the bare token.
    """
    auth_header = (request.headers.get("Authorization") or "").strip()
    if auth_header:
        if auth_header.lower().startswith("bearer "):
            auth_header = auth_header[7:].strip()
        if auth_header:
            return auth_header

    token = request.cookies.get(cookie_name)
    if token:
        return token

    return None


def request_token(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    """Dependency form of extract_token using the configured cookie name"""
    return extract_token(request, settings.auth.cookie_name)


async def authenticate(
    token: Optional[str] = Depends(request_token),
    session_store: SessionStore = Depends(get_session_store),
) -> SessionRecord:
    """Dependency to get the current session"""
    session = session_store.resolve(token)
    if session is None:
        raise Unauthenticated("Not authenticated")
    return session


async def authorize_admin(session: SessionRecord = Depends(authenticate)) -> SessionRecord:
    """Dependency for admin-only routes"""
    if session.role != "admin":
        raise Forbidden("Admin access required")
    return session
