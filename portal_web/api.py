"""API route handlers for the user portal"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from portal.auth.passwords import hash_password, verify_password
from portal.auth.session_store import SessionStore
from portal.models.session import SessionRecord
from portal.models.user import UserRecord
from portal.services.user_directory import UserDirectory
from portal.utils.config import Settings
from portal.utils.exceptions import BackendUnavailable, Conflict, NotFound, Unauthenticated
from portal.utils.logger import get_logger

from .auth_deps import (
    authenticate,
    authorize_admin,
    get_session_store,
    get_settings,
    get_user_directory,
    request_token,
)
from .models import CreateUserRequest, LoginRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["api"])
auth_router = APIRouter(tags=["auth"])

INVALID_CREDENTIALS = "Invalid email or password."


def _token_hint(token: str) -> str:
    return f"{token[:6]}..."


def _set_session_cookie(response: JSONResponse, token: str, settings: Settings) -> None:
    """Attach the session token as a cookie; clients may use the header instead."""
    response.set_cookie(
        key=settings.auth.cookie_name,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def _hash_and_insert(directory: UserDirectory, user_data: CreateUserRequest, scheme: str) -> UserRecord:
    """Hash the password and insert the user; runs off the event loop"""
    return directory.insert(
        user_data.username,
        hash_password(user_data.password, scheme),
        user_data.email,
        user_data.role,
    )


# --- Authentication ---

@auth_router.post("/login")
async def login(
    credentials: LoginRequest,
    settings: Settings = Depends(get_settings),
    directory: UserDirectory = Depends(get_user_directory),
    session_store: SessionStore = Depends(get_session_store),
):
    """Log in with email and password and open a session"""
    try:
        user = await run_in_threadpool(directory.find_by_email, credentials.email)
    except Exception as e:
        logger.exception("Database error during login", email=credentials.email, error=str(e))
        raise BackendUnavailable("Server error occurred")

    password_ok = user is not None and await run_in_threadpool(
        verify_password, credentials.password, user.password, settings.auth.password_scheme
    )
    if not password_ok:
        logger.info("Failed login attempt", email=credentials.email)
        raise Unauthenticated(INVALID_CREDENTIALS)

    token = session_store.create(user.username, user.email, user.role)
    logger.info(
        "User logged in",
        email=user.email,
        role=user.role,
        session=_token_hint(token),
    )
    response = JSONResponse({
        "success": True,
        "message": f"Welcome, {user.username}!",
        "sessionId": token,
        "role": user.role,
        "username": user.username,
    })
    _set_session_cookie(response, token, settings)
    return response


@auth_router.post("/logout")
async def logout(
    token: Optional[str] = Depends(request_token),
    settings: Settings = Depends(get_settings),
    session_store: SessionStore = Depends(get_session_store),
):
    """Log out the current session. Always succeeds."""
    if session_store.destroy(token):
        logger.info("User session cleared", session=_token_hint(token))
    response = JSONResponse({"success": True, "message": "Logged out successfully"})
    response.delete_cookie(settings.auth.cookie_name)
    return response


@router.get("/user")
async def current_user(session: SessionRecord = Depends(authenticate)):
    """Return the session of the current user"""
    return {"success": True, "user": session.model_dump(mode="json", by_alias=True)}


@router.get("/health")
async def health(session_store: SessionStore = Depends(get_session_store)) -> Dict[str, Any]:
    return {"success": True, "status": "ok", "active_sessions": len(session_store)}


# --- User Management Endpoints (Admin Only) ---

@router.get("/admin/users")
async def list_users(
    admin: SessionRecord = Depends(authorize_admin),
    directory: UserDirectory = Depends(get_user_directory),
):
    """List all users, newest first (admin only)"""
    logger.info("Admin: listing users", admin=admin.username)
    try:
        users = await run_in_threadpool(directory.list_all)
    except Exception as e:
        logger.exception("Admin: error getting users", error=str(e))
        raise BackendUnavailable("Failed to get users")
    return {
        "success": True,
        "users": [user.public().model_dump(mode="json") for user in users],
    }


@router.post("/admin/users")
async def create_user(
    user_data: CreateUserRequest,
    admin: SessionRecord = Depends(authorize_admin),
    settings: Settings = Depends(get_settings),
    directory: UserDirectory = Depends(get_user_directory),
):
    """Create a new user (admin only)"""
    logger.info(
        "Admin: creating user",
        admin=admin.username,
        username=user_data.username,
        role=user_data.role,
    )
    try:
        new_user = await run_in_threadpool(
            _hash_and_insert, directory, user_data, settings.auth.password_scheme
        )
    except Conflict:
        raise
    except BackendUnavailable as e:
        logger.error("Admin: error creating user", error=str(e), detail=e.detail)
        raise BackendUnavailable("Failed to create user", detail=e.detail or str(e))
    except Exception as e:
        logger.exception("Admin: error creating user", error=str(e))
        raise BackendUnavailable("Failed to create user", detail=str(e))

    return {
        "success": True,
        "message": f"User '{new_user.username}' created successfully",
        "user": new_user.public().model_dump(mode="json"),
    }


@router.delete("/admin/users/{user_id}")
async def delete_user(
    user_id: int,
    admin: SessionRecord = Depends(authorize_admin),
    directory: UserDirectory = Depends(get_user_directory),
    session_store: SessionStore = Depends(get_session_store),
):
    """Delete a user and drop their sessions (admin only)"""
    logger.info("Admin: delete request", admin=admin.username, user_id=user_id)
    try:
        deleted_user = await run_in_threadpool(directory.delete_by_id, user_id)
    except Exception as e:
        logger.exception("Admin: error deleting user", user_id=user_id, error=str(e))
        raise BackendUnavailable("Failed to delete user")

    if deleted_user is None:
        raise NotFound("User not found")

    # not transactional with the delete above
    session_store.destroy_all_for_user(deleted_user.username)

    return {
        "success": True,
        "message": f"User '{deleted_user.username}' deleted successfully",
        "deletedUser": deleted_user.public().model_dump(mode="json"),
    }
