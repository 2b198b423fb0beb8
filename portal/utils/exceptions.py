"""Custom exceptions for the user portal"""

from typing import Optional


class PortalError(Exception):
    """Base exception for the portal.

    ``status_code`` is the HTTP status the gateway renders for this error;
    ``detail`` is an optional underlying message surfaced as ``error``.
    """

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(message)


class Unauthenticated(PortalError):
    """No session token, or the token does not resolve to a live session"""
    status_code = 401


class Forbidden(PortalError):
    """Valid session whose role is not allowed on the route"""
    status_code = 403


class NotFound(PortalError):
    """Operation target does not exist"""
    status_code = 404


class Conflict(PortalError):
    """Uniqueness violation in the user directory"""
    status_code = 409


class BackendUnavailable(PortalError):
    """Storage layer failure"""
    status_code = 500


class ConfigError(PortalError):
    """Configuration error"""
    pass
