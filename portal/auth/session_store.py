"""
In-memory session store.

Maps opaque session tokens to SessionRecord snapshots. Sessions are never
persisted and have no expiry: they live until logout, until their user is
deleted, or until the process restarts.
"""

from __future__ import annotations

import secrets
from typing import Dict, Optional

from portal.models.session import SessionRecord
from portal.utils.logger import get_logger

logger = get_logger(__name__)

# 16 random bytes, hex encoded (32 chars)
TOKEN_BYTES = 16


class SessionStore:
    """Process-local token -> session mapping"""

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _new_token(self) -> str:
        token = secrets.token_hex(TOKEN_BYTES)
        while token in self._sessions:
            token = secrets.token_hex(TOKEN_BYTES)
        return token

    def create(self, username: str, email: str, role: Optional[str]) -> str:
        """Create a session for the given identity and return its token"""
        token = self._new_token()
        self._sessions[token] = SessionRecord(username=username, email=email, role=role)
        return token

    def resolve(self, token: Optional[str]) -> Optional[SessionRecord]:
        """Return the session for ``token``, or None"""
        if not token:
            return None
        return self._sessions.get(token)

    def destroy(self, token: Optional[str]) -> bool:
        """Remove a session. Unknown tokens are ignored."""
        if not token:
            return False
        return self._sessions.pop(token, None) is not None

    def destroy_all_for_user(self, username: str) -> int:
        """Remove every session belonging to ``username``; return the count"""
        stale = [
            token
            for token, session in self._sessions.items()
            if session.username == username
        ]
        for token in stale:
            del self._sessions[token]
        if stale:
            logger.info("Removed sessions for user", username=username, count=len(stale))
        return len(stale)
