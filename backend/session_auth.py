"""
Session Authentication Module for EWERS

Browser clients log in once and carry an opaque session token in an
httpOnly cookie. The token means nothing on its own - the server keeps
token -> user id in memory and resolves it on every gated request.

Session lifecycle:
- Login: credentials checked against the user store, new token issued
- Each request: token looked up, expired entries dropped on the way
- Logout: token removed server-side, cookie cleared

Passwords are stored and compared in plaintext (see DESIGN.md).
"""

import os
import secrets
import logging
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Dict, Optional

from fastapi import Depends, HTTPException, Request

from models import User
from storage import MemStorage, get_store

logger = logging.getLogger(__name__)

# =============================================================================
# CONFIGURATION
# =============================================================================

SESSION_COOKIE = "ewers_session"
SESSION_LIFETIME = timedelta(hours=24)

# Secure cookies are only sent over HTTPS - enable behind TLS in production
COOKIE_SECURE = os.environ.get("EWERS_SESSION_COOKIE_SECURE", "false").lower() in ("1", "true", "yes")


# =============================================================================
# SERVER-SIDE SESSION STATE
# =============================================================================

@dataclass
class Session:
    user_id: int
    expires_at: datetime


class SessionStore:
    """In-memory token -> Session map"""

    def __init__(self, lifetime: timedelta = SESSION_LIFETIME):
        self.lifetime = lifetime
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, user_id: int) -> str:
        """Start a session for user_id. Returns the opaque token."""
        token = secrets.token_urlsafe(48)
        self._sessions[token] = Session(
            user_id=user_id,
            expires_at=datetime.now(timezone.utc) + self.lifetime,
        )
        return token

    def resolve(self, token: Optional[str]) -> Optional[int]:
        """User id for a live token, None if missing or expired"""
        if not token:
            return None
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.expires_at < datetime.now(timezone.utc):
            del self._sessions[token]
            return None
        return session.user_id

    def destroy(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self._sessions.pop(token, None) is not None


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


# =============================================================================
# CREDENTIALS
# =============================================================================

def authenticate(store: MemStorage, username: str, password: str) -> Optional[User]:
    """User for a matching username/password pair, None otherwise"""
    user = store.users.get_by_username(username)
    if not user:
        return None
    if user.password != password:
        return None
    return user


# =============================================================================
# COOKIE HELPERS
# =============================================================================

def set_session_cookie(response, token: str):
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        max_age=int(SESSION_LIFETIME.total_seconds()),
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response):
    response.delete_cookie(key=SESSION_COOKIE)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_optional_user(
    request: Request,
    store: MemStorage = Depends(get_store),
    sessions: SessionStore = Depends(get_sessions),
) -> Optional[User]:
    """Session user, or None when the request is anonymous"""
    user_id = sessions.resolve(request.cookies.get(SESSION_COOKIE))
    if user_id is None:
        return None
    # A user deleted mid-session no longer authenticates
    return store.users.get(user_id)


def require_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Gate for mutating and privileged routes"""
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
