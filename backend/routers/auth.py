"""
Authentication Router

Handles dashboard user authentication:
- Login: checks username/password, opens a server-side session, sets the cookie
- Logout: drops the session, clears the cookie
- Status: tells the frontend on page load whether the cookie is still good
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from typing import Optional
import logging

from models import User
from schemas import LoginRequest
from storage import MemStorage, get_store
from session_auth import (
    SESSION_COOKIE,
    SessionStore,
    authenticate,
    get_optional_user,
    get_sessions,
    set_session_cookie,
    clear_session_cookie,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _session_user(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "fullName": user.full_name,
        "email": user.email,
        "role": user.role,
        "agency": user.agency,
    }


@router.post("/login")
async def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    store: MemStorage = Depends(get_store),
    sessions: SessionStore = Depends(get_sessions),
):
    user = authenticate(store, data.username, data.password)
    if not user:
        logger.info(f"Failed login for username '{data.username}'")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    # Replace any session this browser already had
    sessions.destroy(request.cookies.get(SESSION_COOKIE))
    token = sessions.create(user.id)
    set_session_cookie(response, token)

    logger.info(f"User login: {user.username} (id={user.id}, role={user.role})")
    return _session_user(user)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_sessions),
):
    sessions.destroy(request.cookies.get(SESSION_COOKIE))
    clear_session_cookie(response)
    return {"success": True}


@router.get("/status")
async def auth_status(user: Optional[User] = Depends(get_optional_user)):
    """Check authentication status. Used by frontend on page load."""
    if user is None:
        return {"authenticated": False}
    return {"authenticated": True, "user": _session_user(user)}
