"""
Users router - manage dashboard accounts

Every route needs a session. Passwords never leave the server:
every record goes out through User.public_dict().
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from typing import Any, Optional
import logging

from models import User
from storage import MemStorage, get_store
from schemas import user_schema
from session_auth import require_user
from entity_helpers import validate_body, found_or_404

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def list_users(
    limit: Optional[int] = Query(None, ge=0),
    current: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    try:
        return [u.public_dict() for u in store.users.list(limit)]
    except Exception as e:
        logger.exception(f"Failed to fetch users: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch users")


@router.get("/{id}")
async def get_user(
    id: int,
    current: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    return found_or_404(store.users.get(id), "User").public_dict()


@router.post("", status_code=201)
async def create_user(
    payload: Any = Body(None),
    current: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    """Create a dashboard account. Usernames are unique."""
    fields = validate_body(user_schema, payload)

    if store.users.get_by_username(fields["username"]):
        raise HTTPException(status_code=400, detail="Username already exists")

    try:
        user = store.users.create(fields)
    except Exception as e:
        logger.exception(f"Failed to create user: {e}")
        raise HTTPException(status_code=500, detail="Failed to create user")

    logger.info(f"User {user.username} ({user.role}) created by {current.username}")
    return user.public_dict()


@router.put("/{id}")
async def update_user(
    id: int,
    payload: Any = Body(None),
    current: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    found_or_404(store.users.get(id), "User")
    fields = validate_body(user_schema, payload, partial=True)

    if fields.get("username"):
        existing = store.users.get_by_username(fields["username"])
        if existing and existing.id != id:
            raise HTTPException(status_code=400, detail="Username already exists")

    try:
        user = store.users.update(id, fields)
    except Exception as e:
        logger.exception(f"Failed to update user {id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update user")

    return user.public_dict()


@router.delete("/{id}")
async def delete_user(
    id: int,
    current: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    if not store.users.delete(id):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"User {id} deleted by {current.username}")
    return {"success": True}
