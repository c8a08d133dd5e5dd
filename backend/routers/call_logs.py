"""
Call logs router - hotline call intake

Every route needs a session; loggedBy is the session user.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from typing import Any, Optional
import logging

from models import User
from storage import MemStorage, get_store
from schemas import call_log_schema
from session_auth import require_user
from entity_helpers import validate_body, found_or_404

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_user)])


@router.get("")
async def list_call_logs(
    limit: Optional[int] = Query(None, ge=0),
    store: MemStorage = Depends(get_store),
):
    try:
        return [c.to_dict() for c in store.call_logs.list(limit)]
    except Exception as e:
        logger.exception(f"Failed to fetch call logs: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch call logs")


@router.get("/{id}")
async def get_call_log(id: int, store: MemStorage = Depends(get_store)):
    return found_or_404(store.call_logs.get(id), "Call log").to_dict()


@router.post("", status_code=201)
async def create_call_log(
    payload: Any = Body(None),
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    fields = validate_body(call_log_schema, payload)
    fields["logged_by"] = user.id

    try:
        call_log = store.call_logs.create(fields)
    except Exception as e:
        logger.exception(f"Failed to create call log: {e}")
        raise HTTPException(status_code=500, detail="Failed to create call log")

    logger.info(f"Call log {call_log.id} recorded by {user.username} ({call_log.severity})")
    return call_log.to_dict()


@router.put("/{id}")
async def update_call_log(
    id: int,
    payload: Any = Body(None),
    store: MemStorage = Depends(get_store),
):
    found_or_404(store.call_logs.get(id), "Call log")
    fields = validate_body(call_log_schema, payload, partial=True)

    try:
        call_log = store.call_logs.update(id, fields)
    except Exception as e:
        logger.exception(f"Failed to update call log {id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update call log")

    return call_log.to_dict()


@router.delete("/{id}")
async def delete_call_log(id: int, store: MemStorage = Depends(get_store)):
    if not store.call_logs.delete(id):
        raise HTTPException(status_code=404, detail="Call log not found")
    return {"success": True}
