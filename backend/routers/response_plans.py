"""
Response plans router - playbooks per incident type/severity

Every route needs a session. updatedAt is bumped by the store on each update.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from typing import Any, Optional
import logging

from models import User
from storage import MemStorage, get_store
from schemas import response_plan_schema
from session_auth import require_user
from entity_helpers import validate_body, found_or_404

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_user)])


@router.get("")
async def list_response_plans(
    limit: Optional[int] = Query(None, ge=0),
    store: MemStorage = Depends(get_store),
):
    try:
        return [p.to_dict() for p in store.response_plans.list(limit)]
    except Exception as e:
        logger.exception(f"Failed to fetch response plans: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch response plans")


@router.get("/{id}")
async def get_response_plan(id: int, store: MemStorage = Depends(get_store)):
    return found_or_404(store.response_plans.get(id), "Response plan").to_dict()


@router.post("", status_code=201)
async def create_response_plan(
    payload: Any = Body(None),
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    fields = validate_body(response_plan_schema, payload)
    fields["created_by"] = user.id

    try:
        plan = store.response_plans.create(fields)
    except Exception as e:
        logger.exception(f"Failed to create response plan: {e}")
        raise HTTPException(status_code=500, detail="Failed to create response plan")

    logger.info(f"Response plan {plan.id} created by {user.username}: {plan.title}")
    return plan.to_dict()


@router.put("/{id}")
async def update_response_plan(
    id: int,
    payload: Any = Body(None),
    store: MemStorage = Depends(get_store),
):
    found_or_404(store.response_plans.get(id), "Response plan")
    fields = validate_body(response_plan_schema, payload, partial=True)

    try:
        plan = store.response_plans.update(id, fields)
    except Exception as e:
        logger.exception(f"Failed to update response plan {id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update response plan")

    return plan.to_dict()


@router.delete("/{id}")
async def delete_response_plan(id: int, store: MemStorage = Depends(get_store)):
    if not store.response_plans.delete(id):
        raise HTTPException(status_code=404, detail="Response plan not found")
    return {"success": True}
