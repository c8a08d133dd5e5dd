"""
Social trends router - keyword volume/sentiment snapshots from social platforms

Reads are public, writes need a session.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from typing import Any, Optional
import logging

from storage import MemStorage, get_store
from schemas import social_trend_schema
from session_auth import require_user
from entity_helpers import validate_body, found_or_404

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def list_social_trends(
    limit: Optional[int] = Query(None, ge=0),
    store: MemStorage = Depends(get_store),
):
    try:
        return [t.to_dict() for t in store.social_trends.list(limit)]
    except Exception as e:
        logger.exception(f"Failed to fetch social trends: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch social trends")


@router.get("/{id}")
async def get_social_trend(id: int, store: MemStorage = Depends(get_store)):
    return found_or_404(store.social_trends.get(id), "Social trend").to_dict()


@router.post("", status_code=201, dependencies=[Depends(require_user)])
async def create_social_trend(
    payload: Any = Body(None),
    store: MemStorage = Depends(get_store),
):
    fields = validate_body(social_trend_schema, payload)

    try:
        trend = store.social_trends.create(fields)
    except Exception as e:
        logger.exception(f"Failed to create social trend: {e}")
        raise HTTPException(status_code=500, detail="Failed to create social trend")

    return trend.to_dict()


@router.put("/{id}", dependencies=[Depends(require_user)])
async def update_social_trend(
    id: int,
    payload: Any = Body(None),
    store: MemStorage = Depends(get_store),
):
    found_or_404(store.social_trends.get(id), "Social trend")
    fields = validate_body(social_trend_schema, payload, partial=True)

    try:
        trend = store.social_trends.update(id, fields)
    except Exception as e:
        logger.exception(f"Failed to update social trend {id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update social trend")

    return trend.to_dict()


@router.delete("/{id}", dependencies=[Depends(require_user)])
async def delete_social_trend(id: int, store: MemStorage = Depends(get_store)):
    if not store.social_trends.delete(id):
        raise HTTPException(status_code=404, detail="Social trend not found")
    return {"success": True}
