"""
Alerts router - early warning alerts

Reads are public. Create/update push NEW_ALERT / UPDATE_ALERT to /ws clients.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from typing import Any, Optional
import logging

from models import User
from storage import MemStorage, get_store
from schemas import alert_schema
from session_auth import require_user
from entity_helpers import validate_body, found_or_404, emit_entity_event
from routers.websocket import NEW_ALERT, UPDATE_ALERT

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def list_alerts(
    limit: Optional[int] = Query(None, ge=0),
    store: MemStorage = Depends(get_store),
):
    try:
        return [a.to_dict() for a in store.alerts.list(limit)]
    except Exception as e:
        logger.exception(f"Failed to fetch alerts: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch alerts")


@router.get("/{id}")
async def get_alert(id: int, store: MemStorage = Depends(get_store)):
    return found_or_404(store.alerts.get(id), "Alert").to_dict()


@router.post("", status_code=201)
async def create_alert(
    request: Request,
    payload: Any = Body(None),
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    """Raise a new alert and push it to every dashboard"""
    fields = validate_body(alert_schema, payload)

    try:
        alert = store.alerts.create(fields)
    except Exception as e:
        logger.exception(f"Failed to create alert: {e}")
        raise HTTPException(status_code=500, detail="Failed to create alert")

    data = alert.to_dict()
    logger.info(f"Alert {alert.id} raised by {user.username}: [{alert.severity}] {alert.title}")
    await emit_entity_event(request, NEW_ALERT, data)
    return data


@router.put("/{id}")
async def update_alert(
    id: int,
    request: Request,
    payload: Any = Body(None),
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    found_or_404(store.alerts.get(id), "Alert")
    fields = validate_body(alert_schema, payload, partial=True)

    try:
        alert = store.alerts.update(id, fields)
    except Exception as e:
        logger.exception(f"Failed to update alert {id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update alert")

    data = alert.to_dict()
    await emit_entity_event(request, UPDATE_ALERT, data)
    return data


@router.delete("/{id}")
async def delete_alert(
    id: int,
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    if not store.alerts.delete(id):
        raise HTTPException(status_code=404, detail="Alert not found")
    logger.info(f"Alert {id} deleted by {user.username}")
    return {"success": True}
