"""
Incidents router - CRUD operations for incidents

Reads are public. Create/update/delete need a session.
Create and update push NEW_INCIDENT / UPDATE_INCIDENT to /ws clients.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from typing import Any, Optional
import logging

from models import User
from storage import MemStorage, get_store
from schemas import incident_schema
from session_auth import require_user
from entity_helpers import validate_body, found_or_404, emit_entity_event
from routers.websocket import NEW_INCIDENT, UPDATE_INCIDENT

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def list_incidents(
    limit: Optional[int] = Query(None, ge=0),
    store: MemStorage = Depends(get_store),
):
    """List incidents in the order they were reported (limit = first N)"""
    try:
        return [i.to_dict() for i in store.incidents.list(limit)]
    except Exception as e:
        logger.exception(f"Failed to fetch incidents: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch incidents")


@router.get("/{id}")
async def get_incident(id: int, store: MemStorage = Depends(get_store)):
    """Get single incident by ID"""
    incident = found_or_404(store.incidents.get(id), "Incident")
    return incident.to_dict()


@router.post("", status_code=201)
async def create_incident(
    request: Request,
    payload: Any = Body(None),
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    """Report a new incident. reportedBy is always the session user."""
    fields = validate_body(incident_schema, payload)
    fields["reported_by"] = user.id

    try:
        incident = store.incidents.create(fields)
    except Exception as e:
        logger.exception(f"Failed to create incident: {e}")
        raise HTTPException(status_code=500, detail="Failed to create incident")

    data = incident.to_dict()
    logger.info(f"Incident {incident.id} created by {user.username}: {incident.title}")
    await emit_entity_event(request, NEW_INCIDENT, data)
    return data


@router.put("/{id}")
async def update_incident(
    id: int,
    request: Request,
    payload: Any = Body(None),
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    """Merge a partial update into an incident"""
    found_or_404(store.incidents.get(id), "Incident")
    fields = validate_body(incident_schema, payload, partial=True)

    try:
        incident = store.incidents.update(id, fields)
    except Exception as e:
        logger.exception(f"Failed to update incident {id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update incident")

    data = incident.to_dict()
    logger.info(f"Incident {id} updated by {user.username}: {sorted(fields)}")
    await emit_entity_event(request, UPDATE_INCIDENT, data)
    return data


@router.delete("/{id}")
async def delete_incident(
    id: int,
    user: User = Depends(require_user),
    store: MemStorage = Depends(get_store),
):
    """Permanently delete an incident (references to it are left as-is)"""
    if not store.incidents.delete(id):
        raise HTTPException(status_code=404, detail="Incident not found")
    logger.info(f"Incident {id} deleted by {user.username}")
    return {"success": True}
