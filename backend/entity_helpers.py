"""
Entity route helpers
Shared by the per-entity routers.

Contains:
- Body validation -> 400
- Lookup -> 404
- WebSocket event emission
"""

from fastapi import HTTPException, Request
from typing import Any, Dict, Optional
import logging

from models import Record
from schemas import EntitySchema

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION / LOOKUP
# =============================================================================

def validate_body(schema: EntitySchema, payload: Any, partial: bool = False) -> Dict[str, Any]:
    """Validated fields for the store, or a 400 with every field error in one message"""
    result = schema.validate(payload, partial=partial)
    if not result.ok:
        logger.info(f"Rejected {schema.name} payload: {result.message}")
        raise HTTPException(status_code=400, detail=result.message)
    return result.value


def found_or_404(record: Optional[Record], label: str) -> Record:
    if record is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return record


# =============================================================================
# WEBSOCKET HELPERS
# =============================================================================

async def emit_entity_event(request: Request, event_type: str, data: dict):
    """
    Push a store mutation to every /ws client.

    The mutation is already committed; a broadcast failure is logged and
    never turns the HTTP response into an error.

    Args:
        request: FastAPI request (to reach the registry on app.state)
        event_type: NEW_INCIDENT, UPDATE_INCIDENT, NEW_ALERT or UPDATE_ALERT
        data: The entity exactly as the HTTP response returns it
    """
    registry = request.app.state.broadcast
    try:
        sent = await registry.publish(event_type, data)
        logger.debug(f"WebSocket {event_type} sent to {sent} clients")
    except Exception as e:
        logger.warning(f"WebSocket {event_type} broadcast failed: {e}")
