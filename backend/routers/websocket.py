"""
WebSocket endpoint for real-time updates.

/ws - dashboard feed, one shared pool for every client
    - CONNECTED: sent once right after the handshake
    - PONG: reply to a client PING
    - NEW_INCIDENT / UPDATE_INCIDENT: incident created / changed
    - NEW_ALERT / UPDATE_ALERT: alert created / changed

Delivery is best-effort: a client that is not connected at publish time
misses the message, and there is no replay on reconnect.
No authentication on this channel.
"""

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
from typing import Set
import json
import logging
import asyncio
import time

logger = logging.getLogger(__name__)

router = APIRouter()


# Message types pushed after store mutations
NEW_INCIDENT = "NEW_INCIDENT"
UPDATE_INCIDENT = "UPDATE_INCIDENT"
NEW_ALERT = "NEW_ALERT"
UPDATE_ALERT = "UPDATE_ALERT"


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class ConnectionRegistry:
    """Live /ws connections plus fan-out to all of them"""

    def __init__(self):
        self._connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._connections)

    async def add(self, websocket: WebSocket):
        async with self._lock:
            self._connections.add(websocket)
            logger.info(f"WebSocket /ws connected (total: {len(self._connections)})")

    async def remove(self, websocket: WebSocket):
        async with self._lock:
            if websocket in self._connections:
                self._connections.discard(websocket)
                logger.info(f"WebSocket /ws disconnected (total: {len(self._connections)})")

    async def publish(self, message_type: str, data: dict) -> int:
        """
        Send {"type": message_type, "data": data} to every writable connection.

        Connections that are not in the CONNECTED state are skipped;
        connections whose send fails are dropped. Sends run concurrently,
        so the caller waits for the slowest client, not the sum of all.
        Returns the number of clients the message was handed to.
        """
        async with self._lock:
            connections = [
                ws for ws in self._connections
                if ws.application_state == WebSocketState.CONNECTED
            ]

        if not connections:
            return 0

        # Serialize once
        message_json = json.dumps({"type": message_type, "data": data})

        failed = []

        async def send(websocket: WebSocket) -> bool:
            try:
                await websocket.send_text(message_json)
                return True
            except Exception as e:
                logger.warning(f"Failed to send {message_type} to /ws client: {e}")
                failed.append(websocket)
                return False

        results = await asyncio.gather(*(send(ws) for ws in connections))

        if failed:
            async with self._lock:
                for ws in failed:
                    self._connections.discard(ws)

        return sum(results)


# =============================================================================
# RECEIVE LOOP
# =============================================================================

async def _receive_frame(websocket: WebSocket) -> str:
    """Next client frame as text; binary frames are decoded as UTF-8"""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    if message.get("text") is not None:
        return message["text"]
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")


async def _receive_loop(websocket: WebSocket):
    """Answer client messages until the socket goes away."""
    while True:
        data = await _receive_frame(websocket)
        try:
            message = json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON received on /ws: {e}")
            await websocket.send_json({
                "type": "ERROR",
                "message": "Failed to process message",
                "timestamp": _timestamp_ms(),
            })
            continue

        msg_type = message.get("type") if isinstance(message, dict) else None
        if msg_type == "PING":
            await websocket.send_json({"type": "PONG", "timestamp": _timestamp_ms()})
        else:
            logger.debug(f"Ignoring /ws message type: {msg_type}")


# =============================================================================
# WebSocket endpoints
# =============================================================================

@router.websocket("/ws")
async def websocket_feed(websocket: WebSocket):
    """
    WebSocket endpoint for real-time incident and alert updates.

    On transport errors the server closes with 1011 so the client
    reconnects instead of sitting on a half-broken socket.
    """
    registry: ConnectionRegistry = websocket.app.state.broadcast

    await websocket.accept()
    await registry.add(websocket)

    try:
        await websocket.send_json({"type": "CONNECTED", "message": "Connection established"})
        await _receive_loop(websocket)
    except WebSocketDisconnect as e:
        logger.debug(f"Client left /ws (code {e.code})")
    except Exception as e:
        logger.error(f"WebSocket /ws error: {e}")
        try:
            await websocket.close(code=1011, reason="Server error occurred")
        except Exception as close_error:
            logger.debug(f"Close after error failed: {close_error}")
    finally:
        await registry.remove(websocket)


@router.get("/ws/status")
async def websocket_status(request: Request):
    """Get WebSocket connection status (for monitoring)"""
    return {"connections": len(request.app.state.broadcast)}
