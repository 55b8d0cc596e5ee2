# backend/api/websocket.py

from __future__ import annotations

import json
import logging
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Header, WebSocket, WebSocketDisconnect, status
from fastapi.websockets import WebSocketState
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    user_id: Optional[str] = Header(default=None, alias="x-user-id"),
):
    """
    WebSocket command channel for one authenticated user.

    Protocol:
    =========

    Client -> Server Commands:
    --------------------------
    Send Message:
        {"cmd": "message:send", "message": "hello", "room": "<room_id>"}

    Modify Message:
        {"cmd": "message:modify", "id": "<message_id>", "message": "hello!"}

    React (iine):
        {"cmd": "message:iine", "id": "<message_id>"}

    Mark Room Read:
        {"cmd": "rooms:read", "room": "<room_id>"}

    Open / Close Room:
        {"cmd": "rooms:open", "roomId": "<room_id>"}
        {"cmd": "rooms:close", "roomId": "<room_id>"}

    Server -> Client Messages:
    -------------------------
    Error:
        {"type": "error", "message": "..."}

    Updates caused by these commands reach clients through the outbound
    queues, not as replies on this socket. A command that is too long or
    targets a missing document gets no reply.

    Lifecycle:
    ==========
    1. The auth proxy in front of us sets the x-user-id header
    2. Connection accepted, user_id tracked
    3. Commands are dispatched one at a time, in arrival order
    4. On disconnect, the connection is forgotten

    Error Handling:
        - Missing or malformed x-user-id: connection refused (1008)
        - Invalid JSON / unknown or malformed command: error message
        - Store errors: logged, error message, socket stays open
        - Anything else: logged with traceback, connection closed (1011)
    """
    if not user_id or not ObjectId.is_valid(user_id):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    chat = websocket.app.state.chat
    await chat.connection_manager.connect(websocket, user_id)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                envelope = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue

            if not isinstance(envelope, dict):
                await websocket.send_json({"type": "error", "message": "Invalid command"})
                continue

            logger.debug("Websocket input from %s: cmd=%s", user_id, envelope.get("cmd"))

            try:
                outcome = await chat.dispatcher.dispatch(user_id, envelope)
            except PyMongoError:
                logger.exception("Store error while handling %s", envelope.get("cmd"))
                await websocket.send_json({"type": "error", "message": "Internal error"})
                continue

            if outcome.reason == "invalid_command":
                await websocket.send_json(
                    {
                        "type": "error",
                        "message": f"Invalid command: {envelope.get('cmd')}",
                    }
                )

    except WebSocketDisconnect:
        chat.connection_manager.disconnect(websocket)
    except Exception:
        logger.exception("WebSocket error for %s", user_id)
        chat.connection_manager.disconnect(websocket)
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
