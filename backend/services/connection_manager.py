# backend/services/connection_manager.py

from __future__ import annotations

from typing import Dict, Set
from fastapi import WebSocket
import logging

logger = logging.getLogger(__name__)

# ============================================================================
# WEBSOCKET CONNECTION MANAGER
# ============================================================================

class ConnectionManager:
    """
    Tracks the open WebSocket connections of each user.

    A user may hold several connections (tabs, devices); each one is an
    independent command channel into the dispatcher.

    Data Structures:
        users: Maps user_id -> Set of WebSocket connections of that user
               Example: {"65f0...": {websocket1, websocket2}}

        connection_users: Maps WebSocket -> user_id
    """

    def __init__(self) -> None:
        self.users: Dict[str, Set[WebSocket]] = {}
        self.connection_users: Dict[WebSocket, str] = {}

    async def connect(self, websocket: WebSocket, user_id: str) -> None:
        """Accept a new WebSocket connection for an authenticated user."""
        await websocket.accept()

        self.users.setdefault(user_id, set()).add(websocket)
        self.connection_users[websocket] = user_id

        logger.info("✓ User %s connected. Total: %d", user_id, len(self.connection_users))

    def disconnect(self, websocket: WebSocket) -> None:
        user_id = self.connection_users.pop(websocket, None)
        if user_id is None:
            return

        connections = self.users.get(user_id)
        if connections is not None:
            connections.discard(websocket)
            if not connections:
                del self.users[user_id]

        logger.info("✗ User %s disconnected. Total: %d", user_id, len(self.connection_users))

    @property
    def connection_count(self) -> int:
        return len(self.connection_users)
