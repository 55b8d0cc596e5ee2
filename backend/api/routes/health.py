# backend/api/routes/health.py

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

from api.routes.utils import get_chat_state
from core.state import AppState

router = APIRouter()

@router.get("/health")
async def health(chat: AppState = Depends(get_chat_state)):
    """
    Health check endpoint.

    Returns store reachability and the number of open WebSocket connections.
    Used by container health probes and monitoring.
    """
    try:
        database = "ok" if await chat.db.ping() else "disconnected"
    except PyMongoError as e:
        database = f"error: {e}"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "queue_backend": chat.settings.PUB_SUB_SERVICE,
        "connections": chat.connection_manager.connection_count,
        "users_connected": len(chat.connection_manager.users),
    }
