# backend/api/routes/root.py

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "message": "Chat messaging core",
        "version": "1.0",
        "commands": [
            "message:send",
            "message:modify",
            "message:iine",
            "rooms:read",
            "rooms:open",
            "rooms:close",
        ],
        "endpoints": {
            "websocket": "/ws",
            "messages": "/api/rooms/{room_id}/messages",
            "account": "/api/users/me",
            "health": "/health",
            "metrics": "/metrics",
        },
    }
