# backend/api/routes/metrics.py
from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from api.routes.utils import get_chat_state
from core.state import AppState

router = APIRouter()

@router.get("/metrics")
async def get_metrics(chat: AppState = Depends(get_chat_state)):
    """
    Command throughput since process start.

    Example Response:
        {
            "uptime_hours": 1.5,
            "total_commands": 120,
            "commands_per_second": 0.02,
            "commands": {
                "message:send": {"applied": 100, "too_long": 2},
                "rooms:read": {"applied": 18}
            },
            "concurrent_connections": 12
        }
    """
    uptime_seconds = (datetime.now(timezone.utc) - chat.app_start_time).total_seconds()

    commands = {cmd: dict(counts) for cmd, counts in chat.dispatcher.stats.items()}
    total = sum(sum(counts.values()) for counts in commands.values())

    return {
        "uptime_hours": round(uptime_seconds / 3600, 2) if uptime_seconds > 0 else 0,
        "total_commands": total,
        "commands_per_second": round(total / uptime_seconds, 2) if uptime_seconds > 0 else 0,
        "commands": commands,
        "concurrent_connections": chat.connection_manager.connection_count,
    }
