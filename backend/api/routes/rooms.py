# backend/api/routes/rooms.py

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.utils import check_object_id, get_chat_state, get_user_id
from core.state import AppState
from models.models import Message
from services import messages

router = APIRouter(prefix="/api/rooms")

# ============================================================================
# ROOM HISTORY
# ============================================================================

@router.get(
    "/{room_id}/messages",
    response_model=List[Message],
    response_model_by_alias=True,
)
async def get_room_messages(
    room_id: str,
    threshold: Optional[str] = None,
    user_id: str = Depends(get_user_id),
    chat: AppState = Depends(get_chat_state),
):
    """
    One page of a room's history in reading order (oldest first).

    Args:
        room_id: Room to read
        threshold: Only messages older than this message id; pass the id
                   of the first message of the previous page to go back

    Returns:
        List[Message]: At most MESSAGE_LIMIT messages

    Raises:
        HTTPException: 400 if an id is malformed
    """
    check_object_id(room_id, "room id")
    if threshold:
        check_object_id(threshold, "threshold")
    return await messages.get_messages(chat.db, room_id, threshold)
