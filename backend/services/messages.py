# backend/services/messages.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId

from core.config import settings
from models.models import Message
from services.database import ChatDatabase, USERS


async def save_message(db: ChatDatabase, message: str, room_id: str, user_id: str) -> ObjectId:
    """
    Persist a new message and return its id.

    Length is not checked here; the dispatcher validates before calling.
    """
    insert = {
        "message": message,
        "roomId": ObjectId(room_id),
        "userId": ObjectId(user_id),
        "iine": 0,
        "updated": False,
        "createdAt": datetime.now(timezone.utc),
        "updatedAt": None,
    }
    return await db.insert_message(insert)


def build_messages_pipeline(
    room_id: str, threshold_id: Optional[str], limit: int
) -> List[Dict[str, Any]]:
    match: Dict[str, Any] = {"roomId": ObjectId(room_id)}
    if threshold_id:
        match["_id"] = {"$lt": ObjectId(threshold_id)}

    return [
        {"$match": match},
        {"$sort": {"_id": -1}},
        {"$limit": limit},
        {
            "$lookup": {
                "from": USERS,
                "localField": "userId",
                "foreignField": "_id",
                "as": "user",
            }
        },
    ]


async def get_messages(
    db: ChatDatabase,
    room_id: str,
    threshold_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Message]:
    """
    Fetch one page of a room's history, oldest first.

    The query walks newest-first so the limit keeps the most recent
    messages; the page is then reversed into reading order. Pass the id of
    the oldest message returned as ``threshold_id`` to page further back.
    """
    if limit is None:
        limit = settings.MESSAGE_LIMIT

    docs = await db.aggregate_messages(build_messages_pipeline(room_id, threshold_id, limit))

    messages: List[Message] = []
    for doc in docs:
        user = doc.get("user") or []
        messages.insert(
            0,
            Message(
                id=str(doc["_id"]),
                message=doc["message"],
                user_id=str(doc["userId"]),
                # dangling author reference
                user_account=user[0].get("account") if user else None,
                iine=doc.get("iine", 0),
                updated=doc.get("updated", False),
                created_at=doc["createdAt"],
                updated_at=doc.get("updatedAt"),
            ),
        )
    return messages
