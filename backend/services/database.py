# backend/services/database.py

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import AsyncMongoClient, ReturnDocument

from core.logging import get_logger
from models.models import RoomStatus

logger = get_logger(__name__)

# ============================================================================
# COLLECTIONS
# ============================================================================

USERS = "users"
ROOMS = "rooms"
MESSAGES = "messages"
ENTER = "enter"


class ChatDatabase:
    """
    Typed access to the chat collections.

    One instance per process: the underlying client owns the connection pool
    and is shared by every command. Each mutation touches a single document,
    so the store's per-document atomicity is all the commands rely on.

    Collections:
        users:    {_id, account, roomOrder}
        rooms:    {_id, name, status, createdBy, updatedBy, createdAt, updatedAt}
        messages: {_id, roomId, userId, message, iine, updated, createdAt, updatedAt}
        enter:    {_id, userId, roomId, unreadCounter, replied}
    """

    def __init__(self, uri: str, name: str) -> None:
        self.uri = uri
        self.name = name
        self.client: Optional[AsyncMongoClient] = None
        self.db = None

    async def connect(self) -> None:
        """Open the client and verify the server answers."""
        self.client = AsyncMongoClient(self.uri, tz_aware=True)
        self.db = self.client[self.name]
        await self.client.admin.command("ping")
        await self.ensure_indexes()
        logger.info("✓ Connected to MongoDB database '%s'", self.name)

    async def ensure_indexes(self) -> None:
        # account is unique once set; users still signing up hold null
        await self.db[USERS].create_index(
            "account",
            name="account_unique",
            unique=True,
            partialFilterExpression={"account": {"$type": "string"}},
        )

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None
            self.db = None
        logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        if self.client is None:
            return False
        await self.client.admin.command("ping")
        return True

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    async def insert_user(self, user: Dict[str, Any]) -> ObjectId:
        result = await self.db[USERS].insert_one(user)
        return result.inserted_id

    async def find_user(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.db[USERS].find_one({"_id": user_id})

    async def find_user_by_account(self, account: str) -> Optional[Dict[str, Any]]:
        return await self.db[USERS].find_one({"account": account})

    async def set_account(self, user_id: ObjectId, account: str) -> Optional[Dict[str, Any]]:
        """
        Set the account only while it is still unset; returns the updated user or None.

        Raises DuplicateKeyError when another user already holds the account.
        """
        return await self.db[USERS].find_one_and_update(
            {"_id": user_id, "account": None},
            {"$set": {"account": account}},
            return_document=ReturnDocument.AFTER,
        )

    # ------------------------------------------------------------------
    # rooms
    # ------------------------------------------------------------------

    async def insert_room(self, room: Dict[str, Any]) -> ObjectId:
        result = await self.db[ROOMS].insert_one(room)
        return result.inserted_id

    async def find_room(self, room_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.db[ROOMS].find_one({"_id": room_id})

    async def set_room_status(
        self, room_id: ObjectId, status: RoomStatus, user_id: ObjectId, now: datetime
    ) -> bool:
        result = await self.db[ROOMS].update_one(
            {"_id": room_id},
            {"$set": {"status": status.value, "updatedBy": user_id, "updatedAt": now}},
        )
        return result.matched_count > 0

    # ------------------------------------------------------------------
    # messages
    # ------------------------------------------------------------------

    async def insert_message(self, message: Dict[str, Any]) -> ObjectId:
        result = await self.db[MESSAGES].insert_one(message)
        return result.inserted_id

    async def find_message(self, message_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.db[MESSAGES].find_one({"_id": message_id})

    async def update_message_text(
        self, message_id: ObjectId, user_id: ObjectId, text: str, now: datetime
    ) -> Optional[Dict[str, Any]]:
        """Edit a message owned by user_id; returns the edited document or None."""
        return await self.db[MESSAGES].find_one_and_update(
            {"_id": message_id, "userId": user_id},
            {"$set": {"message": text, "updated": True, "updatedAt": now}},
            return_document=ReturnDocument.AFTER,
        )

    async def increment_iine(self, message_id: ObjectId) -> bool:
        result = await self.db[MESSAGES].update_one(
            {"_id": message_id}, {"$inc": {"iine": 1}}
        )
        return result.matched_count > 0

    async def count_messages(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self.db[MESSAGES].count_documents(query or {})

    async def aggregate_messages(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        cursor = await self.db[MESSAGES].aggregate(pipeline)
        return await cursor.to_list()

    # ------------------------------------------------------------------
    # enter (per-user room state)
    # ------------------------------------------------------------------

    async def insert_enter(self, enter: Dict[str, Any]) -> ObjectId:
        result = await self.db[ENTER].insert_one(enter)
        return result.inserted_id

    async def find_enter(self, user_id: ObjectId, room_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.db[ENTER].find_one({"userId": user_id, "roomId": room_id})

    async def reset_unread(self, user_id: ObjectId, room_id: ObjectId) -> bool:
        # single $set so both counters are observed reset together
        result = await self.db[ENTER].update_one(
            {"userId": user_id, "roomId": room_id},
            {"$set": {"unreadCounter": 0, "replied": 0}},
        )
        return result.matched_count > 0

    async def find_room_member_ids(self, room_id: ObjectId) -> List[ObjectId]:
        cursor = self.db[ENTER].find({"roomId": room_id}, {"userId": 1})
        return [doc["userId"] async for doc in cursor]
