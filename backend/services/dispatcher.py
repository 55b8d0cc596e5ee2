# backend/services/dispatcher.py

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict

from bson import ObjectId
from pydantic import ValidationError

from core.config import Settings
from models.models import (
    CloseRoomCommand,
    CommandName,
    CommandOutcome,
    IineCommand,
    ModifyMessageCommand,
    OpenRoomCommand,
    ReadRoomCommand,
    RoomStatus,
    SendMessageCommand,
    parse_command,
)
from services import messages
from services.database import ChatDatabase
from services.fanout import Notifier

logger = logging.getLogger(__name__)

APPLIED = CommandOutcome(applied=True)
TOO_LONG = CommandOutcome(applied=False, reason="too_long")
NOT_FOUND = CommandOutcome(applied=False, reason="not_found")
INVALID_COMMAND = CommandOutcome(applied=False, reason="invalid_command")

# stats key for envelopes whose cmd is not one of ours
UNKNOWN_COMMAND = "unknown"


def message_length(text: str) -> int:
    """Length in UTF-16 code units, the unit browser clients count in."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


# ============================================================================
# COMMAND DISPATCHER
# ============================================================================

class ChatDispatcher:
    """
    Applies user commands to the store and fires the follow-up notifications.

    Every handler is "validate -> one single-document mutation -> fan-out".
    No lock is held: concurrent commands against the same document rely on
    the store's atomic update operators ($set, $inc).

    A command that fails validation, or whose target does not exist, is a
    no-op: nothing is written, nothing is enqueued, and the returned
    outcome says why. Store errors are not caught here.

    Commands:
        message:send    {cmd, message, room}
        message:modify  {cmd, id, message}
        message:iine    {cmd, id}
        rooms:read      {cmd, room}
        rooms:open      {cmd, roomId}
        rooms:close     {cmd, roomId}
    """

    def __init__(self, db: ChatDatabase, notifier: Notifier, settings: Settings) -> None:
        self.db = db
        self.notifier = notifier
        self.max_message_length = settings.MAX_MESSAGE_LENGTH
        # cmd -> {"applied": n, "<reason>": n}
        self.stats: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))

        self.handlers = {
            CommandName.MESSAGE_SEND.value: self.send_message,
            CommandName.MESSAGE_MODIFY.value: self.modify_message,
            CommandName.MESSAGE_IINE.value: self.iine,
            CommandName.ROOMS_READ.value: self.read_room,
            CommandName.ROOMS_OPEN.value: self.open_room,
            CommandName.ROOMS_CLOSE.value: self.close_room,
        }

    async def dispatch(self, user_id: str, envelope: Dict[str, Any]) -> CommandOutcome:
        """
        Parse an envelope from the transport and run its handler.

        Args:
            user_id: Caller, already authenticated by the transport
            envelope: Decoded JSON object with a ``cmd`` field

        Returns:
            CommandOutcome: ``invalid_command`` for unknown or malformed envelopes
        """
        cmd = envelope.get("cmd") if isinstance(envelope, dict) else None
        try:
            command = parse_command(envelope)
        except ValidationError as e:
            key = cmd if isinstance(cmd, str) and cmd in self.handlers else UNKNOWN_COMMAND
            logger.info("Dropped invalid command %r from %s: %s", str(cmd)[:64], user_id, e.error_count())
            self.stats[key][INVALID_COMMAND.reason] += 1
            return INVALID_COMMAND

        outcome = await self.handlers[command.cmd](user_id, command)
        self.stats[command.cmd]["applied" if outcome.applied else outcome.reason] += 1
        return outcome

    # ------------------------------------------------------------------
    # message commands
    # ------------------------------------------------------------------

    async def send_message(self, user_id: str, command: SendMessageCommand) -> CommandOutcome:
        if message_length(command.message) > self.max_message_length:
            logger.info("Dropped message:send from %s: %d chars", user_id, message_length(command.message))
            return TOO_LONG

        inserted_id = await messages.save_message(self.db, command.message, command.room, user_id)

        await self.notifier.deliver_to_room(
            command.room, {"cmd": CommandName.MESSAGE_SEND.value, "id": str(inserted_id)}
        )
        await self.notifier.bump_unread(command.room, user_id)
        return APPLIED

    async def modify_message(self, user_id: str, command: ModifyMessageCommand) -> CommandOutcome:
        if message_length(command.message) > self.max_message_length:
            return TOO_LONG

        updated = await self.db.update_message_text(
            ObjectId(command.id),
            ObjectId(user_id),
            command.message,
            datetime.now(timezone.utc),
        )
        if updated is None:
            return NOT_FOUND

        member_ids = await self.db.find_room_member_ids(updated["roomId"])
        await self.notifier.push_to_users(
            [str(m) for m in member_ids],
            {
                "cmd": CommandName.MESSAGE_MODIFY.value,
                "id": command.id,
                "room": str(updated["roomId"]),
            },
        )
        return APPLIED

    async def iine(self, user_id: str, command: IineCommand) -> CommandOutcome:
        if not await self.db.increment_iine(ObjectId(command.id)):
            return NOT_FOUND
        return APPLIED

    # ------------------------------------------------------------------
    # room commands
    # ------------------------------------------------------------------

    async def read_room(self, user_id: str, command: ReadRoomCommand) -> CommandOutcome:
        if not await self.db.reset_unread(ObjectId(user_id), ObjectId(command.room)):
            return NOT_FOUND

        await self.notifier.deliver_to_room(
            command.room, {"cmd": CommandName.ROOMS_READ.value, "user": user_id}
        )
        return APPLIED

    async def open_room(self, user_id: str, command: OpenRoomCommand) -> CommandOutcome:
        return await self._set_room_status(user_id, command.room_id, RoomStatus.OPEN)

    async def close_room(self, user_id: str, command: CloseRoomCommand) -> CommandOutcome:
        return await self._set_room_status(user_id, command.room_id, RoomStatus.CLOSE)

    async def _set_room_status(self, user_id: str, room_id: str, status: RoomStatus) -> CommandOutcome:
        found = await self.db.set_room_status(
            ObjectId(room_id), status, ObjectId(user_id), datetime.now(timezone.utc)
        )
        if not found:
            return NOT_FOUND

        logger.info("Room %s set to %s by %s", room_id, status.value, user_id)
        await self.notifier.reindex_room(room_id)
        return APPLIED
