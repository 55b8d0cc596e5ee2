# backend/models/models.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter


def _check_object_id(value: str) -> str:
    if not ObjectId.is_valid(value):
        raise ValueError(f"not an object id: {value!r}")
    return value


# 24-char hex string as it crosses the transport boundary
ObjectIdStr = Annotated[str, AfterValidator(_check_object_id)]


class RoomStatus(str, Enum):
    OPEN = "OPEN"
    CLOSE = "CLOSE"


class CommandName(str, Enum):
    MESSAGE_SEND = "message:send"
    MESSAGE_MODIFY = "message:modify"
    MESSAGE_IINE = "message:iine"
    ROOMS_READ = "rooms:read"
    ROOMS_OPEN = "rooms:open"
    ROOMS_CLOSE = "rooms:close"


# ============================================================================
# OUTBOUND MODELS
# ============================================================================

class Message(BaseModel):
    id: str
    message: str
    user_id: str = Field(serialization_alias="userId")
    user_account: Optional[str] = Field(default=None, serialization_alias="userAccount")
    iine: int = 0
    updated: bool = False
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")


class UserInfo(BaseModel):
    id: str
    account: str


class UpdateAccountRequest(BaseModel):
    account: Optional[str] = None


class CommandOutcome(BaseModel):
    """Result of a dispatched command; never surfaced to the transport as an error."""
    applied: bool
    reason: Optional[str] = None


# ============================================================================
# COMMAND ENVELOPES
# ============================================================================

class SendMessageCommand(BaseModel):
    cmd: Literal["message:send"]
    message: str
    room: ObjectIdStr


class ModifyMessageCommand(BaseModel):
    cmd: Literal["message:modify"]
    id: ObjectIdStr
    message: str


class IineCommand(BaseModel):
    cmd: Literal["message:iine"]
    id: ObjectIdStr


class ReadRoomCommand(BaseModel):
    cmd: Literal["rooms:read"]
    room: ObjectIdStr


class OpenRoomCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cmd: Literal["rooms:open"]
    room_id: ObjectIdStr = Field(alias="roomId")


class CloseRoomCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cmd: Literal["rooms:close"]
    room_id: ObjectIdStr = Field(alias="roomId")


Command = Annotated[
    Union[
        SendMessageCommand,
        ModifyMessageCommand,
        IineCommand,
        ReadRoomCommand,
        OpenRoomCommand,
        CloseRoomCommand,
    ],
    Field(discriminator="cmd"),
]

command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(envelope: dict) -> Command:
    """Raises pydantic.ValidationError for an unknown cmd or a malformed envelope."""
    return command_adapter.validate_python(envelope)
