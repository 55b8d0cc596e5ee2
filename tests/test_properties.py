"""
Property tests for the command invariants.
"""

from datetime import datetime, timezone

import anyio
from bson import ObjectId
from hypothesis import given, settings as hypothesis_settings, strategies as st

from core.config import Settings
from fakes.fake_database import FakeChatDatabase
from fakes.fake_publisher import RecordingPublisher
from models.models import IineCommand, RoomStatus, SendMessageCommand
from services.dispatcher import ChatDispatcher, message_length
from services.fanout import MESSAGE_QUEUE, SEARCH_ROOM_QUEUE, UNREAD_QUEUE, Notifier

MAX_LENGTH = 50


def make_dispatcher():
    db = FakeChatDatabase()
    publisher = RecordingPublisher()
    dispatcher = ChatDispatcher(db, Notifier(publisher), Settings())
    dispatcher.max_message_length = MAX_LENGTH
    return dispatcher, db, publisher


@given(text=st.text(max_size=MAX_LENGTH * 2))
@hypothesis_settings(max_examples=50, deadline=None)
def test_send_message_persists_iff_within_limit(text):
    dispatcher, db, publisher = make_dispatcher()

    async def run():
        return await dispatcher.send_message(
            str(ObjectId()),
            SendMessageCommand(cmd="message:send", message=text, room=str(ObjectId())),
        )

    outcome = anyio.run(run)

    if message_length(text) <= MAX_LENGTH:
        assert outcome.applied
        assert len(db.collections["messages"]) == 1
        assert len(publisher.calls_to(MESSAGE_QUEUE)) == 1
        assert len(publisher.calls_to(UNREAD_QUEUE)) == 1
    else:
        assert not outcome.applied
        assert len(db.collections["messages"]) == 0
        assert publisher.calls == []


@given(start=st.integers(min_value=0, max_value=10**6))
@hypothesis_settings(max_examples=25, deadline=None)
def test_iine_increments_by_one(start):
    dispatcher, db, publisher = make_dispatcher()

    async def run():
        message_id = await db.insert_message(
            {
                "roomId": ObjectId(),
                "userId": ObjectId(),
                "message": "m",
                "iine": start,
                "updated": False,
                "createdAt": datetime.now(timezone.utc),
                "updatedAt": None,
            }
        )
        await dispatcher.iine(str(ObjectId()), IineCommand(cmd="message:iine", id=str(message_id)))
        return await db.find_message(message_id)

    message = anyio.run(run)

    assert message["iine"] == start + 1
    assert publisher.calls == []


@given(
    initial=st.sampled_from(list(RoomStatus)),
    transitions=st.lists(st.sampled_from(["rooms:open", "rooms:close"]), min_size=1, max_size=6),
)
@hypothesis_settings(max_examples=25, deadline=None)
def test_room_status_follows_last_transition(initial, transitions):
    dispatcher, db, publisher = make_dispatcher()
    actors = [ObjectId() for _ in transitions]

    async def run():
        room_id = await db.insert_room({"name": "r", "status": initial.value, "createdBy": "system"})
        for cmd, actor in zip(transitions, actors):
            await dispatcher.dispatch(str(actor), {"cmd": cmd, "roomId": str(room_id)})
        return await db.find_room(room_id)

    room = anyio.run(run)

    expected = RoomStatus.OPEN if transitions[-1] == "rooms:open" else RoomStatus.CLOSE
    assert room["status"] == expected.value
    assert room["updatedBy"] == actors[-1]
    assert len(publisher.calls_to(SEARCH_ROOM_QUEUE)) == len(transitions)
