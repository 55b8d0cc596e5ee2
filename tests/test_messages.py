from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId

from services import messages
from services.database import USERS

pytestmark = pytest.mark.anyio

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def seed_history(db, room_id, user_id, count):
    ids = []
    for i in range(count):
        ids.append(
            await db.insert_message(
                {
                    "_id": ObjectId(),
                    "roomId": room_id,
                    "userId": user_id,
                    "message": f"m{i}",
                    "iine": 0,
                    "updated": False,
                    "createdAt": T0 + timedelta(seconds=i),
                    "updatedAt": None,
                }
            )
        )
    return ids


async def test_save_message(db):
    room_id = ObjectId()
    user_id = ObjectId()

    inserted_id = await messages.save_message(db, "hello", str(room_id), str(user_id))

    doc = await db.find_message(inserted_id)
    assert doc["message"] == "hello"
    assert doc["roomId"] == room_id
    assert doc["userId"] == user_id
    assert doc["iine"] == 0
    assert doc["updated"] is False
    assert doc["updatedAt"] is None
    assert doc["createdAt"].tzinfo is not None


async def test_get_messages_oldest_first_with_author(db):
    room_id = ObjectId()
    user_id = await db.insert_user({"_id": ObjectId(), "account": "alice", "roomOrder": []})
    ids = await seed_history(db, room_id, user_id, 3)
    # another room's traffic is not visible
    await seed_history(db, ObjectId(), user_id, 2)

    page = await messages.get_messages(db, str(room_id), limit=10)

    assert [m.id for m in page] == [str(i) for i in ids]
    assert [m.message for m in page] == ["m0", "m1", "m2"]
    assert all(m.user_account == "alice" for m in page)
    assert all(m.user_id == str(user_id) for m in page)


async def test_get_messages_keeps_newest_page(db):
    room_id = ObjectId()
    ids = await seed_history(db, room_id, ObjectId(), 5)

    page = await messages.get_messages(db, str(room_id), limit=2)

    assert [m.id for m in page] == [str(ids[3]), str(ids[4])]


async def test_get_messages_defaults_to_message_limit(db, settings):
    room_id = ObjectId()
    await seed_history(db, room_id, ObjectId(), settings.MESSAGE_LIMIT + 3)

    page = await messages.get_messages(db, str(room_id))

    assert len(page) == settings.MESSAGE_LIMIT


async def test_get_messages_threshold_pages_back_without_gap(db):
    room_id = ObjectId()
    ids = await seed_history(db, room_id, ObjectId(), 7)

    seen = []
    threshold = None
    while True:
        page = await messages.get_messages(db, str(room_id), threshold, limit=3)
        if not page:
            break
        if threshold is not None:
            assert all(ObjectId(m.id) < ObjectId(threshold) for m in page)
        seen = [m.id for m in page] + seen
        threshold = page[0].id

    assert seen == [str(i) for i in ids]


async def test_get_messages_dangling_author(db):
    room_id = ObjectId()
    await seed_history(db, room_id, ObjectId(), 1)

    page = await messages.get_messages(db, str(room_id))

    assert len(page) == 1
    assert page[0].user_account is None


async def test_get_messages_empty_room(db):
    assert await messages.get_messages(db, str(ObjectId())) == []


def test_build_messages_pipeline():
    room_id = ObjectId()
    threshold = ObjectId()

    pipeline = messages.build_messages_pipeline(str(room_id), str(threshold), 20)

    assert pipeline[0] == {"$match": {"roomId": room_id, "_id": {"$lt": threshold}}}
    assert pipeline[1] == {"$sort": {"_id": -1}}
    assert pipeline[2] == {"$limit": 20}
    assert pipeline[3]["$lookup"]["from"] == USERS
    assert pipeline[3]["$lookup"]["localField"] == "userId"


def test_build_messages_pipeline_without_threshold():
    room_id = ObjectId()

    pipeline = messages.build_messages_pipeline(str(room_id), None, 20)

    assert pipeline[0] == {"$match": {"roomId": room_id}}


def test_message_serializes_with_camel_case_aliases():
    page_item = messages.Message(
        id=str(ObjectId()),
        message="hi",
        user_id=str(ObjectId()),
        created_at=T0,
    )

    dumped = page_item.model_dump(by_alias=True)

    assert {"userId", "userAccount", "createdAt", "updatedAt"} <= set(dumped)
