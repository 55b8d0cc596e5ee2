import pytest
from bson import ObjectId

from models.errors import BadRequestError, NotFoundError
from services import users

pytestmark = pytest.mark.anyio


async def test_get_user_info(db):
    user_id = await db.insert_user({"_id": ObjectId(), "account": "aaa"})

    info = await users.get_user_info(db, str(user_id))

    assert info.id == str(user_id)
    assert info.account == "aaa"


async def test_get_user_info_before_sign_up(db):
    user_id = await db.insert_user({"_id": ObjectId(), "account": None})

    with pytest.raises(NotFoundError):
        await users.get_user_info(db, str(user_id))


async def test_get_user_info_unknown_user(db):
    with pytest.raises(NotFoundError):
        await users.get_user_info(db, str(ObjectId()))


@pytest.mark.parametrize(
    "account",
    [None, "", " ", "　", "　 　"],
    ids=["null", "empty", "space", "ideographic-space", "mixed-spaces"],
)
async def test_update_account_rejects_blank(db, account):
    user_id = await db.insert_user({"_id": ObjectId(), "account": None})

    with pytest.raises(BadRequestError):
        await users.update_account(db, str(user_id), account)

    assert (await db.find_user(user_id))["account"] is None


async def test_update_account(db):
    user_id = await db.insert_user({"_id": ObjectId(), "account": None})

    info = await users.update_account(db, str(user_id), "bob")

    assert info.account == "bob"
    assert (await db.find_user(user_id))["account"] == "bob"


async def test_update_account_taken(db):
    await db.insert_user({"_id": ObjectId(), "account": "bob"})
    user_id = await db.insert_user({"_id": ObjectId(), "account": None})

    with pytest.raises(BadRequestError):
        await users.update_account(db, str(user_id), "bob")


async def test_update_account_only_once(db):
    user_id = await db.insert_user({"_id": ObjectId(), "account": "first"})

    with pytest.raises(BadRequestError):
        await users.update_account(db, str(user_id), "second")

    assert (await db.find_user(user_id))["account"] == "first"


async def test_update_account_lost_race_is_bad_request(db, monkeypatch):
    user_id = await db.insert_user({"_id": ObjectId(), "account": None})
    await db.insert_user({"_id": ObjectId(), "account": "bob"})

    # the other sign-up lands between the lookup and the write
    async def not_found_yet(account):
        return None

    monkeypatch.setattr(db, "find_user_by_account", not_found_yet)

    with pytest.raises(BadRequestError, match="already exists"):
        await users.update_account(db, str(user_id), "bob")

    assert (await db.find_user(user_id))["account"] is None
