# backend/services/users.py

from __future__ import annotations

import logging
from typing import Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from models.errors import BadRequestError, NotFoundError
from models.models import UserInfo
from services.database import ChatDatabase

logger = logging.getLogger(__name__)


async def get_user_info(db: ChatDatabase, user_id: str) -> UserInfo:
    """Raises NotFoundError until the user has completed sign-up."""
    user = await db.find_user(ObjectId(user_id))
    if not user or not user.get("account"):
        raise NotFoundError("user not found")
    return UserInfo(id=str(user["_id"]), account=user["account"])


async def update_account(db: ChatDatabase, user_id: str, account: Optional[str]) -> UserInfo:
    """
    Set the account handle of a user exactly once.

    The handle must be non-blank (str.strip also removes ideographic spaces)
    and not already taken by another user.
    """
    if account is None or not account.strip():
        raise BadRequestError("account is empty")

    if await db.find_user_by_account(account):
        raise BadRequestError(f"account '{account}' already exists")

    try:
        updated = await db.set_account(ObjectId(user_id), account)
    except DuplicateKeyError:
        # lost a race with another sign-up for the same handle
        raise BadRequestError(f"account '{account}' already exists")
    if updated is None:
        raise BadRequestError("account is already set")

    logger.info("Account '%s' set for user %s", account, user_id)
    return UserInfo(id=str(updated["_id"]), account=updated["account"])
