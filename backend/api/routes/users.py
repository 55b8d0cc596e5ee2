# backend/api/routes/users.py

from fastapi import APIRouter, Depends, HTTPException

from api.routes.utils import get_chat_state, get_user_id
from core.state import AppState
from models.errors import BadRequestError, NotFoundError
from models.models import UpdateAccountRequest, UserInfo
from services import users

router = APIRouter(prefix="/api/users")


@router.get("/me", response_model=UserInfo)
async def get_me(
    user_id: str = Depends(get_user_id),
    chat: AppState = Depends(get_chat_state),
):
    """
    Get the caller's account.

    Raises:
        HTTPException: 404 until sign-up has set the account
    """
    try:
        return await users.get_user_info(chat.db, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/me/account", response_model=UserInfo)
async def update_account(
    request: UpdateAccountRequest,
    user_id: str = Depends(get_user_id),
    chat: AppState = Depends(get_chat_state),
):
    """
    Complete sign-up by choosing an account handle.

    Raises:
        HTTPException: 400 if the handle is blank, taken, or already set
    """
    try:
        return await users.update_account(chat.db, user_id, request.account)
    except BadRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
