# backend/api/routes/utils.py

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from fastapi import Header, HTTPException, Request

from core.state import AppState


def get_chat_state(request: Request) -> AppState:
    """Dependency returning the process-wide collaborators built at startup."""
    return request.app.state.chat


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Dependency returning the caller's user id.

    The header is set by the auth proxy and trusted as-is; only its shape
    is checked here.
    """
    if not x_user_id or not ObjectId.is_valid(x_user_id):
        raise HTTPException(status_code=401, detail="Missing user id")
    return x_user_id


def check_object_id(value: str, name: str) -> str:
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {name}")
    return value
