# backend/services/fanout.py

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Protocol

from bson import ObjectId

from core.config import Settings

logger = logging.getLogger(__name__)

# Queue names shared with the downstream consumers
MESSAGE_QUEUE = "message"
USERS_QUEUE = "users"
UNREAD_QUEUE = "unread"
SEARCH_ROOM_QUEUE = "search:room"


class QueuePublisher(Protocol):
    async def connect(self) -> None: ...

    async def enqueue(self, queue: str, payload: Dict[str, Any]) -> None: ...

    async def close(self) -> None: ...


def _jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    return value


# ============================================================================
# NOTIFICATION FAN-OUT
# ============================================================================

class Notifier:
    """
    The four outbound notifications the dispatcher fires after a mutation.

    Delivery is best-effort: the mutation has already been committed when
    these run, so a broker failure is logged and never undoes or fails the
    command. Consumers see the hex-string form of every id.

    Queues:
        message      -> consumers deliver to everyone in payload["room"]
        users        -> consumers push payload to each of payload["users"]
        unread       -> consumers bump unreadCounter for the room's other members
        search:room  -> consumers reindex the room in the search index
    """

    def __init__(self, publisher: QueuePublisher) -> None:
        self.publisher = publisher

    async def _enqueue(self, queue: str, payload: Dict[str, Any]) -> None:
        try:
            await self.publisher.enqueue(queue, _jsonable(payload))
        except Exception:
            logger.exception("Failed to enqueue to '%s'", queue)

    async def deliver_to_room(self, room_id: str, payload: Dict[str, Any]) -> None:
        await self._enqueue(MESSAGE_QUEUE, {"room": room_id, **payload})

    async def push_to_users(self, user_ids: Iterable[str], payload: Dict[str, Any]) -> None:
        await self._enqueue(USERS_QUEUE, {"users": list(user_ids), "payload": payload})

    async def bump_unread(self, room_id: str, user_id: str) -> None:
        await self._enqueue(UNREAD_QUEUE, {"roomId": room_id, "userId": user_id})

    async def reindex_room(self, room_id: str) -> None:
        await self._enqueue(SEARCH_ROOM_QUEUE, {"roomId": room_id})


def create_publisher(settings: Settings) -> QueuePublisher:
    """Build the broker adapter selected by PUB_SUB_SERVICE."""
    if settings.PUB_SUB_SERVICE == "redis":
        from services.redis_pub_sub import AsyncRedisQueuePublisher

        return AsyncRedisQueuePublisher(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            access_key=settings.REDIS_ACCESS_KEY,
            ssl=settings.REDIS_SSL,
            prefix=settings.QUEUE_PREFIX,
            maxlen=settings.QUEUE_MAXLEN,
        )
    if settings.PUB_SUB_SERVICE == "google_pub_sub":
        from services.gcloud_pub_sub import GooglePubSubPublisher

        return GooglePubSubPublisher(project_id=settings.PROJECT_ID, topic_id=settings.TOPIC_ID)
    if settings.PUB_SUB_SERVICE == "azure_service_bus":
        from services.service_bus import AsyncServiceBusPublisher

        return AsyncServiceBusPublisher(settings)
    raise ValueError(f"Unknown PUB_SUB_SERVICE: {settings.PUB_SUB_SERVICE!r}")
