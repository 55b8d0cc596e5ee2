# backend/services/redis_pub_sub.py
import json
import logging
from typing import Any, Dict

import redis.asyncio as redis

logger = logging.getLogger(__name__)

class AsyncRedisQueuePublisher:
    """
    Outbound queues on Redis streams.

    Each queue is the stream ``<prefix>:<queue>``; every enqueue is one
    XADD with an approximate MAXLEN so a stalled consumer cannot grow a
    stream without bound. Consumers read with XREADGROUP.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        access_key: str = "",
        ssl: bool = False,
        prefix: str = "queue",
        maxlen: int = 10000,
    ):
        self.host = host
        self.port = port
        self.access_key = access_key
        self.ssl = ssl
        self.prefix = prefix
        self.maxlen = maxlen
        self.client = None

    async def connect(self):
        """Establish async connection to Redis."""
        scheme = "rediss" if self.ssl else "redis"
        self.client = redis.from_url(
            f"{scheme}://:{self.access_key}@{self.host}:{self.port}",
            decode_responses=True
        )
        await self.client.ping()
        logger.info(f"✓ Connected to Redis at {self.host}:{self.port}")

    def stream_name(self, queue: str) -> str:
        return f"{self.prefix}:{queue}"

    async def enqueue(self, queue: str, payload: Dict[str, Any]):
        """Append one job to the queue's stream."""
        stream = self.stream_name(queue)
        entry_id = await self.client.xadd(
            stream,
            {"data": json.dumps(payload)},
            maxlen=self.maxlen,
            approximate=True,
        )
        logger.debug(f"📤 Enqueued {entry_id} on Redis stream '{stream}'")

    async def close(self):
        """Close connections."""
        if self.client:
            await self.client.aclose()
            self.client = None
        logger.info("Redis connection closed")
