import json
import logging
from typing import Any, Dict, Optional

from google.cloud import pubsub_v1

logger = logging.getLogger(__name__)


class GooglePubSubPublisher:
    """
    Outbound queues on a single Pub/Sub topic.

    The queue name travels as the ``queue`` message attribute so each
    consumer subscribes with a filter on it. Publishing is batched by the
    client library; enqueue hands the message over and returns without
    waiting for the server ack.
    """

    def __init__(self, project_id: str, topic_id: str) -> None:
        self.project_id = project_id
        self.topic_id = topic_id
        self.publisher: Optional[pubsub_v1.PublisherClient] = None
        self.topic_path: Optional[str] = None

    async def connect(self) -> None:
        """Call this once on app startup."""
        self.publisher = pubsub_v1.PublisherClient()
        self.topic_path = self.publisher.topic_path(self.project_id, self.topic_id)
        logger.info("✓ Publishing to Pub/Sub topic %s", self.topic_path)

    async def enqueue(self, queue: str, payload: Dict[str, Any]) -> None:
        data = json.dumps(payload).encode("utf-8")
        future = self.publisher.publish(self.topic_path, data=data, queue=queue)
        future.add_done_callback(lambda f: self._on_published(queue, f))

    @staticmethod
    def _on_published(queue: str, future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("Pub/Sub publish to queue '%s' failed: %s", queue, exc)

    async def close(self) -> None:
        """Call this once on app shutdown; flushes pending batches."""
        if self.publisher is not None:
            self.publisher.stop()
            self.publisher = None
        logger.info("Pub/Sub publisher closed")
