# backend/services/service_bus.py

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from azure.servicebus import ServiceBusMessage
from azure.servicebus.aio import ServiceBusClient as AsyncServiceBusClient
from azure.identity.aio import DefaultAzureCredential as AsyncDefaultAzureCredential

from core.config import Settings

logger = logging.getLogger(__name__)


class AsyncServiceBusPublisher:
    """
    Outbound queues on a single Service Bus topic.

    Architecture:
        - One topic for every queue, routed by the ``queue`` application
          property (one SQL-filtered subscription per consumer)
        - One long-lived sender reused for all enqueues
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client = None
        self.credential = None
        self.sender = None

    async def connect(self):
        """Establish async connection to Service Bus and open the topic sender."""
        if self.settings.USE_AZURE_AD:
            self.credential = AsyncDefaultAzureCredential()
            self.client = AsyncServiceBusClient(
                fully_qualified_namespace=self.settings.AZURE_SERVICEBUS_NAMESPACE_FQDN,
                credential=self.credential,
            )
        else:
            self.client = AsyncServiceBusClient.from_connection_string(
                self.settings.AZURE_SERVICEBUS_CONNECTION_STRING
            )

        # the sender opens its link lazily on the first send
        self.sender = self.client.get_topic_sender(topic_name=self.settings.TOPIC_NAME)

        logger.info(
            f"✓ Connected to Service Bus topic '{self.settings.TOPIC_NAME}' at "
            f"{self.settings.AZURE_SERVICEBUS_NAMESPACE_FQDN or 'connection string'}"
        )

    async def enqueue(self, queue: str, payload: Dict[str, Any]):
        sb_message = ServiceBusMessage(
            body=json.dumps(payload),
            application_properties={"queue": queue},
        )
        await self.sender.send_messages(sb_message)
        logger.debug(f"📨 Enqueued to '{queue}' via Service Bus")

    async def close(self):
        """Close all connections."""
        try:
            if self.sender:
                await self.sender.close()
            if self.client:
                await self.client.close()
            if self.credential:
                await self.credential.close()
        except Exception as e:
            logger.error(f"Error closing Service Bus client: {e}")

        logger.info("Service Bus connections closed")
