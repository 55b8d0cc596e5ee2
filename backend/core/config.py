# backend/core/config.py
import os
from typing import Literal
from dotenv import load_dotenv

class Settings:
    """
    Setup environment variables.
        - MONGODB_URI / MONGODB_DATABASE the document store
        - PUB_SUB_SERVICE the outbound queue broker: "redis", "google_pub_sub" or "azure_service_bus"
        - MAX_MESSAGE_LENGTH the longest message text accepted by message:send
        - MESSAGE_LIMIT the page size of a room's message history
    """

    # Load environment variables from the .env file
    load_dotenv()

    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "mzm")

    PUB_SUB_SERVICE: Literal["redis", "google_pub_sub", "azure_service_bus"] = (
        os.getenv("PUB_SUB_SERVICE", "redis")
    )

    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_ACCESS_KEY: str = os.getenv("REDIS_ACCESS_KEY", "")
    REDIS_SSL: bool = os.getenv("REDIS_SSL", "false").lower() == "true"

    QUEUE_PREFIX: str = os.getenv("QUEUE_PREFIX", "queue")
    QUEUE_MAXLEN: int = int(os.getenv("QUEUE_MAXLEN", "10000"))

    PROJECT_ID = os.getenv("PROJECT_ID", "")
    TOPIC_ID = os.getenv("TOPIC_ID", "")

    AZURE_SERVICEBUS_CONNECTION_STRING = os.getenv("AZURE_SERVICEBUS_CONNECTION_STRING", "")
    AZURE_SERVICEBUS_NAMESPACE_FQDN = os.getenv("AZURE_SERVICEBUS_NAMESPACE_FQDN", "")
    USE_AZURE_AD: bool = os.getenv("USE_AZURE_AD", "false").lower() == "true"
    TOPIC_NAME = os.getenv("TOPIC_NAME", "chat-queues")

    MAX_MESSAGE_LENGTH: int = int(os.getenv("MAX_MESSAGE_LENGTH", "10000"))
    MESSAGE_LIMIT: int = int(os.getenv("MESSAGE_LIMIT", "20"))

settings = Settings()
