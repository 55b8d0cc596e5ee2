# backend/core/state.py
from __future__ import annotations

from datetime import datetime, timezone

from core.config import Settings
from services.connection_manager import ConnectionManager
from services.database import ChatDatabase
from services.dispatcher import ChatDispatcher
from services.fanout import Notifier, QueuePublisher, create_publisher


class AppState:
    """
    Process-wide collaborators, built once at startup and stored on
    ``app.state.chat``. Routes reach them through ``request.app``.
    """

    def __init__(self, settings: Settings, db: ChatDatabase, publisher: QueuePublisher) -> None:
        self.settings = settings
        self.db = db
        self.publisher = publisher
        self.notifier = Notifier(publisher)
        self.dispatcher = ChatDispatcher(db, self.notifier, settings)
        self.connection_manager = ConnectionManager()
        self.app_start_time: datetime = datetime.now(timezone.utc)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppState":
        db = ChatDatabase(settings.MONGODB_URI, settings.MONGODB_DATABASE)
        return cls(settings, db, create_publisher(settings))

    async def start(self) -> None:
        await self.db.connect()
        await self.publisher.connect()

    async def close(self) -> None:
        await self.publisher.close()
        await self.db.close()
