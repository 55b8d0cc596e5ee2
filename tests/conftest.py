import pytest

from core.config import Settings
from core.state import AppState
from fakes.fake_database import FakeChatDatabase
from fakes.fake_publisher import RecordingPublisher
from services.dispatcher import ChatDispatcher
from services.fanout import Notifier


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def db():
    return FakeChatDatabase()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def dispatcher(db, publisher, settings):
    return ChatDispatcher(db, Notifier(publisher), settings)


@pytest.fixture
def chat_state(db, publisher, settings):
    return AppState(settings, db, publisher)
