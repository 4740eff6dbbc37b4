import pytest

from guestbook.errors import StorageError
from guestbook.notify import NotificationDispatcher
from guestbook.storage import MemoryBlobStorage
from guestbook.store import DrawingLogStore

SECRET = "s3cret"


class FailingStorage(MemoryBlobStorage):
    """Memory storage whose reads and/or writes fail for selected keys."""

    def __init__(self, objects=None, *, fail_get=(), fail_put=()):
        super().__init__(objects)
        self.fail_get = set(fail_get)
        self.fail_put = set(fail_put)

    async def get(self, key):
        if key in self.fail_get:
            raise StorageError()
        return await super().get(key)

    async def put(self, key, data):
        if key in self.fail_put:
            raise StorageError()
        await super().put(key, data)


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    async def send(self, text):
        self.messages.append(text)


@pytest.fixture
def storage():
    return MemoryBlobStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store(storage, notifier):
    return DrawingLogStore(
        storage,
        secret_key=SECRET,
        dispatcher=NotificationDispatcher(notifier),
    )
