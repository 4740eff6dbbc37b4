"""Whole-object key/value storage backends.

Every mutation in the guestbook is a read-modify-write of a full object.
Backends offer plain get and put only: no partial writes, no versions, no
conditional puts. Concurrent writers to one key can lose updates.
"""

import asyncio
import logging
from typing import Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .db import Base
from .errors import StorageError
from .models import StoredObject

logger = logging.getLogger(__name__)

DRAWINGS_KEY = "drawings.bin"
METADATA_KEY = "drawing-metadata.json"
BLOCKED_IPS_KEY = "blocked-ips.json"


class BlobStorage(Protocol):
    async def get(self, key: str) -> Optional[bytes]:
        """Return the object stored under ``key`` or ``None`` when absent."""

    async def put(self, key: str, data: bytes) -> None:
        """Replace the object stored under ``key``."""


class MemoryBlobStorage:
    """Dict-backed storage. Each call yields to the loop like real network I/O."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self.objects: Dict[str, bytes] = dict(objects or {})

    async def get(self, key: str) -> Optional[bytes]:
        await asyncio.sleep(0)
        return self.objects.get(key)

    async def put(self, key: str, data: bytes) -> None:
        await asyncio.sleep(0)
        self.objects[key] = bytes(data)


class SqlBlobStorage:
    """Objects stored as rows of ``stored_objects`` through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self._session_factory.kw["bind"])

    def dispose(self) -> None:
        self._session_factory.kw["bind"].dispose()

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await asyncio.to_thread(self._get, key)
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    async def put(self, key: str, data: bytes) -> None:
        try:
            await asyncio.to_thread(self._put, key, bytes(data))
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def _get(self, key: str) -> Optional[bytes]:
        with self._session_factory() as db:
            obj = db.get(StoredObject, key)
            return None if obj is None else bytes(obj.data)

    def _put(self, key: str, data: bytes) -> None:
        with self._session_factory() as db:
            obj = db.get(StoredObject, key)
            if obj is None:
                db.add(StoredObject(key=key, data=data))
            else:
                obj.data = data
            db.commit()
        logger.debug("stored object %s (%d bytes)", key, len(data))
