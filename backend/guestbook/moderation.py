"""Submitter block list persisted as ``blocked-ips.json``.

Moderation data fails open: if the list cannot be read, nobody is blocked.
"""

import json
import logging
from typing import List, Optional

from .errors import StorageError
from .storage import BLOCKED_IPS_KEY, BlobStorage

logger = logging.getLogger(__name__)


def parse_blocked_ips(raw: Optional[bytes]) -> List[str]:
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        logger.warning("blocked IP list is not valid JSON, treating as empty")
        return []
    if not isinstance(items, list):
        logger.warning("blocked IP list is not a JSON array, treating as empty")
        return []
    return [item for item in items if isinstance(item, str) and item]


class BlockList:
    def __init__(self, storage: BlobStorage):
        self._storage = storage

    async def _load(self) -> List[str]:
        return parse_blocked_ips(await self._storage.get(BLOCKED_IPS_KEY))

    async def blocked_ips(self) -> List[str]:
        try:
            return sorted(set(await self._load()))
        except StorageError:
            logger.exception("failed to read blocked IP list")
            return []

    async def is_blocked(self, ip: Optional[str]) -> bool:
        if not ip:
            return False
        try:
            return ip in await self._load()
        except StorageError:
            logger.exception("failed to read blocked IP list, allowing %s", ip)
            return False

    async def block(self, ip: str) -> bool:
        """Add ``ip`` to the list. Returns False when the write did not happen."""
        try:
            ips = set(await self._load())
            if ip in ips:
                return True
            ips.add(ip)
            payload = json.dumps(sorted(ips)).encode("utf-8")
            await self._storage.put(BLOCKED_IPS_KEY, payload)
        except StorageError:
            logger.exception("failed to persist block for %s", ip)
            return False
        logger.info("blocked submitter %s", ip)
        return True
