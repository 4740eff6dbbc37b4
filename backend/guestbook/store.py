"""Drawing log operations over whole-object storage.

Each operation is a full read-modify-write of ``drawings.bin`` and
``drawing-metadata.json``. Nothing serializes concurrent requests: two
writers that read the same snapshot race, and the last put wins. Indexes are
always storage order, oldest drawing first.
"""

import hmac
import logging
from typing import List, Mapping, Optional, Union

from . import codec
from .client_ip import resolve_client_ip
from .errors import (
    AuthorizationError,
    BlockedSubmissionError,
    DrawingsNotFoundError,
    IndexOutOfBoundsError,
    InvalidRequestError,
)
from .metadata import backfill, dump_metadata, new_entry, parse_metadata
from .moderation import BlockList
from .notify import NotificationDispatcher
from .schemas import AppendResult, DeleteResult, DrawingMetadata
from .storage import DRAWINGS_KEY, METADATA_KEY, BlobStorage

logger = logging.getLogger(__name__)


def parse_index(value: Union[str, int, None]) -> int:
    if value is None:
        raise InvalidRequestError()
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise InvalidRequestError()
        return value
    text = str(value).strip()
    if not text or not text.isascii() or not text.isdigit():
        raise InvalidRequestError()
    try:
        return int(text)
    except ValueError:
        # longer than the interpreter's int conversion limit
        raise InvalidRequestError() from None


class DrawingLogStore:
    def __init__(
        self,
        storage: BlobStorage,
        *,
        secret_key: Optional[str] = None,
        block_list: Optional[BlockList] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.storage = storage
        self.block_list = block_list or BlockList(storage)
        self.dispatcher = dispatcher or NotificationDispatcher()
        self._secret_key = secret_key

    def authorize(self, secret: Optional[str]) -> None:
        if not secret:
            raise InvalidRequestError("Missing secret key.")
        if not self._secret_key or not hmac.compare_digest(
            secret.encode("utf-8"), self._secret_key.encode("utf-8")
        ):
            raise AuthorizationError()

    async def list_drawings(self) -> bytes:
        blob = await self.storage.get(DRAWINGS_KEY)
        return blob or b""

    async def list_records(self) -> List[bytes]:
        return codec.decode(await self.list_drawings())

    async def list_metadata(self) -> List[DrawingMetadata]:
        records = await self.list_records()
        entries = parse_metadata(await self.storage.get(METADATA_KEY))
        return backfill(entries, len(records))

    async def append_drawing(self, record: bytes, headers: Mapping[str, str]) -> AppendResult:
        if not record:
            raise InvalidRequestError("Drawing is empty.")

        ip = resolve_client_ip(headers)
        if await self.block_list.is_blocked(ip):
            logger.info("rejected drawing from blocked submitter %s", ip)
            raise BlockedSubmissionError()

        if codec.contains_delimiter(record):
            logger.warning(
                "drawing from %s contains the delimiter byte and will not decode as one record",
                ip or "unknown",
            )

        records = codec.decode(await self.list_drawings())
        entries = backfill(parse_metadata(await self.storage.get(METADATA_KEY)), len(records))

        records.append(bytes(record))
        entry = new_entry(ip)
        entries.append(entry)

        await self.storage.put(DRAWINGS_KEY, codec.encode(records))
        await self.storage.put(METADATA_KEY, dump_metadata(entries))

        index = len(records) - 1
        logger.info("stored drawing %s at index %d from %s", entry.id, index, ip or "unknown")
        self.dispatcher.dispatch(
            f"New guestbook drawing #{index} (id {entry.id}) from {ip or 'unknown IP'}, "
            f"{len(record)} bytes."
        )
        return AppendResult(index=index, count=len(records), metadata=entry)

    async def delete_drawing(
        self,
        secret: Optional[str],
        index: Union[str, int, None],
        *,
        block_ip: bool = False,
    ) -> DeleteResult:
        if not secret:
            raise InvalidRequestError()
        position = parse_index(index)
        self.authorize(secret)

        blob = await self.storage.get(DRAWINGS_KEY)
        if blob is None:
            raise DrawingsNotFoundError()
        if not blob:
            raise DrawingsNotFoundError("Drawings file is empty.")

        records = codec.decode(blob)
        if position >= len(records):
            raise IndexOutOfBoundsError()
        entries = backfill(parse_metadata(await self.storage.get(METADATA_KEY)), len(records))

        del records[position]
        removed = entries.pop(position)
        await self.storage.put(DRAWINGS_KEY, codec.encode(records))
        await self.storage.put(METADATA_KEY, dump_metadata(entries))
        logger.info("deleted drawing at index %d (id %s)", position, removed.id)

        result = DeleteResult(
            index=position,
            remaining=len(records),
            metadata=removed,
            block_requested=block_ip,
        )
        if block_ip and removed.ip:
            result.blocked_ip = removed.ip
            result.block_persisted = await self.block_list.block(removed.ip)
        elif block_ip:
            logger.info("drawing at index %d has no recorded IP, nothing to block", position)

        self.dispatcher.dispatch(describe_deletion(result))
        return result


def describe_deletion(result: DeleteResult) -> str:
    if result.blocked_ip and result.block_persisted:
        return f"Drawing deleted successfully. Blocked IP {result.blocked_ip}."
    if result.blocked_ip:
        return f"Drawing deleted successfully, but blocking IP {result.blocked_ip} failed."
    if result.block_requested:
        return "Drawing deleted successfully. No IP on record to block."
    return "Drawing deleted successfully."
