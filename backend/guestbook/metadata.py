"""Per-drawing metadata kept positionally aligned with ``drawings.bin``.

Drawings stored before metadata tracking existed have no entry. Alignment is
restored by padding blank entries at the *start* of the array, since those
legacy drawings are always the oldest.
"""

import json
import logging
import secrets
import string
import time
from typing import List, Optional, Sequence

from pydantic import ValidationError

from .schemas import DrawingMetadata

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def parse_metadata(raw: Optional[bytes]) -> List[DrawingMetadata]:
    """Decode the stored JSON array. Anything unreadable counts as empty."""
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        logger.warning("drawing metadata is not valid JSON, treating as empty")
        return []
    if not isinstance(items, list):
        logger.warning("drawing metadata is not a JSON array, treating as empty")
        return []

    entries = []
    for item in items:
        try:
            entries.append(DrawingMetadata.model_validate(item))
        except ValidationError:
            # keep the slot so later entries stay aligned
            entries.append(DrawingMetadata())
    return entries


def dump_metadata(entries: Sequence[DrawingMetadata]) -> bytes:
    payload = [{"id": e.id, "ip": e.ip, "timestamp": e.timestamp} for e in entries]
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def backfill(entries: Sequence[DrawingMetadata], count: int) -> List[DrawingMetadata]:
    entries = list(entries)
    if len(entries) < count:
        padding = [DrawingMetadata() for _ in range(count - len(entries))]
        return padding + entries
    if len(entries) > count:
        logger.warning(
            "drawing metadata has %d entries for %d drawings, dropping the oldest",
            len(entries),
            count,
        )
        return entries[len(entries) - count:] if count else []
    return entries


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_drawing_id(timestamp_ms: int) -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"{_base36(timestamp_ms)}-{suffix}"


def now_ms() -> int:
    return int(time.time() * 1000)


def new_entry(ip: Optional[str], timestamp: Optional[int] = None) -> DrawingMetadata:
    timestamp = now_ms() if timestamp is None else timestamp
    return DrawingMetadata(id=new_drawing_id(timestamp), ip=ip, timestamp=timestamp)
