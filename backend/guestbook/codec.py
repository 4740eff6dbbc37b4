"""Delimiter codec for the concatenated drawings object.

Records are opaque bytes joined by a single reserved byte. There is no
length prefix, so a record containing the delimiter splits in two on decode.
"""

from typing import Iterable, List

DELIMITER = 255
_DELIMITER_BYTES = bytes([DELIMITER])


def decode(blob: bytes) -> List[bytes]:
    records: List[bytes] = []
    start = 0
    for i, value in enumerate(blob):
        if value == DELIMITER:
            if i > start:
                records.append(bytes(blob[start:i]))
            start = i + 1
    if start < len(blob):
        records.append(bytes(blob[start:]))
    return records


def encode(records: Iterable[bytes]) -> bytes:
    return _DELIMITER_BYTES.join(bytes(r) for r in records)


def contains_delimiter(record: bytes) -> bool:
    return DELIMITER in record
