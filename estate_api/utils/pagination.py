"""
Opaque keyset cursors for listing endpoints.

A cursor encodes the ``(created_at, id)`` of the last row of a page. Listings
are ordered by ``created_at`` descending with ``id`` descending as the
tie-breaker, so the next page starts strictly after that pair.
"""

from datetime import datetime
from typing import Tuple
import base64
import binascii
import json
import uuid

from estate_api.utils.dates import as_utc
from estate_api.utils.exceptions import InvalidCursorError


def encode_cursor(created_at: datetime, row_id: uuid.UUID) -> str:
    raw = json.dumps({"c": created_at.isoformat(), "i": str(row_id)})
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> Tuple[datetime, uuid.UUID]:
    """
    Decode a cursor produced by ``encode_cursor``.

    Raises:
        InvalidCursorError: If the cursor is malformed
    """
    try:
        data = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
        return as_utc(datetime.fromisoformat(data["c"])), uuid.UUID(data["i"])
    except (binascii.Error, ValueError, KeyError, TypeError, UnicodeError):
        raise InvalidCursorError()
