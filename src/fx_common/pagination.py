"""Cursor-based pagination utilities shared by the listing endpoints."""

import base64
import json


def cursor_encode(last_id: int | str) -> str:
    """Encode the last seen primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | str | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        value = payload["id"]
    except Exception:
        return None
    return value if isinstance(value, (int, str)) else None


def cursor_decode_int(cursor: str | None) -> int | None:
    value = cursor_decode(cursor)
    return value if isinstance(value, int) else None


def cursor_decode_str(cursor: str | None) -> str | None:
    value = cursor_decode(cursor)
    return value if isinstance(value, str) else None
