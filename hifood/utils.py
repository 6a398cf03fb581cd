import html
import time
import uuid
from typing import Optional

import bleach


def sanitize_input(value: Optional[str]) -> str:
    """Sanitize a user-supplied free-text field before it is stored.

    - Strips all HTML tags using bleach.clean(..., tags=set(), strip=True)
    - Unescapes the entities bleach adds, so "&" and "<" are stored as typed
    - Removes NULL bytes
    - Trims whitespace
    """
    if value is None:
        return ""
    val = str(value).replace("\x00", "")
    val = html.unescape(bleach.clean(val, tags=set(), strip=True))
    return val.strip()


def to_int(value) -> Optional[int]:
    """Coerce a client value ("12", 12.0, "12.9") to int, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())
