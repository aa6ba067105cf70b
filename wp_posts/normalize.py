from __future__ import annotations

import xmlrpc.client
from collections.abc import Sized
from datetime import datetime, timezone
from typing import Any

from .errors import MalformedDateError

_XMLRPC_DATE_FORMATS = ("%Y%m%dT%H:%M:%S", "%Y%m%dT%H:%M:%SZ", "%Y%m%dT%H%M%S")


def is_blank(value: Any) -> bool:
    """
    True for values a caller should treat as "nothing there".

    None, False, whitespace-only strings and empty containers are blank. Numbers
    (including 0) are not.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (bytes, bytearray)):
        return len(value) == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _parse_date_string(text: str) -> datetime | None:
    s = (text or "").strip()
    if not s:
        return None

    for fmt in _XMLRPC_DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue

    iso = s[:-1] + "+00:00" if s.endswith("Z") else s
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        return None


def parse_gmt_datetime(value: Any, *, field: str) -> datetime:
    """
    Parse a WordPress GMT date into an aware UTC datetime.

    Accepts datetime objects, xmlrpc DateTime wrappers, the XML-RPC compact
    string form and ISO-8601 strings. Naive values are taken as GMT.
    """
    if isinstance(value, datetime):
        dt: datetime | None = value
    elif isinstance(value, xmlrpc.client.DateTime):
        dt = _parse_date_string(value.value)
    elif isinstance(value, str):
        dt = _parse_date_string(value)
    else:
        dt = None

    if dt is None:
        raise MalformedDateError(field, value)

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coerce_id(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        v = value.strip()
        return v if v else None
    if isinstance(value, int):
        return str(value)
    return None
