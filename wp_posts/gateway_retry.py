from __future__ import annotations

import http.client
import xmlrpc.client
from typing import Any


def _retry_after_seconds(headers: Any) -> float | None:
    if headers is None:
        return None
    try:
        raw = headers.get("Retry-After")
    except AttributeError:
        return None
    if raw is None:
        return None
    try:
        return float(str(raw).strip())
    except ValueError:
        # HTTP-date form is not worth parsing; fall back to backoff.
        return None


def _looks_like_timeout_or_connection(exc: BaseException) -> bool:
    name = type(exc).__name__.casefold()
    return "timeout" in name or "connection" in name or "connect" in name


def is_retryable_gateway_exception(exc: BaseException) -> tuple[bool, float | None, str | None]:
    """
    Retry policy for WordPress XML-RPC calls:
    - HTTP 429 and 5xx responses (honouring Retry-After)
    - network, connection and timeout failures
    Faults are application errors from WordPress and are never retried.
    """
    if isinstance(exc, xmlrpc.client.Fault):
        return False, None, f"fault_{exc.faultCode}"

    if isinstance(exc, xmlrpc.client.ProtocolError):
        code = int(exc.errcode)
        if code == 429 or code >= 500:
            return True, _retry_after_seconds(exc.headers), f"http_{code}"
        return False, None, f"http_{code}"

    if isinstance(exc, (ConnectionError, TimeoutError, http.client.HTTPException)):
        return True, None, "network_error"

    if _looks_like_timeout_or_connection(exc):
        return True, None, "network_error"

    return False, None, None
