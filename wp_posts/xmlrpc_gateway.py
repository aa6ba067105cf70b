from __future__ import annotations

import mimetypes
import xmlrpc.client
from typing import Any, Callable, Mapping, Protocol, TypeVar

from .errors import GatewayError
from .gateway import RemoteRecord
from .gateway_retry import is_retryable_gateway_exception
from .retry import OnRetryFn, RetryConfig, RetryEvent, SleepFn, call_with_retries
from .run_log import RunLogger

T = TypeVar("T")

POST_FIELDS = ["post", "terms", "custom_fields", "post_thumbnail", "post_processed_content"]

_FAULT_NOT_FOUND = 404


class _WordPressMethods(Protocol):
    def getPosts(self, *args: Any) -> Any: ...

    def getPost(self, *args: Any) -> Any: ...

    def editPost(self, *args: Any) -> Any: ...

    def uploadFile(self, *args: Any) -> Any: ...


class _WordPressProxy(Protocol):
    wp: _WordPressMethods


class _TimeoutMixin:
    timeout: float | None = None

    def make_connection(self, host: Any) -> Any:
        conn = super().make_connection(host)  # type: ignore[misc]
        if self.timeout is not None:
            conn.timeout = self.timeout
        return conn


class _TimeoutTransport(_TimeoutMixin, xmlrpc.client.Transport):
    pass


class _SafeTimeoutTransport(_TimeoutMixin, xmlrpc.client.SafeTransport):
    pass


def _build_transport(url: str, timeout_seconds: float | None) -> xmlrpc.client.Transport:
    # DateTime wrappers, not datetime: WordPress sends 00000000T00:00:00 for unset
    # dates, which only parse_gmt_datetime should reject.
    transport_cls = _SafeTimeoutTransport if url.lower().startswith("https") else _TimeoutTransport
    transport = transport_cls(use_builtin_types=False)
    transport.timeout = timeout_seconds
    return transport


def _build_proxy(url: str, timeout_seconds: float | None) -> xmlrpc.client.ServerProxy:
    transport = _build_transport(url, timeout_seconds)
    return xmlrpc.client.ServerProxy(url, transport=transport, allow_none=True)


class XmlRpcGateway:
    """
    RemoteGateway over the WordPress XML-RPC API (wp.getPosts, wp.getPost,
    wp.editPost, wp.uploadFile).

    Transport failures are retried per RetryConfig; whatever still fails is
    raised as GatewayError.
    """

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        *,
        blog_id: int = 1,
        timeout_seconds: float | None = 30.0,
        proxy: _WordPressProxy | None = None,
        retry: RetryConfig | None = None,
        logger: RunLogger | None = None,
        on_retry: OnRetryFn | None = None,
        sleep_fn: SleepFn | None = None,
    ) -> None:
        self._blog_id = int(blog_id)
        self._username = username
        self._password = password
        self._retry = retry or RetryConfig()
        self._logger = logger
        self._on_retry = on_retry
        self._sleep_fn = sleep_fn
        self._proxy = proxy if proxy is not None else _build_proxy(url, timeout_seconds)

    def _auth(self) -> tuple[int, str, str]:
        return self._blog_id, self._username, self._password

    def _handle_retry(self, event: RetryEvent) -> None:
        if self._logger is not None:
            self._logger.warning(
                "gateway_retry",
                post_id=event.post_id,
                operation=event.operation,
                attempt=event.failure_attempt,
                max_attempts=event.max_attempts,
                delay_seconds=round(event.delay_seconds, 3),
                reason=event.reason,
                error_type=event.error_type,
                error_message=event.error_message,
            )
        if self._on_retry is not None:
            self._on_retry(event)

    def _call(self, operation: str, fn: Callable[[], T], *, post_id: Any = None) -> T:
        try:
            return call_with_retries(
                fn,
                cfg=self._retry,
                is_retryable=is_retryable_gateway_exception,
                operation=operation,
                on_retry=self._handle_retry,
                sleep_fn=self._sleep_fn,
                post_id=post_id,
            )
        except xmlrpc.client.Fault as e:
            raise GatewayError(
                f"WordPress rejected {operation} [{e.faultCode}]: {e.faultString}"
            ) from e
        except xmlrpc.client.ProtocolError as e:
            raise GatewayError(f"HTTP {e.errcode} from WordPress during {operation}: {e.errmsg}") from e
        except Exception as e:
            raise GatewayError(f"Unexpected error during {operation}: {e}") from e

    def list_posts(self, filters: Mapping[str, Any]) -> list[RemoteRecord]:
        def _do_list() -> Any:
            return self._proxy.wp.getPosts(*self._auth(), dict(filters), POST_FIELDS)

        result = self._call("wp.getPosts", _do_list)
        if not isinstance(result, list):
            raise GatewayError(f"wp.getPosts returned {type(result).__name__}, expected a list")
        return result

    def get_post(self, post_id: Any) -> RemoteRecord | None:
        def _do_get() -> Any:
            try:
                return self._proxy.wp.getPost(*self._auth(), post_id, POST_FIELDS)
            except xmlrpc.client.Fault as e:
                if e.faultCode == _FAULT_NOT_FOUND:
                    return None
                raise

        result = self._call("wp.getPost", _do_get, post_id=post_id)
        if result is None:
            return None
        if not isinstance(result, Mapping):
            raise GatewayError(f"wp.getPost returned {type(result).__name__}, expected a struct")
        return result

    def update_post(self, post_id: Any, fields: Mapping[str, Any]) -> Any:
        def _do_edit() -> Any:
            return self._proxy.wp.editPost(*self._auth(), post_id, dict(fields))

        return self._call("wp.editPost", _do_edit, post_id=post_id)

    def upload_media(self, filename: str, data: bytes) -> Mapping[str, Any]:
        name = (filename or "").strip()
        if not name:
            raise GatewayError("filename must be a non-empty string")

        payload = {
            "name": name,
            "type": mimetypes.guess_type(name)[0] or "application/octet-stream",
            "bits": xmlrpc.client.Binary(bytes(data)),
            "overwrite": False,
        }

        def _do_upload() -> Any:
            return self._proxy.wp.uploadFile(*self._auth(), payload)

        result = self._call("wp.uploadFile", _do_upload)
        if not isinstance(result, Mapping):
            raise GatewayError(f"wp.uploadFile returned {type(result).__name__}, expected a struct")
        return result
