"""
WSGI callback app for 1cart (Flask or any WSGI server).
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Callable, Iterable

from ..callback import CallbackProcessor, CallbackReceiver
from ..models import IncomingRequest


def _extract_headers(environ: dict[str, Any]) -> dict[str, str]:
    """Extract HTTP headers from WSGI environ."""
    headers: dict[str, str] = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            # HTTP_CONTENT_MD5 -> content-md5
            header_name = key[5:].replace("_", "-").lower()
            headers[header_name] = value
        elif key == "CONTENT_TYPE":
            headers["content-type"] = value
        elif key == "CONTENT_LENGTH":
            headers["content-length"] = value
    return headers


def _build_url(environ: dict[str, Any]) -> str:
    """
    Build full URL from WSGI environ.

    The undecoded RAW_URI or REQUEST_URI is preferred over PATH_INFO, which
    the server has already percent-decoded.
    """
    scheme = environ.get("wsgi.url_scheme", "http")
    host = environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "localhost")

    raw_uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw_uri and raw_uri.startswith("/"):
        return f"{scheme}://{host}{raw_uri}"

    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "/")
    query = environ.get("QUERY_STRING", "")

    url = f"{scheme}://{host}{path}"
    if query:
        url = f"{url}?{query}"
    return url


def _read_body(environ: dict[str, Any]) -> bytes:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        return b""
    if length <= 0 or "wsgi.input" not in environ:
        return b""
    return environ["wsgi.input"].read(length)


class CallbackWSGIApp:
    """
    WSGI app that verifies 1cart callbacks and runs a processor on them.

    Args:
        receiver: Configured CallbackReceiver
        processor: Called with (event, order_details), returns True on success

    Example (Flask):
        >>> from werkzeug.middleware.dispatcher import DispatcherMiddleware
        >>>
        >>> app = Flask(__name__)
        >>> app.wsgi_app = DispatcherMiddleware(app.wsgi_app, {
        ...     "/onecart/callback": CallbackWSGIApp(receiver, handle_order_event),
        ... })
    """

    def __init__(self, receiver: CallbackReceiver, processor: CallbackProcessor):
        self.receiver = receiver
        self.processor = processor

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> Iterable[bytes]:
        incoming = IncomingRequest.build(
            method=environ.get("REQUEST_METHOD", "GET"),
            url=_build_url(environ),
            headers=_extract_headers(environ),
            body=_read_body(environ),
        )

        result = self.receiver.receive_callback(incoming, self.processor)

        body = result.body.encode("utf-8")
        start_response(
            f"{result.status_code} {HTTPStatus(result.status_code).phrase}",
            [
                ("Content-Type", "text/plain; charset=utf-8"),
                ("Content-Length", str(len(body))),
            ],
        )
        return [body]
