"""
ASGI callback endpoint for 1cart (FastAPI/Starlette).
"""

from __future__ import annotations

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from ..callback import CallbackProcessor, CallbackReceiver
from ..models import IncomingRequest


def _request_url(request: Request) -> str:
    """Request URL with the path exactly as sent, before percent-decoding."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return str(request.url)

    target = raw_path.decode("latin-1")
    query = request.scope.get("query_string", b"")
    if query:
        target = f"{target}?{query.decode('latin-1')}"
    return f"{request.url.scheme}://{request.url.netloc}{target}"


class CallbackEndpoint:
    """
    ASGI app that verifies 1cart callbacks and runs a processor on them.

    The receiver and processor are synchronous and run in Starlette's
    threadpool, so a processor may block (e.g. on a database write).
    Every HTTP method is routed here; non-POST requests get a 405 from the
    receiver itself.

    Args:
        receiver: Configured CallbackReceiver
        processor: Called with (event, order_details), returns True on success

    Example (Starlette):
        >>> from starlette.applications import Starlette
        >>> from starlette.routing import Route
        >>>
        >>> endpoint = CallbackEndpoint(receiver, handle_order_event)
        >>> app = Starlette(routes=[Route("/onecart/callback", endpoint)])

    Example (FastAPI):
        >>> app = FastAPI()
        >>> app.add_route("/onecart/callback", endpoint)
    """

    def __init__(self, receiver: CallbackReceiver, processor: CallbackProcessor):
        self.receiver = receiver
        self.processor = processor

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        incoming = IncomingRequest.build(
            method=request.method,
            url=_request_url(request),
            headers=request.headers,
            body=await request.body(),
        )

        result = await run_in_threadpool(
            self.receiver.receive_callback,
            incoming,
            self.processor,
        )

        response = PlainTextResponse(result.body, status_code=result.status_code)
        await response(scope, receive, send)
