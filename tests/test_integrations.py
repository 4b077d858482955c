"""Tests for the ASGI and WSGI callback endpoints."""

import io
from datetime import datetime, timezone

import httpx
import pytest
from starlette.applications import Starlette
from starlette.routing import Route
from starlette.testclient import TestClient

from conftest import CLIENT_ID, SIGNING_KEY, http_date, signed_headers
from onecart_api import CallbackReceiver, Credentials
from onecart_api.integrations.asgi import CallbackEndpoint
from onecart_api.integrations.wsgi import CallbackWSGIApp


class Recorder:
    """Processor that records calls and returns a fixed result."""

    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def __call__(self, event, order):
        self.calls.append((event, order.order.number))
        return self.result


@pytest.fixture
def live_receiver():
    """Receiver on the real clock, for requests signed with the current time."""
    return CallbackReceiver(Credentials(CLIENT_ID, SIGNING_KEY))


def current_date() -> str:
    return http_date(datetime.now(timezone.utc))


def create_asgi_app(receiver, processor):
    """Create test ASGI app with the callback endpoint."""
    return Starlette(routes=[Route("/shipment", CallbackEndpoint(receiver, processor))])


class TestASGIEndpoint:
    """Tests for CallbackEndpoint."""

    def test_verified_callback(self, live_receiver, callback_body):
        """Signed callback is processed and answered with 200 OK."""
        processor = Recorder()
        client = TestClient(create_asgi_app(live_receiver, processor))

        response = client.post(
            "/shipment",
            content=callback_body,
            headers=signed_headers(callback_body, current_date()),
        )

        assert response.status_code == 200
        assert response.text == "OK"
        assert response.headers["content-type"].startswith("text/plain")
        assert processor.calls == [("shipmentStateChanged", "3GN-VAV-JUA-5V5-B5P")]

    def test_get_request(self, live_receiver):
        """Non-POST requests reach the receiver and get its 405."""
        client = TestClient(create_asgi_app(live_receiver, Recorder()))

        response = client.get("/shipment")

        assert response.status_code == 405
        assert response.text == "HTTP METHOD ERROR"

    def test_bad_signature(self, live_receiver, callback_body):
        processor = Recorder()
        client = TestClient(create_asgi_app(live_receiver, processor))
        headers = signed_headers(callback_body, current_date(), signing_key="wrong")

        response = client.post("/shipment", content=callback_body, headers=headers)

        assert response.status_code == 401
        assert response.text == "AUTHENTICATION ERROR"
        assert processor.calls == []

    def test_processing_failure(self, live_receiver, callback_body):
        client = TestClient(create_asgi_app(live_receiver, Recorder(result=False)))

        response = client.post(
            "/shipment",
            content=callback_body,
            headers=signed_headers(callback_body, current_date()),
        )

        assert response.status_code == 500
        assert response.text == "PROCESSING ERROR"

    def test_query_string_signed(self, live_receiver, callback_body):
        """The query string is part of the signed target."""
        client = TestClient(create_asgi_app(live_receiver, Recorder()))
        headers = signed_headers(callback_body, current_date(), target="/shipment?shop=7")

        response = client.post("/shipment?shop=7", content=callback_body, headers=headers)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_direct_asgi_call(self, live_receiver, callback_body):
        """The endpoint is a plain ASGI app and can be served without routing."""
        processor = Recorder()
        transport = httpx.ASGITransport(app=CallbackEndpoint(live_receiver, processor))

        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.post(
                "/shipment",
                content=callback_body,
                headers=signed_headers(callback_body, current_date()),
            )

        assert response.status_code == 200
        assert response.text == "OK"
        assert len(processor.calls) == 1

    @pytest.mark.asyncio
    async def test_percent_encoded_path_signed_as_sent(self, live_receiver, callback_body):
        """The signed target keeps the path exactly as sent, not percent-decoded."""
        transport = httpx.ASGITransport(app=CallbackEndpoint(live_receiver, Recorder()))
        headers = signed_headers(callback_body, current_date(), target="/cb%20x?shop=7")

        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.post("/cb%20x?shop=7", content=callback_body, headers=headers)

        assert response.status_code == 200


def wsgi_environ(method="POST", path="/shipment", body=b"", headers=None, query=""):
    """Build a minimal WSGI environ."""
    environ = {
        "REQUEST_METHOD": method,
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "SERVER_NAME": "localhost",
        "wsgi.url_scheme": "http",
        "wsgi.input": io.BytesIO(body),
        "CONTENT_LENGTH": str(len(body)),
    }
    for name, value in (headers or {}).items():
        if name.lower() == "content-type":
            environ["CONTENT_TYPE"] = value
        else:
            environ["HTTP_" + name.upper().replace("-", "_")] = value
    return environ


def call_wsgi(app, environ):
    responses = []

    def start_response(status, headers, exc_info=None):
        responses.append((status, dict(headers)))

    body = b"".join(app(environ, start_response))
    return responses[0][0], responses[0][1], body


class TestWSGIApp:
    """Tests for CallbackWSGIApp."""

    def test_verified_callback(self, live_receiver, callback_body):
        processor = Recorder()
        app = CallbackWSGIApp(live_receiver, processor)
        environ = wsgi_environ(
            body=callback_body,
            headers=signed_headers(callback_body, current_date()),
        )

        status, headers, body = call_wsgi(app, environ)

        assert status == "200 OK"
        assert body == b"OK"
        assert headers["Content-Length"] == "2"
        assert processor.calls == [("shipmentStateChanged", "3GN-VAV-JUA-5V5-B5P")]

    def test_wrong_method(self, live_receiver):
        app = CallbackWSGIApp(live_receiver, Recorder())

        status, _, body = call_wsgi(app, wsgi_environ(method="GET"))

        assert status == "405 Method Not Allowed"
        assert body == b"HTTP METHOD ERROR"

    def test_wrong_content_type(self, live_receiver):
        app = CallbackWSGIApp(live_receiver, Recorder())
        environ = wsgi_environ(body=b"{}", headers={"Content-Type": "text/plain"})

        status, _, body = call_wsgi(app, environ)

        assert status == "415 Unsupported Media Type"
        assert body == b"CONTENT TYPE ERROR"

    def test_stale_date(self, live_receiver, callback_body):
        app = CallbackWSGIApp(live_receiver, Recorder())
        date = "Mon, 01 Jan 2024 00:00:00 GMT"
        environ = wsgi_environ(body=callback_body, headers=signed_headers(callback_body, date))

        status, _, body = call_wsgi(app, environ)

        assert status == "400 Bad Request"
        assert body == b"REQUEST DATE ERROR"

    def test_missing_body(self, live_receiver):
        """An empty signed body fails JSON decoding."""
        app = CallbackWSGIApp(live_receiver, Recorder())
        environ = wsgi_environ(headers=signed_headers(b"", current_date()))
        del environ["CONTENT_LENGTH"]

        status, _, body = call_wsgi(app, environ)

        assert status == "400 Bad Request"
        assert body == b"BODY DECODING ERROR"

    @pytest.mark.parametrize("key", ["RAW_URI", "REQUEST_URI"])
    def test_raw_uri_preferred(self, live_receiver, callback_body, key):
        """PATH_INFO is percent-decoded, so the raw URI is what was signed."""
        app = CallbackWSGIApp(live_receiver, Recorder())
        environ = wsgi_environ(
            path="/cb x",
            body=callback_body,
            headers=signed_headers(callback_body, current_date(), target="/cb%20x"),
        )
        environ[key] = "/cb%20x"

        status, _, body = call_wsgi(app, environ)

        assert status == "200 OK"

    def test_decoded_path_without_raw_uri(self, live_receiver, callback_body):
        app = CallbackWSGIApp(live_receiver, Recorder())
        environ = wsgi_environ(
            path="/shipment",
            query="shop=7",
            body=callback_body,
            headers=signed_headers(callback_body, current_date(), target="/shipment?shop=7"),
        )

        status, _, body = call_wsgi(app, environ)

        assert status == "200 OK"
