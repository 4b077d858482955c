"""
Flask demo receiving signed 1cart callbacks.

Usage:
    # Install dependencies
    pip install -e ".[flask]"

    # Run the server
    flask --app examples.flask_demo run --port 8010

    # Or directly
    python examples/flask_demo.py

Send a signed test callback:
    python examples/flask_demo.py --send http://localhost:8010/onecart/callback

Environment variables:
    ONECART_CLIENT_ID - API client id (compared with the Signature keyId)
    ONECART_SIGNING_KEY - Callback signing key
"""

import json
import logging
import sys
from datetime import datetime, timezone
from urllib.parse import urlsplit

import httpx
from flask import Flask, Response, request

from onecart_api import IncomingRequest, OrderDetails, sign_request
from onecart_api.config import Settings, build_receiver

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("flask_demo")

settings = Settings()
receiver = build_receiver(settings)

app = Flask(__name__)


def handle_order_event(event: str, order: OrderDetails) -> bool:
    logger.info("%s: order %s", event, order.order.number)
    return True


@app.route("/onecart/callback", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
def onecart_callback():
    """Every method is routed here so the receiver answers 405 itself."""
    incoming = IncomingRequest.build(
        method=request.method,
        url=request.url,
        headers=dict(request.headers),
        body=request.get_data(),
    )
    result = receiver.receive_callback(incoming, handle_order_event)
    return Response(result.body, status=result.status_code, mimetype="text/plain")


@app.route("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}


def send_test_callback(url: str) -> None:
    """Sign and post a minimal orderCreated callback to `url`."""
    body = json.dumps({
        "event": "orderCreated",
        "order": {
            "id": "baf976f5-befc-45c8-b3fe-610395a00335",
            "number": "DEMO-0001",
            "created_at": datetime.now(timezone.utc).isoformat(),
            "customer": {"email": "test@example.org"},
            "total": {"amount": "1000", "currency": "PLN"},
            "total_with_shipping": {"amount": "1000", "currency": "PLN"},
            "total_with_shipping_without_discount": {"amount": "1000", "currency": "PLN"},
        },
    }).encode()
    date = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")
    parts = urlsplit(url)
    target = parts.path + (f"?{parts.query}" if parts.query else "")

    response = httpx.post(
        url,
        content=body,
        headers={
            "Content-Type": "application/json",
            "Date": date,
            "Signature": sign_request(settings.client_id, settings.signing_key, target, date, body),
        },
    )
    print(response.status_code, response.text)


if __name__ == "__main__":
    if len(sys.argv) == 3 and sys.argv[1] == "--send":
        send_test_callback(sys.argv[2])
    else:
        app.run(host="0.0.0.0", port=8010, debug=True)
