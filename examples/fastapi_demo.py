"""
FastAPI demo receiving signed 1cart callbacks.

Usage:
    # Install dependencies
    pip install -e ".[asgi,fastapi]"

    # Run the server
    uvicorn examples.fastapi_demo:app --port 8009 --reload

    # Or directly
    python examples/fastapi_demo.py

Environment variables:
    ONECART_CLIENT_ID - API client id (compared with the Signature keyId)
    ONECART_SIGNING_KEY - Callback signing key
    ONECART_CALLBACK_MAX_AGE_S - Oldest accepted Date header, in seconds (default: 300)
"""

import logging

from fastapi import FastAPI

from onecart_api import CallbackEndpoint, OrderDetails
from onecart_api.config import Settings, build_receiver

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("fastapi_demo")

settings = Settings()

app = FastAPI(
    title="1cart Callback Demo",
    description="Demo API receiving signed 1cart order callbacks",
    version="0.1.0",
)

# Last callback per order number
received: dict[str, str] = {}


def handle_order_event(event: str, order: OrderDetails) -> bool:
    """Record the event. Returning False asks the platform to redeliver."""
    logger.info("%s: order %s is %s", event, order.order.number, order.order.shipping_state)
    received[order.order.number] = event
    return True


app.add_route(
    "/onecart/callback",
    CallbackEndpoint(build_receiver(settings), handle_order_event),
)


@app.get("/")
async def root():
    """API info endpoint."""
    return {
        "service": "1cart Callback Demo",
        "client_id": settings.client_id,
        "endpoints": {
            "/onecart/callback": "Signed callback receiver (POST)",
            "/orders": "Last event received per order",
        },
    }


@app.get("/orders")
async def orders():
    return received


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8009)
