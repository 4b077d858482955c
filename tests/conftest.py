"""Shared fixtures for 1cart tests."""

import copy
import json
from datetime import datetime, timezone

import pytest

from onecart_api import CallbackReceiver, Credentials, sign_request

CLIENT_ID = "api client id"
SIGNING_KEY = "api signing key"
CALLBACK_URL = "https://receiver.com/shipment"

ORDER_DATA = {
    "id": "baf976f5-befc-45c8-b3fe-610395a00335",
    "number": "3GN-VAV-JUA-5V5-B5P",
    "created_at": "2021-12-16T15:33:33+00:00",
    "customer": {"email": "test@example.org"},
    "cancelled_at": None,
    "payment_type": "blue_media",
    "shipping_type": "furgonetka-dpd",
    "total": {"amount": "23900", "currency": "PLN", "formatted": "239,00 zł"},
    "total_with_shipping": {"amount": "30185", "currency": "PLN"},
    "total_with_shipping_without_discount": {"amount": "30185", "currency": "PLN"},
    "payment_state": "completed",
    "shipping_state": "partially_delivered",
    "comments": None,
    "contact_person": None,
    "items": [
        {
            "seller_id": "doniczka-czarna",
            "name": "Doniczka czarna",
            "price": {"amount": "1400", "currency": "PLN"},
            "tax_rate": 0.23,
            "quantity": 3,
            "total": {"amount": "4200", "currency": "PLN"},
            "total_without_discount": {"amount": "4200", "currency": "PLN"},
        },
    ],
    "payments": [
        {
            "type": "blue_media",
            "id": "0c5b1bb6-2c53-4b49-9d5a-4b0fb9c4f7a1",
            "created_at": "2021-12-16T15:34:00+00:00",
            "value": {"amount": "30185", "currency": "PLN"},
            "completed_at": "2021-12-16T15:35:00+00:00",
            "cancelled_at": None,
            "gateway": 106,
        },
    ],
    "shipments": [
        {
            "type": "furgonetka-dpd",
            "id": "6f0e4f2e-7c1d-4a55-8a0b-2bde5f7c1a10",
            "created_at": "2021-12-16T15:36:00+00:00",
            "description": "Paczka 1",
            "items": ["doniczka-czarna"],
            "price": {"amount": "6285", "currency": "PLN"},
            "cod_price": None,
            "prepared_at": None,
            "delivered_at": None,
            "cancelled_at": None,
            "dimensions": {"length": 200, "width": 200, "height": 300},
            "weight": 1.5,
            "waybill_number": "WB123",
        },
    ],
}


def http_date(moment: datetime) -> str:
    return moment.strftime("%a, %d %b %Y %H:%M:%S GMT")


@pytest.fixture
def now():
    """Fixed evaluation time used by the receiver clock."""
    return datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def receiver(now):
    return CallbackReceiver(Credentials(CLIENT_ID, SIGNING_KEY), clock=lambda: now)


@pytest.fixture
def order_data():
    return copy.deepcopy(ORDER_DATA)


@pytest.fixture
def callback_body(order_data):
    return json.dumps({"event": "shipmentStateChanged", "order": order_data}).encode()


def signed_headers(
    body: bytes,
    date: str,
    target: str = "/shipment",
    client_id: str = CLIENT_ID,
    signing_key: str = SIGNING_KEY,
    **kwargs,
) -> dict[str, str]:
    """Headers of a correctly signed callback."""
    return {
        "Content-Type": "application/json",
        "Date": date,
        "Signature": sign_request(client_id, signing_key, target, date, body, **kwargs),
    }
