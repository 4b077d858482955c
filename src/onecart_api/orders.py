"""
Order, payment, shipment and product models decoded from API JSON.

Every model exposes a `from_data` classmethod taking the decoded JSON
mapping. Missing required fields and malformed values raise InvalidArgument.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping
from uuid import UUID

from .exceptions import InvalidArgument, UnknownVariant


def _require(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise InvalidArgument(f'Missing required field "{key}"') from None
    except TypeError:
        raise InvalidArgument(f'Expected an object holding "{key}"') from None


def _uuid(value: Any) -> UUID:
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidArgument(f'Invalid UUID "{value}"') from None


def parse_datetime(value: Any) -> datetime:
    """
    Parse an RFC 3339 timestamp. Naive values are taken as UTC.

    Examples:
        >>> parse_datetime("2021-12-16T15:33:33+00:00").isoformat()
        '2021-12-16T15:33:33+00:00'
    """
    if not isinstance(value, str):
        raise InvalidArgument(f'Invalid date "{value}"')
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidArgument(f'Invalid date "{value}"') from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_datetime(data: Mapping[str, Any], key: str) -> datetime | None:
    value = data.get(key)
    return parse_datetime(value) if value is not None else None


@dataclass(frozen=True)
class Money:
    """
    Monetary amount in minor units.

    Attributes:
        amount: Amount in the currency's minor unit (e.g. grosze)
        currency: ISO 4217 currency code
        formatted: Human readable rendering supplied by the API, if any
    """
    amount: int
    currency: str
    formatted: str = ""

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> "Money":
        data = data or {}
        try:
            amount = int(str(data.get("amount", "")))
        except ValueError:
            raise InvalidArgument(f'Invalid money amount "{data.get("amount")}"') from None
        return cls(amount, str(data.get("currency", "")), str(data.get("formatted", "")))

    @classmethod
    def optional(cls, data: Mapping[str, Any] | None) -> "Money | None":
        return cls.from_data(data) if data is not None else None

    def __str__(self) -> str:
        return self.formatted or f"{self.amount} {self.currency}"


@dataclass(frozen=True)
class Person:
    given_name: str
    family_name: str
    organization: str | None = None
    email: str | None = None
    phone_number: str | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> "Person | None":
        if data is None:
            return None
        return cls(
            given_name=data.get("given_name", ""),
            family_name=data.get("family_name", ""),
            organization=data.get("organization"),
            email=data.get("email"),
            phone_number=data.get("phone_number"),
        )


@dataclass(frozen=True)
class Dimensions:
    length: int
    width: int
    height: int

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> "Dimensions":
        data = data or {}
        return cls(
            int(data.get("length", 0)),
            int(data.get("width", 0)),
            int(data.get("height", 0)),
        )


@dataclass(frozen=True)
class Order:
    id: UUID
    number: str
    created_at: datetime
    customer: str
    cancelled_at: datetime | None
    payment_type: str | None
    shipping_type: str | None
    total: Money
    total_with_shipping: Money
    total_with_shipping_without_discount: Money
    payment_state: str | None = None
    shipping_state: str | None = None
    comments: str | None = None
    contact_person: Person | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Order":
        return cls(
            id=_uuid(_require(data, "id")),
            number=str(_require(data, "number")),
            created_at=parse_datetime(_require(data, "created_at")),
            customer=(data.get("customer") or {}).get("email", ""),
            cancelled_at=_optional_datetime(data, "cancelled_at"),
            payment_type=data.get("payment_type"),
            shipping_type=data.get("shipping_type"),
            total=Money.from_data(data.get("total")),
            total_with_shipping=Money.from_data(data.get("total_with_shipping")),
            total_with_shipping_without_discount=Money.from_data(
                data.get("total_with_shipping_without_discount")
            ),
            payment_state=data.get("payment_state"),
            shipping_state=data.get("shipping_state"),
            comments=data.get("comments"),
            contact_person=Person.from_data(data.get("contact_person")),
        )


@dataclass(frozen=True)
class ProductVersion:
    name: str
    price: Money
    tax_rate: float
    short_description: str | None = None
    page_uri: str | None = None
    image_thumbnail_uri: str | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "ProductVersion":
        return cls(
            name=_require(data, "name"),
            price=Money.from_data(data.get("price")),
            tax_rate=float(_require(data, "tax_rate")),
            short_description=data.get("short_description"),
            page_uri=data.get("page_uri"),
            image_thumbnail_uri=data.get("image_thumbnail"),
        )


@dataclass(frozen=True)
class Product:
    id: UUID
    seller_id: str
    short_code_uri: str
    disabled: bool
    supplier_ids: list[UUID]
    version: ProductVersion

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Product":
        return cls(
            id=_uuid(_require(data, "id")),
            seller_id=_require(data, "seller_id"),
            short_code_uri=_require(data, "short_code_uri"),
            disabled=bool(_require(data, "disabled")),
            supplier_ids=[_uuid(value) for value in data.get("suppliers", [])],
            version=ProductVersion.from_data(data),
        )


@dataclass(frozen=True)
class ProductStock:
    seller_id: str
    available_quantity: int

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "ProductStock":
        return cls(_require(data, "seller_id"), int(_require(data, "available_quantity")))


@dataclass(frozen=True)
class OrderItem:
    seller_id: str
    product_version: ProductVersion
    quantity: int
    total: Money
    total_without_discount: Money

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "OrderItem":
        return cls(
            seller_id=_require(data, "seller_id"),
            product_version=ProductVersion.from_data(data),
            quantity=int(_require(data, "quantity")),
            total=Money.from_data(data.get("total")),
            total_without_discount=Money.from_data(data.get("total_without_discount")),
        )


# Payments

@dataclass(frozen=True)
class Payment:
    """Fields shared by every payment type."""
    id: UUID
    created_at: datetime
    value: Money
    completed_at: datetime | None
    cancelled_at: datetime | None

    @staticmethod
    def _common(data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "id": _uuid(_require(data, "id")),
            "created_at": parse_datetime(_require(data, "created_at")),
            "value": Money.from_data(data.get("value")),
            "completed_at": _optional_datetime(data, "completed_at"),
            "cancelled_at": _optional_datetime(data, "cancelled_at"),
        }


@dataclass(frozen=True)
class CashOnDeliveryPayment(Payment):
    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "CashOnDeliveryPayment":
        return cls(**cls._common(data))


@dataclass(frozen=True)
class BlueMediaPayment(Payment):
    gateway: int = 0

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "BlueMediaPayment":
        return cls(**cls._common(data), gateway=int(data.get("gateway") or 0))


@dataclass(frozen=True)
class DotPayPayment(Payment):
    channel: int = 0

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "DotPayPayment":
        return cls(**cls._common(data), channel=int(data.get("channel") or 0))


PAYMENT_TYPES: dict[str, Callable[[Mapping[str, Any]], Payment]] = {
    "cod": CashOnDeliveryPayment.from_data,
    "blue_media": BlueMediaPayment.from_data,
    "dotpay": DotPayPayment.from_data,
}


def parse_payment(data: Mapping[str, Any]) -> Payment:
    """Decode a payment, dispatching on its `type` field."""
    parser = PAYMENT_TYPES.get(data.get("type", ""))
    if parser is None:
        raise UnknownVariant("payment", data.get("type"))
    return parser(data)


# Shipments

@dataclass(frozen=True)
class Shipment:
    """Fields shared by every shipment type."""
    id: UUID
    created_at: datetime
    description: str
    product_ids: list[str]
    price: Money
    cod_value: Money | None
    prepared_at: datetime | None
    delivered_at: datetime | None
    cancelled_at: datetime | None

    @staticmethod
    def _common(data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "id": _uuid(_require(data, "id")),
            "created_at": parse_datetime(_require(data, "created_at")),
            "description": _require(data, "description"),
            "product_ids": list(_require(data, "items")),
            "price": Money.from_data(data.get("price")),
            "cod_value": Money.optional(data.get("cod_price")),
            "prepared_at": _optional_datetime(data, "prepared_at"),
            "delivered_at": _optional_datetime(data, "delivered_at"),
            "cancelled_at": _optional_datetime(data, "cancelled_at"),
        }


@dataclass(frozen=True)
class DigitalShipment(Shipment):
    recipient: str = ""
    return_rights_forfeited: bool = False

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "DigitalShipment":
        return cls(
            **cls._common(data),
            recipient=data.get("recipient") or "",
            return_rights_forfeited=bool(data.get("return_rights_forfeited", False)),
        )


@dataclass(frozen=True)
class ExternalShipment(Shipment):
    courier_company: str = ""
    picked_up_at: datetime | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "ExternalShipment":
        return cls(
            **cls._common(data),
            courier_company=data.get("courier_company") or "",
            picked_up_at=_optional_datetime(data, "picked_up_at"),
        )


@dataclass(frozen=True)
class SelfPickupShipment(Shipment):
    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "SelfPickupShipment":
        return cls(**cls._common(data))


@dataclass(frozen=True)
class SelfDistributionShipment(Shipment):
    point_name: str = ""

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "SelfDistributionShipment":
        return cls(
            **cls._common(data),
            point_name=data.get("self_distribution_point_name") or "",
        )


@dataclass(frozen=True)
class ParcelDetails:
    """Courier parcel data attached to Furgonetka shipments."""
    dimensions: Dimensions
    weight: float
    waybill_number: str | None = None
    surcharge: Money | None = None
    surcharge_description: str | None = None
    returned_at: datetime | None = None
    picked_up_at: datetime | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "ParcelDetails":
        return cls(
            dimensions=Dimensions.from_data(data.get("dimensions")),
            weight=float(_require(data, "weight")),
            waybill_number=data.get("waybill_number"),
            surcharge=Money.optional(data.get("surcharge")),
            surcharge_description=data.get("surcharge_description"),
            returned_at=_optional_datetime(data, "returned_at"),
            picked_up_at=_optional_datetime(data, "picked_up_at"),
        )


@dataclass(frozen=True)
class FurgonetkaShipment(Shipment):
    """
    Shipment handled by a Furgonetka courier.

    Attributes:
        carrier: Shipment type tag, e.g. "furgonetka-dpd"
        parcel: Parcel data shared by all Furgonetka carriers
        sender_point: Parcel locker the sender drops the parcel at
        recipient_point: Parcel locker the parcel is delivered to
        recipient: Recipient contact, where the carrier reports one
    """
    carrier: str = ""
    parcel: ParcelDetails | None = None
    sender_point: str = ""
    recipient_point: str = ""
    recipient: Person | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "FurgonetkaShipment":
        return cls(
            **cls._common(data),
            carrier=data.get("type", ""),
            parcel=ParcelDetails.from_data(data),
            sender_point=data.get("sender_point") or "",
            recipient_point=data.get("recipient_point") or "",
            recipient=Person.from_data(data.get("recipient")) if isinstance(data.get("recipient"), Mapping) else None,
        )


SHIPMENT_TYPES: dict[str, Callable[[Mapping[str, Any]], Shipment]] = {
    "digital": DigitalShipment.from_data,
    "external": ExternalShipment.from_data,
    "furgonetka-dpd": FurgonetkaShipment.from_data,
    "furgonetka-fedex": FurgonetkaShipment.from_data,
    "furgonetka-inpost": FurgonetkaShipment.from_data,
    "furgonetka-inpost-courier": FurgonetkaShipment.from_data,
    "self-pickup": SelfPickupShipment.from_data,
    "self-distribution": SelfDistributionShipment.from_data,
}


def parse_shipment(data: Mapping[str, Any]) -> Shipment:
    """Decode a shipment, dispatching on its `type` field."""
    parser = SHIPMENT_TYPES.get(data.get("type", ""))
    if parser is None:
        raise UnknownVariant("shipment", data.get("type"))
    return parser(data)


@dataclass(frozen=True)
class OrderDetails:
    """Order together with its items, payments and shipments."""
    order: Order
    items: list[OrderItem]
    payments: list[Payment]
    shipments: list[Shipment]

    @classmethod
    def from_data(cls, data: Any) -> "OrderDetails":
        """
        Decode order details from a callback or API payload.

        Raises:
            InvalidArgument: On a missing field, malformed value or unknown
                payment/shipment type
        """
        if not isinstance(data, Mapping):
            raise InvalidArgument("Order details must be an object")
        try:
            return cls(
                order=Order.from_data(data),
                items=[OrderItem.from_data(item) for item in data.get("items") or []],
                payments=[parse_payment(payment) for payment in data.get("payments") or []],
                shipments=[parse_shipment(shipment) for shipment in data.get("shipments") or []],
            )
        except InvalidArgument:
            raise
        except (AttributeError, KeyError, OverflowError, TypeError, ValueError) as e:
            raise InvalidArgument(f"Malformed order details: {e}") from e
