"""
Callback event names sent by the platform.
"""

from enum import Enum

from .exceptions import InvalidArgument


class Event(str, Enum):
    ORDER_CREATED = "orderCreated"
    ORDER_CANCELLED = "orderCancelled"
    PAYMENT_STATE_CHANGED = "paymentStateChanged"
    SHIPMENT_STATE_CHANGED = "shipmentStateChanged"


EVENT_NAMES = frozenset(event.value for event in Event)


def assert_valid_event(name: object) -> Event:
    """
    Return the Event for `name` or raise InvalidArgument.

    Examples:
        >>> assert_valid_event("orderCreated")
        <Event.ORDER_CREATED: 'orderCreated'>
    """
    if not isinstance(name, str) or name not in EVENT_NAMES:
        raise InvalidArgument(f'Unknown callback event "{name}"')
    return Event(name)
