"""
1cart API client for Python

Call the 1cart REST API and receive its HMAC-signed order callbacks.
"""

from .models import CallbackResponse, Credentials, IncomingRequest, VerificationOutcome
from .callback import CallbackReceiver, parse_request_date
from .client import Client
from .events import Event, assert_valid_event
from .exceptions import ApiError, ApiException, InvalidArgument, OneCartError, UnknownVariant
from .integrations.wsgi import CallbackWSGIApp
from .orders import OrderDetails
from .signature import (
    DEFAULT_PROFILE,
    LEGACY_PROFILE,
    SigningProfile,
    parse_signature_parameters,
    sign_request,
)

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ApiException",
    "CallbackReceiver",
    "CallbackResponse",
    "CallbackWSGIApp",
    "Client",
    "Credentials",
    "DEFAULT_PROFILE",
    "Event",
    "IncomingRequest",
    "InvalidArgument",
    "LEGACY_PROFILE",
    "OneCartError",
    "OrderDetails",
    "SigningProfile",
    "UnknownVariant",
    "VerificationOutcome",
    "assert_valid_event",
    "parse_request_date",
    "parse_signature_parameters",
    "sign_request",
]

# Framework endpoints - optional, require framework dependencies
try:
    from .integrations.asgi import CallbackEndpoint
    __all__.append("CallbackEndpoint")
except ImportError:
    pass
