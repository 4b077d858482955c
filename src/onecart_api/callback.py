"""
Receiver for signed 1cart callbacks.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Callable

from .events import assert_valid_event
from .exceptions import InvalidArgument
from .models import CallbackResponse, Credentials, IncomingRequest, VerificationOutcome
from .orders import OrderDetails, parse_datetime
from .signature import (
    DEFAULT_PROFILE,
    SigningProfile,
    parse_signature_parameters,
    verify_signature,
)

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

# Accepted distance of the Date header from the current time
DEFAULT_MAX_AGE = timedelta(minutes=5)
DEFAULT_MAX_SKEW = timedelta(minutes=1)

CallbackProcessor = Callable[[str, OrderDetails], bool]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _reject_constant(name: str) -> None:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant {name}")


def parse_request_date(value: str) -> datetime | None:
    """
    Parse a Date header in HTTP-date or RFC 3339 form.

    Returns None when the value is neither.

    Examples:
        >>> parse_request_date("Mon, 19 Oct 2026 10:00:00 GMT").isoformat()
        '2026-10-19T10:00:00+00:00'
        >>> parse_request_date("wrong date") is None
        True
    """
    value = value.strip()
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            return parse_datetime(value)
        except InvalidArgument:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CallbackReceiver:
    """
    Authenticates inbound callbacks and hands verified payloads to a processor.

    Checks run in a fixed order and the first failing one decides the
    response: HTTP method, Content-Type, Date freshness, signature, body
    decoding, payload validation, processing.

    Args:
        credentials: Client id and signing key shared with the platform
        max_age: How far in the past the Date header may be. Default: 5 min
        max_skew: How far in the future the Date header may be. Default: 1 min
        profile: Signing string layout. Default: real newlines, raw HMAC
        clock: Returns the current aware datetime. Default: UTC now

    Example:
        >>> receiver = CallbackReceiver(Credentials("client id", "signing key"))
        >>> response = receiver.receive_callback(request, lambda event, order: True)
        >>> response.status_code, response.body
        (200, 'OK')
    """

    def __init__(
        self,
        credentials: Credentials,
        max_age: timedelta = DEFAULT_MAX_AGE,
        max_skew: timedelta = DEFAULT_MAX_SKEW,
        profile: SigningProfile = DEFAULT_PROFILE,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.credentials = credentials
        self.max_age = max_age
        self.max_skew = max_skew
        self.profile = profile
        self.clock = clock

    def receive_callback(
        self,
        request: IncomingRequest,
        processor: CallbackProcessor,
    ) -> CallbackResponse:
        """
        Verify a callback request and dispatch it.

        Args:
            request: The inbound request
            processor: Called with the event name and decoded order details
                once every check has passed. Must return True on success.

        Returns:
            CallbackResponse describing the outcome. Never raises.
        """
        if request.method.lower() != "post":
            return self._reject(VerificationOutcome.METHOD_NOT_ALLOWED)

        if request.header("Content-Type") != JSON_CONTENT_TYPE:
            return self._reject(VerificationOutcome.UNSUPPORTED_CONTENT_TYPE)

        if not self.verify_request_date(request):
            return self._reject(VerificationOutcome.INVALID_REQUEST_DATE)

        if not self.verify_signature(request):
            return self._reject(VerificationOutcome.INVALID_SIGNATURE)

        try:
            data = json.loads(request.body, parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError, RecursionError):
            return self._reject(VerificationOutcome.MALFORMED_BODY)

        if not isinstance(data, dict):
            return self._reject(VerificationOutcome.UNEXPECTED_BODY_FORMAT)

        try:
            event = assert_valid_event(data.get("event")).value
            order = OrderDetails.from_data(data.get("order"))
        except InvalidArgument as e:
            logger.warning("Rejected callback payload: %s", e)
            return self._reject(VerificationOutcome.INVALID_PAYLOAD)

        try:
            processed = processor(event, order)
        except Exception:
            logger.exception("Callback processor failed for %s of order %s", event, order.order.number)
            processed = False

        if processed is not True:
            return self._reject(VerificationOutcome.PROCESSING_FAILED, event)

        logger.info("Accepted %s callback for order %s", event, order.order.number)
        return CallbackResponse(VerificationOutcome.VERIFIED, event)

    def verify_request_date(self, request: IncomingRequest) -> bool:
        """Check the Date header lies within [now - max_age, now + max_skew]."""
        request_date = parse_request_date(request.header("Date"))
        if request_date is None:
            return False

        now = self.clock()
        return now - self.max_age <= request_date <= now + self.max_skew

    def verify_signature(self, request: IncomingRequest) -> bool:
        """Check the Signature header against the configured credentials."""
        params = parse_signature_parameters(request.header("Signature"))
        return verify_signature(
            params,
            client_id=self.credentials.client_id,
            signing_key=self.credentials.signing_key,
            request_target=request.request_target,
            date=request.header("Date"),
            body=request.body,
            profile=self.profile,
        )

    def _reject(self, outcome: VerificationOutcome, event: str | None = None) -> CallbackResponse:
        logger.warning("Rejected callback: %s", outcome.name)
        return CallbackResponse(outcome, event)
