"""
Signature header parsing and HMAC request signing for 1cart callbacks.

Callbacks are signed with a fixed profile of HTTP Signatures:

    Signature: keyId="<client id>",algorithm="sha3-512",
               headers="(request-target) date digest",signature="<base64>"

The signature is an HMAC-SHA3-512, keyed with the API signing key, over:

    (request-target): post <path?query>
    Date: <Date header>
    Digest: SHA-512=<base64 SHA-512 of the body>
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import re
from dataclasses import dataclass
from typing import Mapping

SIGNATURE_ALGORITHM = "sha3-512"
SIGNED_HEADERS = "(request-target) date digest"
SIGNATURE_PARAMETERS = ("keyId", "algorithm", "headers", "signature")

_PARAMETER_PATTERN = re.compile(r'(keyId|algorithm|headers|signature)="(.*)"')


@dataclass(frozen=True)
class SigningProfile:
    """
    Wire details that must match the sender byte for byte.

    Attributes:
        separator: Text between the lines of the signing string
        hex_digest: If True, the base64 `signature` wraps the lowercase hex
            HMAC digest instead of the raw digest bytes
    """
    separator: str = "\n"
    hex_digest: bool = False


DEFAULT_PROFILE = SigningProfile()

# Layout produced by the platform's reference PHP sender: a two-character
# "\n" between lines and a hex encoded HMAC.
LEGACY_PROFILE = SigningProfile(separator="\\n", hex_digest=True)


def parse_signature_parameters(header_value: str) -> dict[str, str]:
    """
    Parse a Signature header into its parameters.

    Segments are split on commas and each must look exactly like
    `key="value"` for one of the known keys; anything else is dropped.
    A repeated key keeps its last value.

    Examples:
        >>> parse_signature_parameters('keyId="abc",algorithm="sha3-512",foo="bar"')
        {'keyId': 'abc', 'algorithm': 'sha3-512'}
        >>> parse_signature_parameters('')
        {}
    """
    params: dict[str, str] = {}
    for segment in header_value.split(","):
        match = _PARAMETER_PATTERN.fullmatch(segment)
        if match:
            params[match.group(1)] = match.group(2)
    return params


def body_digest(body: bytes) -> str:
    """Base64 encoded SHA-512 of the raw body."""
    return base64.b64encode(hashlib.sha512(body).digest()).decode("ascii")


def build_signing_string(
    request_target: str,
    date: str,
    digest: str,
    profile: SigningProfile = DEFAULT_PROFILE,
) -> str:
    """
    Build the canonical string covered by the signature.

    The method is always the lowercase literal "post".
    """
    return profile.separator.join([
        f"(request-target): post {request_target}",
        f"Date: {date}",
        f"Digest: SHA-512={digest}",
    ])


def compute_signature(
    signing_string: str,
    signing_key: str,
    profile: SigningProfile = DEFAULT_PROFILE,
) -> bytes:
    """HMAC-SHA3-512 of the signing string, encoded as the profile expects."""
    mac = hmac.new(
        signing_key.encode("utf-8"),
        signing_string.encode("utf-8"),
        hashlib.sha3_512,
    )
    if profile.hex_digest:
        return mac.hexdigest().encode("ascii")
    return mac.digest()


def sign_request(
    client_id: str,
    signing_key: str,
    request_target: str,
    date: str,
    body: bytes,
    profile: SigningProfile = DEFAULT_PROFILE,
) -> str:
    """
    Produce a Signature header value for a callback request.

    Examples:
        >>> header = sign_request("client", "key", "/shipment", "Mon, 19 Oct 2026 10:00:00 GMT", b"{}")
        >>> header.startswith('keyId="client",algorithm="sha3-512"')
        True
    """
    signing_string = build_signing_string(request_target, date, body_digest(body), profile)
    signature = base64.b64encode(compute_signature(signing_string, signing_key, profile))
    return (
        f'keyId="{client_id}",'
        f'algorithm="{SIGNATURE_ALGORITHM}",'
        f'headers="{SIGNED_HEADERS}",'
        f'signature="{signature.decode("ascii")}"'
    )


def verify_signature(
    params: Mapping[str, str],
    client_id: str,
    signing_key: str,
    request_target: str,
    date: str,
    body: bytes,
    profile: SigningProfile = DEFAULT_PROFILE,
) -> bool:
    """
    Check parsed Signature parameters against the request.

    Returns False for a foreign keyId, any algorithm or header list other
    than the supported ones, a missing or undecodable signature, or an
    HMAC mismatch. The caller cannot tell these cases apart.
    """
    if (
        params.get("keyId") != client_id
        or params.get("algorithm") != SIGNATURE_ALGORITHM
        or params.get("headers") != SIGNED_HEADERS
        or "signature" not in params
    ):
        return False

    try:
        provided = base64.b64decode(params["signature"])
    except (binascii.Error, ValueError):
        return False

    signing_string = build_signing_string(request_target, date, body_digest(body), profile)
    expected = compute_signature(signing_string, signing_key, profile)
    return hmac.compare_digest(expected, provided)
