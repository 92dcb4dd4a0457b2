"""
Compact signed tokens.

A token is ``<body>.<mac>`` where ``body`` is the URL-safe base64 (no
padding) of the canonical JSON claim and ``mac`` is the URL-safe base64 of
HMAC-SHA256(secret, body). Tokens are integrity-protected, not encrypted:
any holder can read the claim.
"""

import hashlib
import hmac
import json
from typing import Any, Dict, Union

from .errors import ConfigurationError
from .util import b64url_decode, b64url_encode, canonicalize, constant_time_compare

TOKEN_DELIMITER = "."

Secret = Union[str, bytes]


class TokenError(Exception):
    """Raised by the codec when a token cannot be trusted."""


class MalformedToken(TokenError):
    """Delimiter or a segment is missing, or the body is not a JSON object."""


class InvalidTokenSignature(TokenError):
    """MAC over the body does not match the presented MAC."""


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not secret:
        raise ConfigurationError("PERMIT_SECRET missing")
    return secret


def _mac(body: str, secret: bytes) -> str:
    digest = hmac.new(secret, body.encode("ascii"), hashlib.sha256).digest()
    return b64url_encode(digest)


def issue_token(payload: Dict[str, Any], secret: Secret) -> str:
    """Serialize and sign ``payload``."""
    key = _secret_bytes(secret)
    body = b64url_encode(canonicalize(payload))
    return f"{body}{TOKEN_DELIMITER}{_mac(body, key)}"


def verify_token(token: str, secret: Secret) -> Dict[str, Any]:
    """
    Verify a token and return its claim.

    Raises:
        MalformedToken: wrong shape, or body is not a JSON object
        InvalidTokenSignature: MAC mismatch (including length mismatch)
    """
    key = _secret_bytes(secret)
    if not isinstance(token, str):
        raise MalformedToken("Bad token format")

    parts = token.split(TOKEN_DELIMITER)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedToken("Bad token format")
    body, presented = parts

    try:
        expected = _mac(body, key)
    except UnicodeEncodeError as e:
        raise MalformedToken("Bad token format") from e

    # compare_digest handles unequal lengths without an early return
    if not constant_time_compare(presented, expected):
        raise InvalidTokenSignature("Invalid token signature")

    try:
        claim = json.loads(b64url_decode(body).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedToken("Token body is not valid JSON") from e

    if not isinstance(claim, dict):
        raise MalformedToken("Token body must be a JSON object")
    return claim


class TokenCodec:
    """Binds a server secret to ``issue_token`` / ``verify_token``."""

    def __init__(self, secret: Secret):
        self._secret = _secret_bytes(secret)

    def __repr__(self) -> str:
        return "TokenCodec(secret=[REDACTED])"

    def issue(self, payload: Dict[str, Any]) -> str:
        return issue_token(payload, self._secret)

    def verify(self, token: str) -> Dict[str, Any]:
        return verify_token(token, self._secret)
