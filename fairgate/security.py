"""
Security module for FairGate.

Provides input validation for request fields before they reach the
cryptographic checks.
"""

import re
from typing import Any, Optional

from .errors import ClientInputError

# ============================================================
# Input Validation
# ============================================================

# Regex patterns for validation
BASE58_PATTERN = re.compile(r'^[1-9A-HJ-NP-Za-km-z]{32,44}$')
TWITTER_PATTERN = re.compile(r'^@?[A-Za-z0-9_]{1,15}$')

MAX_TOKEN_LENGTH = 4096


def require_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ClientInputError(f"{field_name} must be a string", field=field_name)
    value = value.strip()
    if not value:
        raise ClientInputError(f"{field_name} is required", field=field_name)
    return value


def validate_wallet(value: Any, field_name: str = "wallet") -> str:
    """
    Validate a wallet address's textual shape.

    Only the alphabet and length are checked here; decoding into a public
    key happens in ``fairgate.signatures``.
    """
    value = require_string(value, field_name)
    if not BASE58_PATTERN.match(value):
        raise ClientInputError(f"{field_name} must be a base58 address", field=field_name)
    return value


def validate_token(value: Any, field_name: str) -> str:
    """Validate a token's presence and size; shape and MAC are the codec's job."""
    value = require_string(value, field_name)
    if len(value) > MAX_TOKEN_LENGTH:
        raise ClientInputError(f"{field_name} must not exceed {MAX_TOKEN_LENGTH} characters", field=field_name)
    return value


def validate_twitter(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not TWITTER_PATTERN.match(value):
        raise ClientInputError("twitter must be a valid handle", field="twitter")
    return value.lstrip("@")
