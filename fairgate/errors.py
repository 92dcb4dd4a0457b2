"""
Error taxonomy for FairGate.

Every failure surfaced to a client is a FairGateError carrying an HTTP
status, a stable reason code and a human-readable message. Policy denials
(score too low) are not errors; see ``fairgate.permit.PermitDenial``.
"""

from typing import Optional


class FairGateError(Exception):
    """Base class for all FairGate failures."""
    status_code = 500
    reason = "INTERNAL_ERROR"

    def __init__(self, message: Optional[str] = None, reason: Optional[str] = None):
        if reason:
            self.reason = reason
        self.message = message or self.reason
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"ok": False, "detail": self.reason, "message": self.message}


# ============================================================
# Server-side configuration
# ============================================================

class ConfigurationError(FairGateError):
    """Missing server secret or collaborator credentials."""
    status_code = 500
    reason = "SERVER_NOT_CONFIGURED"


# ============================================================
# Client input
# ============================================================

class ClientInputError(FairGateError):
    """Missing or malformed request fields."""
    status_code = 400
    reason = "INVALID_REQUEST"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None, reason: Optional[str] = None):
        self.field = field
        super().__init__(message, reason)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.field:
            d["field"] = self.field
        return d


class InvalidAddress(ClientInputError):
    """Wallet address could not be decoded into an Ed25519 public key."""
    reason = "BAD_WALLET_ADDRESS"


class InvalidSignatureEncoding(ClientInputError):
    """Wallet signature is not valid base64 of a 64-byte signature."""
    reason = "BAD_SIGNATURE_ENCODING"


# ============================================================
# Authentication (understood but refused)
# ============================================================

class AuthenticationFailure(FairGateError):
    status_code = 403
    reason = "AUTHENTICATION_FAILED"


class InvalidChallenge(AuthenticationFailure):
    reason = "INVALID_CHALLENGE"


class ChallengeExpired(AuthenticationFailure):
    reason = "CHALLENGE_EXPIRED"


class WalletMismatch(AuthenticationFailure):
    reason = "WALLET_MISMATCH"


class InvalidWalletSignature(AuthenticationFailure):
    reason = "INVALID_SIGNATURE"


class InvalidPermit(AuthenticationFailure):
    reason = "INVALID_PERMIT"


class PermitExpired(AuthenticationFailure):
    reason = "PERMIT_EXPIRED"


# ============================================================
# Upstream collaborator
# ============================================================

class UpstreamFailure(FairGateError):
    status_code = 502
    reason = "UPSTREAM_FAILURE"


class ScoreUnavailable(UpstreamFailure):
    """Scoring service unreachable or returned unusable data."""
    reason = "SCORE_UNAVAILABLE"
