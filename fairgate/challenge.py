"""
Challenge issuance.

A challenge binds a wallet to a fresh nonce for a short window. The server
keeps nothing: the challenge claim travels inside a signed token, and the
human-readable message the wallet signs is rebuilt from that claim.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import DEFAULT_CHALLENGE_TTL_SECONDS
from .logging_config import audit_log
from .tokens import TokenCodec
from .util import generate_nonce, now_epoch

MESSAGE_HEADER = "FairGate Permit Request"
NONCE_BYTES = 16

# Challenge and permit tokens share one secret; the type claim keeps them apart
TOKEN_TYPE = "challenge"


@dataclass(frozen=True)
class ChallengePayload:
    wallet: str
    nonce: str
    issued_at: int
    expires_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "typ": TOKEN_TYPE,
            "wallet": self.wallet,
            "nonce": self.nonce,
            "issued_at": self.issued_at,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChallengePayload":
        """Rebuild from a verified claim; raises ValueError on a foreign shape."""
        if data.get("typ") != TOKEN_TYPE:
            raise ValueError("not a challenge token")
        wallet = data.get("wallet")
        nonce = data.get("nonce")
        issued_at = data.get("issued_at")
        expires_at = data.get("expires_at")
        if not isinstance(wallet, str) or not isinstance(nonce, str):
            raise ValueError("challenge claim missing wallet or nonce")
        for ts in (issued_at, expires_at):
            if isinstance(ts, bool) or not isinstance(ts, int):
                raise ValueError("challenge claim timestamps must be integers")
        return cls(wallet=wallet, nonce=nonce, issued_at=issued_at, expires_at=expires_at)


@dataclass(frozen=True)
class Challenge:
    """What the client receives: the token to echo back and the text to sign."""
    token: str
    message: str
    payload: ChallengePayload

    @property
    def expires_at(self) -> int:
        return self.payload.expires_at


def build_challenge_message(payload: ChallengePayload) -> str:
    """
    Build the exact text the wallet signs.

    Field order, labels and the newline separator are fixed; the server
    rebuilds this string from the verified claim, so any change here
    invalidates every outstanding challenge.
    """
    return "\n".join([
        MESSAGE_HEADER,
        f"Wallet: {payload.wallet}",
        f"Nonce: {payload.nonce}",
        f"ExpiresAt: {payload.expires_at}",
    ])


class ChallengeIssuer:

    def __init__(self, codec: TokenCodec, ttl_seconds: int = DEFAULT_CHALLENGE_TTL_SECONDS):
        self._codec = codec
        self._ttl = int(ttl_seconds)

    def issue_challenge(self, wallet: str, now: Optional[int] = None) -> Challenge:
        issued_at = now_epoch() if now is None else int(now)
        payload = ChallengePayload(
            wallet=wallet,
            nonce=generate_nonce(NONCE_BYTES),
            issued_at=issued_at,
            expires_at=issued_at + self._ttl,
        )
        token = self._codec.issue(payload.to_dict())
        audit_log.challenge_issued(wallet=wallet, nonce=payload.nonce, expires_at=payload.expires_at)
        return Challenge(token=token, message=build_challenge_message(payload), payload=payload)
