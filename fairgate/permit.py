"""
Permit issuance and verification.

A permit is a short-lived signed token granting one wallet the right to
perform the gated action. It is only issued after the challenge token,
the challenge expiry, the wallet binding and the wallet signature all
check out, and after the decision engine allows minting for the score
fetched from the scoring collaborator. Checks run in that order so that
no score lookup is spent on an unauthenticated request.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .challenge import ChallengePayload, build_challenge_message
from .config import DEFAULT_PERMIT_TTL_SECONDS
from .decision import DecisionEngine, TierDecision
from .errors import (
    ChallengeExpired,
    InvalidChallenge,
    InvalidPermit,
    InvalidWalletSignature,
    PermitExpired,
    WalletMismatch,
)
from .logging_config import audit_log
from .scoring import Badge, ScoreProvider
from .signatures import verify_ownership
from .tokens import TokenCodec, TokenError
from .util import now_epoch

TOKEN_TYPE = "permit"


@dataclass(frozen=True)
class PermitPayload:
    wallet: str
    score: float
    tier: str
    mint_limit: int
    provider_tier: Optional[str]
    issued_at: int
    expires_at: int
    nonce: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "typ": TOKEN_TYPE,
            "wallet": self.wallet,
            "score": self.score,
            "tier": self.tier,
            "mint_limit": self.mint_limit,
            "provider_tier": self.provider_tier,
            "issued_at": self.issued_at,
            "expires_at": self.expires_at,
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PermitPayload":
        if data.get("typ") != TOKEN_TYPE:
            raise ValueError("not a permit token")
        try:
            score = data["score"]
            if isinstance(score, bool) or not isinstance(score, (int, float)):
                raise ValueError("score must be numeric")
            provider_tier = data.get("provider_tier")
            return cls(
                wallet=str(data["wallet"]),
                score=score,
                tier=str(data["tier"]),
                mint_limit=int(data["mint_limit"]),
                provider_tier=provider_tier if isinstance(provider_tier, str) else None,
                issued_at=int(data["issued_at"]),
                expires_at=int(data["expires_at"]),
                nonce=str(data["nonce"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"permit claim missing or mistyped field: {e}") from e


@dataclass(frozen=True)
class PermitGrant:
    """Successful outcome: the signed permit and what justified it."""
    permit: str
    payload: PermitPayload
    decision: TierDecision
    badges: List[Badge] = field(default_factory=list)

    granted = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "permit": self.permit,
            "payload": self.payload.to_dict(),
            "decision": self.decision.to_dict(),
            "badges": [b.to_dict() for b in self.badges],
        }


@dataclass(frozen=True)
class PermitDenial:
    """Valid request refused by policy; carries the decision for transparency."""
    wallet: str
    score: float
    provider_tier: Optional[str]
    decision: TierDecision
    badges: List[Badge] = field(default_factory=list)
    reason: str = "SCORE_TOO_LOW"

    granted = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "detail": self.reason,
            "message": "Score too low",
            "wallet": self.wallet,
            "score": self.score,
            "provider_tier": self.provider_tier,
            "decision": self.decision.to_dict(),
            "badges": [b.to_dict() for b in self.badges],
        }


PermitOutcome = Union[PermitGrant, PermitDenial]


class PermitIssuer:
    """Turns a signed challenge into a permit, or a denial."""

    def __init__(
        self,
        codec: TokenCodec,
        scorer: ScoreProvider,
        engine: Optional[DecisionEngine] = None,
        ttl_seconds: int = DEFAULT_PERMIT_TTL_SECONDS
    ):
        self._codec = codec
        self._scorer = scorer
        self._engine = engine or DecisionEngine()
        self._ttl = int(ttl_seconds)

    def verify_challenge(self, wallet: str, challenge_token: str, signature_b64: str, now: int) -> ChallengePayload:
        """
        Run the cryptographic checks, in order.

        Raises:
            InvalidChallenge, ChallengeExpired, WalletMismatch,
            InvalidAddress, InvalidSignatureEncoding, InvalidWalletSignature
        """
        try:
            challenge = ChallengePayload.from_dict(self._codec.verify(challenge_token))
        except (TokenError, ValueError) as e:
            audit_log.authentication_failure("challenge", InvalidChallenge.reason, wallet)
            raise InvalidChallenge(str(e) or "Bad challenge token") from e

        if not challenge.expires_at > now:
            audit_log.authentication_failure("challenge", ChallengeExpired.reason, wallet)
            raise ChallengeExpired("Challenge expired")

        if challenge.wallet != wallet:
            audit_log.authentication_failure("challenge", WalletMismatch.reason, wallet)
            raise WalletMismatch("Challenge wallet mismatch")

        # Always the server-rebuilt message, never client-supplied text
        message = build_challenge_message(challenge).encode("utf-8")
        if not verify_ownership(message, signature_b64, wallet):
            audit_log.authentication_failure("signature", InvalidWalletSignature.reason, wallet)
            raise InvalidWalletSignature("Invalid wallet signature")

        return challenge

    def issue_permit(
        self,
        wallet: str,
        challenge_token: str,
        signature_b64: str,
        now: Optional[int] = None,
        twitter: Optional[str] = None
    ) -> PermitOutcome:
        """
        Issue a permit for ``wallet``.

        Returns:
            PermitGrant, or PermitDenial when the score does not allow minting

        Raises:
            AuthenticationFailure / ClientInputError subclasses from the
            challenge checks, ScoreUnavailable or ConfigurationError from the
            score lookup. No permit is ever issued on any of these.
        """
        now = now_epoch() if now is None else int(now)
        challenge = self.verify_challenge(wallet, challenge_token, signature_b64, now)

        score = self._scorer.fetch_score(wallet, twitter)
        decision = self._engine.decide(score.score)

        if not decision.can_mint:
            audit_log.permit_denied(wallet=wallet, tier=decision.tier_label, score=score.score)
            return PermitDenial(
                wallet=wallet,
                score=score.score,
                provider_tier=score.provider_tier,
                decision=decision,
                badges=list(score.badges),
            )

        payload = PermitPayload(
            wallet=wallet,
            score=score.score,
            tier=decision.tier_label,
            mint_limit=decision.mint_limit,
            provider_tier=score.provider_tier,
            issued_at=now,
            expires_at=now + self._ttl,
            nonce=challenge.nonce,
        )
        permit = self._codec.issue(payload.to_dict())
        audit_log.permit_issued(
            wallet=wallet,
            nonce=payload.nonce,
            tier=payload.tier,
            score=payload.score,
            expires_at=payload.expires_at
        )
        return PermitGrant(permit=permit, payload=payload, decision=decision, badges=list(score.badges))


class PermitVerifier:
    """Admits or rejects a permit at action time. Trust comes from the MAC alone."""

    def __init__(self, codec: TokenCodec):
        self._codec = codec

    def verify_permit(self, token: str, now: Optional[int] = None) -> PermitPayload:
        now = now_epoch() if now is None else int(now)
        try:
            payload = PermitPayload.from_dict(self._codec.verify(token))
        except (TokenError, ValueError) as e:
            audit_log.authentication_failure("permit", InvalidPermit.reason)
            raise InvalidPermit(str(e) or "Invalid permit") from e

        if not payload.expires_at > now:
            audit_log.authentication_failure("permit", PermitExpired.reason, payload.wallet)
            raise PermitExpired("Permit expired")
        return payload
