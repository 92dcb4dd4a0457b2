"""
FairGate

Reputation-gated minting authorization.

A wallet proves key ownership by signing a server-issued challenge; the
server checks the challenge, the signature and a third-party reputation
score, then issues a short-lived signed permit. The gated action admits
any caller presenting an unexpired permit with a valid MAC.

Flow:
    codec = TokenCodec(secret)
    challenge = ChallengeIssuer(codec).issue_challenge(wallet)
    # wallet signs challenge.message
    outcome = PermitIssuer(codec, FairScaleClient(base, key)).issue_permit(
        wallet, challenge.token, signature_b64
    )
    if outcome.granted:
        payload = PermitVerifier(codec).verify_permit(outcome.permit)

All tokens are stateless; nothing is persisted server-side.
"""

__version__ = "0.1.0"

from .tokens import (
    TokenCodec,
    TokenError,
    MalformedToken,
    InvalidTokenSignature,
    issue_token,
    verify_token,
)
from .challenge import Challenge, ChallengeIssuer, ChallengePayload, build_challenge_message
from .signatures import verify_ownership, generate_wallet, sign_message
from .decision import DecisionEngine, Threshold, Tier, TierDecision, decide
from .scoring import Badge, FairScaleClient, ScoreProvider, ScoreResult
from .permit import (
    PermitDenial,
    PermitGrant,
    PermitIssuer,
    PermitPayload,
    PermitVerifier,
)
from .errors import (
    FairGateError,
    ConfigurationError,
    ClientInputError,
    InvalidAddress,
    InvalidSignatureEncoding,
    AuthenticationFailure,
    InvalidChallenge,
    ChallengeExpired,
    WalletMismatch,
    InvalidWalletSignature,
    InvalidPermit,
    PermitExpired,
    UpstreamFailure,
    ScoreUnavailable,
)

__all__ = [
    "TokenCodec", "TokenError", "MalformedToken", "InvalidTokenSignature", "issue_token", "verify_token",
    "Challenge", "ChallengeIssuer", "ChallengePayload", "build_challenge_message",
    "verify_ownership", "generate_wallet", "sign_message",
    "DecisionEngine", "Threshold", "Tier", "TierDecision", "decide",
    "Badge", "FairScaleClient", "ScoreProvider", "ScoreResult",
    "PermitDenial", "PermitGrant", "PermitIssuer", "PermitPayload", "PermitVerifier",
    "FairGateError", "ConfigurationError", "ClientInputError", "InvalidAddress",
    "InvalidSignatureEncoding", "AuthenticationFailure", "InvalidChallenge", "ChallengeExpired",
    "WalletMismatch", "InvalidWalletSignature", "InvalidPermit", "PermitExpired",
    "UpstreamFailure", "ScoreUnavailable",
]
