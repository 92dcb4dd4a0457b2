import logging
import secrets
from functools import lru_cache
from typing import Optional

import requests
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .challenge import ChallengeIssuer
from .config import Settings, get_settings, validate_config
from .decision import DecisionEngine
from .errors import ClientInputError, FairGateError
from .logging_config import audit_log, configure_logging, set_request_id
from .models import ChallengeRequest, ChallengeResponse, MintRequest, MintResponse, PermitRequest, ScorePreview
from .permit import PermitIssuer, PermitVerifier
from .scoring import FairScaleClient, ScoreProvider
from .security import require_string, validate_token, validate_twitter, validate_wallet
from .tokens import TokenCodec

logger = logging.getLogger("fairgate")

app = FastAPI(title="FairGate")


@app.on_event("startup")
def _startup():
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    missing = [name for name, ok in validate_config(settings).items() if not ok]
    if missing:
        audit_log.security_event("CONFIG_INCOMPLETE", severity="high", missing=missing)
    logger.info("fairgate started", extra={"extra_fields": settings.describe()})


@app.on_event("shutdown")
def _shutdown():
    if get_http_session.cache_info().currsize:
        get_http_session().close()
        get_http_session.cache_clear()


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = set_request_id(request.headers.get("x-request-id") or None)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(FairGateError)
async def fairgate_error_handler(request: Request, exc: FairGateError):
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.reason, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    err = ClientInputError("Request body is malformed")
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


# ============================================================
# Dependencies
# ============================================================

def get_codec(settings: Settings = Depends(get_settings)) -> TokenCodec:
    return TokenCodec(settings.require_secret())


@lru_cache(maxsize=1)
def get_http_session() -> requests.Session:
    """One connection pool for the process; closed on shutdown."""
    return requests.Session()


def get_score_client(
    settings: Settings = Depends(get_settings),
    session: requests.Session = Depends(get_http_session)
) -> ScoreProvider:
    return FairScaleClient(
        base_url=settings.fairscale_api_base,
        api_key=settings.fairscale_api_key,
        timeout=settings.fairscale_timeout,
        session=session,
    )


def get_decision_engine() -> DecisionEngine:
    return DecisionEngine()


def get_challenge_issuer(
    codec: TokenCodec = Depends(get_codec),
    settings: Settings = Depends(get_settings)
) -> ChallengeIssuer:
    return ChallengeIssuer(codec, ttl_seconds=settings.challenge_ttl_seconds)


def get_permit_issuer(
    codec: TokenCodec = Depends(get_codec),
    scorer: ScoreProvider = Depends(get_score_client),
    engine: DecisionEngine = Depends(get_decision_engine),
    settings: Settings = Depends(get_settings)
) -> PermitIssuer:
    return PermitIssuer(codec, scorer, engine=engine, ttl_seconds=settings.permit_ttl_seconds)


def get_permit_verifier(codec: TokenCodec = Depends(get_codec)) -> PermitVerifier:
    return PermitVerifier(codec)


# ============================================================
# Routes
# ============================================================

@app.get("/healthz")
def healthz(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "env": settings.env, "config": validate_config(settings)}


@app.post("/api/challenge", response_model=ChallengeResponse)
def issue_challenge(req: ChallengeRequest, issuer: ChallengeIssuer = Depends(get_challenge_issuer)):
    wallet = validate_wallet(req.wallet)
    challenge = issuer.issue_challenge(wallet)
    return ChallengeResponse(token=challenge.token, message=challenge.message, expires_at=challenge.expires_at)


@app.post("/api/permit")
def issue_permit(req: PermitRequest, issuer: PermitIssuer = Depends(get_permit_issuer)):
    wallet = require_string(req.wallet, "wallet")
    challenge_token = validate_token(req.challenge_token, "challenge_token")
    signature = require_string(req.signature, "signature")
    twitter = validate_twitter(req.twitter)

    outcome = issuer.issue_permit(wallet, challenge_token, signature, twitter=twitter)
    if not outcome.granted:
        return JSONResponse(status_code=403, content=outcome.to_dict())
    return outcome.to_dict()


@app.post("/api/mint", response_model=MintResponse)
def mint(req: MintRequest, verifier: PermitVerifier = Depends(get_permit_verifier)):
    try:
        permit = validate_token(req.permit, "permit")
        payload = verifier.verify_permit(permit)
    except FairGateError as e:
        audit_log.mint_rejected(e.reason)
        raise

    # Gated action stand-in: the mint itself happens downstream
    mint_id = secrets.token_hex(8)
    audit_log.mint_authorized(wallet=payload.wallet, nonce=payload.nonce, mint_id=mint_id)
    return MintResponse(
        mint_id=mint_id,
        wallet=payload.wallet,
        score=payload.score,
        tier=payload.tier,
        mint_limit=payload.mint_limit,
        permit_nonce=payload.nonce,
        expires_at=payload.expires_at,
    )


@app.get("/api/fairscore", response_model=ScorePreview)
def fairscore(
    wallet: Optional[str] = Query(default=None),
    twitter: Optional[str] = Query(default=None),
    scorer: ScoreProvider = Depends(get_score_client),
    engine: DecisionEngine = Depends(get_decision_engine)
):
    """Read-only score preview; issues nothing."""
    wallet = validate_wallet(wallet)
    handle = validate_twitter(twitter)
    result = scorer.fetch_score(wallet, handle)
    return ScorePreview(
        wallet=wallet,
        twitter=handle,
        score=result.score,
        provider_tier=result.provider_tier,
        badges=result.badges_as_dicts(),
        decision=engine.decide(result.score).to_dict(),
    )
