from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ChallengeRequest(BaseModel):
    wallet: Optional[str] = None


class ChallengeResponse(BaseModel):
    ok: bool = True
    token: str
    message: str
    expires_at: int


class PermitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wallet: Optional[str] = None
    challenge_token: Optional[str] = Field(default=None, alias="challengeToken")
    signature: Optional[str] = None
    twitter: Optional[str] = None


class MintRequest(BaseModel):
    permit: Optional[str] = None


class MintResponse(BaseModel):
    ok: bool = True
    status: str = "MINT_PERMITTED"
    mint_id: str
    wallet: str
    score: float
    tier: str
    mint_limit: int
    permit_nonce: str
    expires_at: int


class ScorePreview(BaseModel):
    wallet: str
    twitter: Optional[str] = None
    score: float
    provider_tier: Optional[str] = None
    badges: List[Dict[str, Any]] = Field(default_factory=list)
    decision: Dict[str, Any]
