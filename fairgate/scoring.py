"""
Reputation scoring collaborator.

Provides the interface the permit issuer uses to fetch a wallet's score,
and the FairScale HTTP implementation of it. Every failure is converted
to ScoreUnavailable so the caller fails closed.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .errors import ConfigurationError, ScoreUnavailable
from .logging_config import audit_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Badge:
    id: str
    label: str
    description: Optional[str] = None
    tier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {"id": self.id, "label": self.label}
        if self.description is not None:
            d["description"] = self.description
        if self.tier is not None:
            d["tier"] = self.tier
        return d

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Badge"]:
        """Parse a provider badge; returns None for entries without id/label."""
        if not isinstance(data, dict):
            return None
        badge_id, label = data.get("id"), data.get("label")
        if not isinstance(badge_id, str) or not isinstance(label, str):
            return None
        description = data.get("description")
        tier = data.get("tier")
        return cls(
            id=badge_id,
            label=label,
            description=description if isinstance(description, str) else None,
            tier=tier if isinstance(tier, str) else None,
        )


@dataclass(frozen=True)
class ScoreResult:
    wallet: str
    score: float
    provider_tier: Optional[str] = None
    badges: List[Badge] = field(default_factory=list)

    def badges_as_dicts(self) -> List[Dict[str, Any]]:
        return [b.to_dict() for b in self.badges]


def normalize_twitter(handle: Optional[str]) -> Optional[str]:
    """Strip a leading '@'; empty handles become None."""
    if not handle:
        return None
    handle = handle.strip().lstrip("@")
    return handle or None


def parse_score_response(wallet: str, data: Any) -> ScoreResult:
    """
    Validate a provider response body.

    Raises:
        ScoreUnavailable: body is not an object, or fairscore is not a finite number
    """
    if not isinstance(data, dict):
        raise ScoreUnavailable("Could not parse fairscore from response")
    score = data.get("fairscore")
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        raise ScoreUnavailable("Could not parse fairscore from response")

    tier = data.get("tier")
    raw_badges = data.get("badges")
    badges = []
    if isinstance(raw_badges, list):
        badges = [b for b in (Badge.from_dict(item) for item in raw_badges) if b is not None]

    reported_wallet = data.get("wallet")
    return ScoreResult(
        wallet=reported_wallet if isinstance(reported_wallet, str) else wallet,
        score=score,
        provider_tier=tier if isinstance(tier, str) else None,
        badges=badges,
    )


class ScoreProvider(ABC):
    """Abstract interface for reputation score lookups."""

    @abstractmethod
    def fetch_score(self, wallet: str, twitter: Optional[str] = None) -> ScoreResult:
        """
        Fetch the score for a wallet.

        Raises:
            ConfigurationError: provider credentials are missing
            ScoreUnavailable: provider unreachable or returned unusable data
        """
        pass


class FairScaleClient(ScoreProvider):
    """
    FairScale score API client.

    ``GET {base}/score?wallet=..&twitter=..`` authenticated with the
    ``fairkey`` header. Requests are bounded by ``timeout``, never retried,
    and never follow redirects; any status outside 2xx is a failure.
    """

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        timeout: float = 5.0,
        session: Optional[requests.Session] = None
    ):
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def __repr__(self) -> str:
        return f"FairScaleClient(base_url={self._base_url!r}, api_key=[REDACTED])"

    def fetch_score(self, wallet: str, twitter: Optional[str] = None) -> ScoreResult:
        if not self._base_url or not self._api_key:
            raise ConfigurationError("FairScale env is missing")

        params = {"wallet": wallet}
        handle = normalize_twitter(twitter)
        if handle:
            params["twitter"] = handle

        try:
            resp = self._session.get(
                f"{self._base_url}/score",
                params=params,
                headers={"fairkey": self._api_key, "Accept": "application/json"},
                timeout=self._timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            audit_log.upstream_failure(wallet=wallet, reason="TRANSPORT", error=type(e).__name__)
            raise ScoreUnavailable(f"FairScale request failed: {type(e).__name__}") from e

        if not 200 <= resp.status_code < 300:
            audit_log.upstream_failure(wallet=wallet, reason="HTTP_STATUS", status=resp.status_code)
            raise ScoreUnavailable(f"FairScale failed: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            audit_log.upstream_failure(wallet=wallet, reason="BAD_JSON", status=resp.status_code)
            raise ScoreUnavailable("FairScale returned a non-JSON body") from e

        try:
            result = parse_score_response(wallet, data)
        except ScoreUnavailable:
            audit_log.upstream_failure(wallet=wallet, reason="BAD_SCORE", status=resp.status_code)
            raise

        logger.debug("fairscale score fetched", extra={"extra_fields": {"wallet": wallet, "score": result.score}})
        return result
