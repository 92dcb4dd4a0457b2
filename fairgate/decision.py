"""
Mint eligibility decisions.

Maps a reputation score onto an ordered tier. Deterministic, side-effect
free and monotonic: a higher score never yields a stricter tier.
Any score that clears no threshold (including NaN) falls to the lowest tier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence, Tuple


class Tier(str, Enum):
    """Reputation tiers, weakest first."""
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER = (Tier.BRONZE, Tier.SILVER, Tier.GOLD)


@dataclass(frozen=True)
class TierDecision:
    tier: Tier
    can_mint: bool
    mint_limit: int

    @property
    def tier_label(self) -> str:
        return self.tier.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier_label": self.tier.value,
            "can_mint": self.can_mint,
            "mint_limit": self.mint_limit,
        }


@dataclass(frozen=True)
class Threshold:
    min_score: float
    decision: TierDecision


FLOOR_DECISION = TierDecision(Tier.BRONZE, can_mint=False, mint_limit=0)

DEFAULT_THRESHOLDS: Tuple[Threshold, ...] = (
    Threshold(70, TierDecision(Tier.GOLD, can_mint=True, mint_limit=3)),
    Threshold(40, TierDecision(Tier.SILVER, can_mint=True, mint_limit=1)),
)


class DecisionEngine:
    """
    Threshold table evaluator.

    Thresholds are checked from the highest ``min_score`` down; the first
    one the score meets wins, otherwise ``floor`` applies.
    """

    def __init__(
        self,
        thresholds: Sequence[Threshold] = DEFAULT_THRESHOLDS,
        floor: TierDecision = FLOOR_DECISION
    ):
        ordered = sorted(thresholds, key=lambda t: t.min_score, reverse=True)
        ranks = [t.decision.tier.rank for t in ordered] + [floor.tier.rank]
        if ranks != sorted(ranks, reverse=True):
            raise ValueError("thresholds must assign non-decreasing tiers to higher scores")
        self._thresholds = tuple(ordered)
        self._floor = floor

    def decide(self, score: float) -> TierDecision:
        for threshold in self._thresholds:
            # NaN fails every comparison and lands on the floor
            if score >= threshold.min_score:
                return threshold.decision
        return self._floor


_default_engine = DecisionEngine()


def decide(score: float) -> TierDecision:
    """Evaluate ``score`` against the default threshold table."""
    return _default_engine.decide(score)
