import os, sys
from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

# Ensure the package is importable without an install
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fairgate.config import Settings, get_settings
from fairgate.errors import ScoreUnavailable
from fairgate.main import app, get_score_client
from fairgate.scoring import Badge, ScoreProvider, ScoreResult
from fairgate.signatures import generate_wallet

TEST_SECRET = "test-permit-secret"


class FakeScoreProvider(ScoreProvider):
    """In-memory scoring collaborator that records every lookup."""

    def __init__(self, score: float = 85, tier: Optional[str] = "gold", badges: Optional[List[Badge]] = None,
                 error: Optional[Exception] = None):
        self.score = score
        self.tier = tier
        self.badges = badges if badges is not None else [Badge(id="lst_staker", label="LST Staker")]
        self.error = error
        self.calls: List[Tuple[str, Optional[str]]] = []

    def fetch_score(self, wallet, twitter=None):
        self.calls.append((wallet, twitter))
        if self.error is not None:
            raise self.error
        return ScoreResult(wallet=wallet, score=self.score, provider_tier=self.tier, badges=list(self.badges))


@pytest.fixture
def settings():
    return Settings(
        permit_secret=TEST_SECRET,
        fairscale_api_base="https://fairscale.test/api",
        fairscale_api_key="test-fairkey",
    )


@pytest.fixture
def scorer():
    return FakeScoreProvider()


@pytest.fixture
def wallet():
    """(address, seed) of a fresh Ed25519 wallet."""
    return generate_wallet()


@pytest.fixture
def client(settings, scorer):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_score_client] = lambda: scorer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unavailable_scorer():
    return FakeScoreProvider(error=ScoreUnavailable("FairScale failed: 503"))
