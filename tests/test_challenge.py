import re

import pytest

from fairgate.challenge import ChallengeIssuer, ChallengePayload, build_challenge_message
from fairgate.errors import ConfigurationError
from fairgate.tokens import TokenCodec

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
NOW = 1700000000


@pytest.fixture
def codec():
    return TokenCodec("challenge-secret")


def test_message_is_fixed_four_line_format():
    payload = ChallengePayload(wallet=WALLET, nonce="ab" * 16, issued_at=NOW, expires_at=NOW + 300)
    assert build_challenge_message(payload) == (
        "FairGate Permit Request\n"
        f"Wallet: {WALLET}\n"
        f"Nonce: {'ab' * 16}\n"
        f"ExpiresAt: {NOW + 300}"
    )


def test_message_ignores_issued_at():
    a = ChallengePayload(wallet=WALLET, nonce="n", issued_at=1, expires_at=99)
    b = ChallengePayload(wallet=WALLET, nonce="n", issued_at=2, expires_at=99)
    assert build_challenge_message(a) == build_challenge_message(b)


def test_issue_challenge_ttl_is_five_minutes(codec):
    challenge = ChallengeIssuer(codec).issue_challenge(WALLET, now=NOW)
    assert challenge.payload.issued_at == NOW
    assert challenge.expires_at == NOW + 300


def test_custom_ttl(codec):
    challenge = ChallengeIssuer(codec, ttl_seconds=60).issue_challenge(WALLET, now=NOW)
    assert challenge.expires_at == NOW + 60


def test_nonce_is_128_bit_hex_and_fresh(codec):
    issuer = ChallengeIssuer(codec)
    nonces = {issuer.issue_challenge(WALLET, now=NOW).payload.nonce for _ in range(50)}
    assert len(nonces) == 50
    for nonce in nonces:
        assert re.fullmatch(r"[0-9a-f]{32}", nonce)


def test_token_carries_payload(codec):
    challenge = ChallengeIssuer(codec).issue_challenge(WALLET, now=NOW)
    claim = codec.verify(challenge.token)
    assert ChallengePayload.from_dict(claim) == challenge.payload
    assert challenge.message == build_challenge_message(challenge.payload)


def test_same_inputs_differ_only_by_nonce(codec):
    issuer = ChallengeIssuer(codec)
    a = issuer.issue_challenge(WALLET, now=NOW)
    b = issuer.issue_challenge(WALLET, now=NOW)
    assert a.token != b.token
    assert a.payload.nonce != b.payload.nonce


def test_missing_secret_is_configuration_error():
    with pytest.raises(ConfigurationError):
        ChallengeIssuer(TokenCodec(""))


@pytest.mark.parametrize("claim", [
    {"typ": "challenge", "nonce": "n", "issued_at": 1, "expires_at": 2},
    {"typ": "challenge", "wallet": WALLET, "issued_at": 1, "expires_at": 2},
    {"typ": "challenge", "wallet": WALLET, "nonce": "n", "issued_at": "1", "expires_at": 2},
    {"typ": "challenge", "wallet": WALLET, "nonce": "n", "issued_at": 1, "expires_at": True},
    {"typ": "permit", "wallet": WALLET, "nonce": "n", "issued_at": 1, "expires_at": 2},
    {"wallet": WALLET, "nonce": "n", "issued_at": 1, "expires_at": 2},
])
def test_from_dict_rejects_foreign_shapes(claim):
    with pytest.raises(ValueError):
        ChallengePayload.from_dict(claim)
