import base64

import base58
import pytest

from fairgate.errors import InvalidAddress, InvalidSignatureEncoding
from fairgate.signatures import (
    decode_wallet_address,
    generate_wallet,
    sign_message,
    verify_ownership,
    wallet_address_from_seed,
)

MESSAGE = b"FairGate Permit Request\nWallet: x\nNonce: y\nExpiresAt: 1"


def test_valid_signature_verifies(wallet):
    address, seed = wallet
    assert verify_ownership(MESSAGE, sign_message(seed, MESSAGE), address) is True


def test_signature_over_other_message_is_false(wallet):
    address, seed = wallet
    sig = sign_message(seed, MESSAGE + b"!")
    assert verify_ownership(MESSAGE, sig, address) is False


def test_signature_by_other_wallet_is_false(wallet):
    address, _ = wallet
    _, other_seed = generate_wallet()
    assert verify_ownership(MESSAGE, sign_message(other_seed, MESSAGE), address) is False


def test_address_round_trips_through_seed(wallet):
    address, seed = wallet
    assert wallet_address_from_seed(seed) == address
    assert len(decode_wallet_address(address)) == 32


def test_64_byte_keypair_export_accepted(wallet):
    address, seed = wallet
    keypair = base58.b58encode(base58.b58decode(seed) + base58.b58decode(address)).decode()
    assert verify_ownership(MESSAGE, sign_message(keypair, MESSAGE), address)


@pytest.mark.parametrize("address", ["0OIl-not-base58", "", "3yZe7d"])
def test_bad_address_raises(address, wallet):
    _, seed = wallet
    with pytest.raises(InvalidAddress):
        verify_ownership(MESSAGE, sign_message(seed, MESSAGE), address)


@pytest.mark.parametrize("signature", [
    "***not base64***",
    base64.b64encode(b"short").decode(),
    base64.b64encode(b"x" * 65).decode(),
])
def test_bad_signature_encoding_raises(signature, wallet):
    address, _ = wallet
    with pytest.raises(InvalidSignatureEncoding):
        verify_ownership(MESSAGE, signature, address)


def test_well_formed_garbage_signature_is_false(wallet):
    address, _ = wallet
    fake = base64.b64encode(b"X" * 64).decode()
    assert verify_ownership(MESSAGE, fake, address) is False
