"""
Wallet ownership proofs.

A wallet address is the base58 text of a 32-byte Ed25519 public key. The
wallet proves ownership by producing a detached Ed25519 signature over the
exact challenge message bytes; the signature travels base64-encoded.
"""

from typing import Tuple

import base58
from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

from .errors import InvalidAddress, InvalidSignatureEncoding
from .util import b64d, b64e

PUBLIC_KEY_BYTES = 32
SIGNATURE_BYTES = 64


def decode_wallet_address(wallet: str) -> bytes:
    """Decode a base58 wallet address into raw public key bytes."""
    try:
        raw = base58.b58decode(wallet)
    except (ValueError, TypeError) as e:
        raise InvalidAddress("Bad wallet address", field="wallet") from e
    if len(raw) != PUBLIC_KEY_BYTES:
        raise InvalidAddress("Bad wallet address", field="wallet")
    return raw


def decode_signature(signature_b64: str) -> bytes:
    """Decode a base64 transport signature into raw signature bytes."""
    try:
        raw = b64d(signature_b64)
    except (ValueError, TypeError, AttributeError) as e:
        raise InvalidSignatureEncoding("Bad signature encoding", field="signature") from e
    if len(raw) != SIGNATURE_BYTES:
        raise InvalidSignatureEncoding("Bad signature encoding", field="signature")
    return raw


def verify_ownership(message: bytes, signature_b64: str, wallet: str) -> bool:
    """
    Verify that ``wallet``'s private key signed ``message``.

    Args:
        message: The exact bytes the wallet signed
        signature_b64: Base64-encoded detached Ed25519 signature
        wallet: Base58 wallet address (the public key)

    Returns:
        True if the signature is valid, False on cryptographic mismatch

    Raises:
        InvalidAddress: wallet is not a base58 32-byte public key
        InvalidSignatureEncoding: signature is not base64 of 64 bytes
    """
    public_key = decode_wallet_address(wallet)
    signature = decode_signature(signature_b64)
    try:
        VerifyKey(public_key).verify(message, signature)
        return True
    except BadSignatureError:
        return False
    except CryptoError:
        # Not a valid curve point; no key could have produced this signature
        return False


# ============================================================
# Wallet-side helpers (demo clients, CLI and tests)
# ============================================================

def generate_wallet() -> Tuple[str, str]:
    """
    Generate an Ed25519 wallet.

    Returns:
        Tuple of (base58 address, base58 secret seed)
    """
    sk = SigningKey.generate()
    address = base58.b58encode(bytes(sk.verify_key)).decode("ascii")
    seed = base58.b58encode(bytes(sk)).decode("ascii")
    return address, seed


def _signing_key(seed_b58: str) -> SigningKey:
    raw = base58.b58decode(seed_b58)
    # 64-byte keypair exports carry the seed in the first half
    if len(raw) == 64:
        raw = raw[:32]
    return SigningKey(raw)


def wallet_address_from_seed(seed_b58: str) -> str:
    sk = _signing_key(seed_b58)
    return base58.b58encode(bytes(sk.verify_key)).decode("ascii")


def sign_message(seed_b58: str, message: bytes) -> str:
    """Sign ``message`` the way a wallet does; returns base64 signature."""
    sk = _signing_key(seed_b58)
    return b64e(sk.sign(message).signature)
