"""
Token codec tests.

Covers round-trip, secret separation, tamper detection and malformed input.
"""

import unittest

from fairgate.errors import ConfigurationError
from fairgate.tokens import (
    InvalidTokenSignature,
    MalformedToken,
    TokenCodec,
    issue_token,
    verify_token,
)
from fairgate.util import b64url_decode, b64url_encode

SECRET = "s1-secret"
OTHER_SECRET = "s2-secret"

PAYLOAD = {
    "wallet": "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",
    "nonce": "00112233445566778899aabbccddeeff",
    "issued_at": 1700000000,
    "expires_at": 1700000300,
}


class TestRoundTrip(unittest.TestCase):

    def test_verify_returns_issued_payload(self):
        token = issue_token(PAYLOAD, SECRET)
        self.assertEqual(verify_token(token, SECRET), PAYLOAD)

    def test_round_trip_preserves_types(self):
        payload = {"score": 72.5, "tier": "Gold", "provider_tier": None, "mint_limit": 3, "label": "ünïcode"}
        token = issue_token(payload, SECRET)
        self.assertEqual(verify_token(token, SECRET), payload)

    def test_codec_binds_secret(self):
        codec = TokenCodec(SECRET)
        self.assertEqual(codec.verify(codec.issue(PAYLOAD)), PAYLOAD)
        self.assertEqual(verify_token(codec.issue(PAYLOAD), SECRET), PAYLOAD)

    def test_bytes_secret_equivalent_to_str(self):
        token = issue_token(PAYLOAD, SECRET.encode("utf-8"))
        self.assertEqual(verify_token(token, SECRET), PAYLOAD)

    def test_token_has_two_url_safe_segments(self):
        token = issue_token(PAYLOAD, SECRET)
        body, mac = token.split(".")
        for segment in (body, mac):
            self.assertNotIn("=", segment)
            self.assertNotIn("+", segment)
            self.assertNotIn("/", segment)
        # HMAC-SHA256 digest is 32 bytes
        self.assertEqual(len(b64url_decode(mac)), 32)

    def test_payload_is_readable_without_secret(self):
        body = issue_token(PAYLOAD, SECRET).split(".")[0]
        self.assertIn(b'"wallet"', b64url_decode(body))

    def test_repr_hides_secret(self):
        self.assertNotIn(SECRET, repr(TokenCodec(SECRET)))


class TestSignature(unittest.TestCase):

    def test_different_secret_rejected(self):
        token = issue_token(PAYLOAD, SECRET)
        with self.assertRaises(InvalidTokenSignature):
            verify_token(token, OTHER_SECRET)

    def test_every_single_byte_tamper_of_body_rejected(self):
        token = issue_token(PAYLOAD, SECRET)
        body, mac = token.split(".")
        raw = bytearray(b64url_decode(body))
        for i in range(len(raw)):
            tampered = bytearray(raw)
            tampered[i] ^= 0x01
            forged = b64url_encode(bytes(tampered)) + "." + mac
            with self.assertRaises(InvalidTokenSignature, msg=f"byte {i}"):
                verify_token(forged, SECRET)

    def test_swapped_payload_rejected(self):
        a = issue_token(PAYLOAD, SECRET)
        b = issue_token(dict(PAYLOAD, wallet="attacker"), SECRET)
        forged = b.split(".")[0] + "." + a.split(".")[1]
        with self.assertRaises(InvalidTokenSignature):
            verify_token(forged, SECRET)

    def test_truncated_mac_rejected_as_signature_failure(self):
        token = issue_token(PAYLOAD, SECRET)
        with self.assertRaises(InvalidTokenSignature):
            verify_token(token[:-4], SECRET)

    def test_extended_mac_rejected_as_signature_failure(self):
        token = issue_token(PAYLOAD, SECRET)
        with self.assertRaises(InvalidTokenSignature):
            verify_token(token + "AAAA", SECRET)


class TestMalformed(unittest.TestCase):

    def test_missing_delimiter(self):
        with self.assertRaises(MalformedToken):
            verify_token("abcdef", SECRET)

    def test_empty_body(self):
        mac = issue_token(PAYLOAD, SECRET).split(".")[1]
        with self.assertRaises(MalformedToken):
            verify_token("." + mac, SECRET)

    def test_empty_mac(self):
        body = issue_token(PAYLOAD, SECRET).split(".")[0]
        with self.assertRaises(MalformedToken):
            verify_token(body + ".", SECRET)

    def test_empty_token(self):
        with self.assertRaises(MalformedToken):
            verify_token("", SECRET)

    def test_extra_segment(self):
        with self.assertRaises(MalformedToken):
            verify_token(issue_token(PAYLOAD, SECRET) + ".x", SECRET)

    def test_non_string(self):
        with self.assertRaises(MalformedToken):
            verify_token(None, SECRET)

    def test_validly_signed_non_object_body(self):
        # A correctly MACed body that is JSON but not an object
        import hashlib, hmac
        body = b64url_encode(b"[1,2,3]")
        mac = b64url_encode(hmac.new(SECRET.encode(), body.encode(), hashlib.sha256).digest())
        with self.assertRaises(MalformedToken):
            verify_token(f"{body}.{mac}", SECRET)

    def test_validly_signed_non_json_body(self):
        import hashlib, hmac
        body = b64url_encode(b"not json")
        mac = b64url_encode(hmac.new(SECRET.encode(), body.encode(), hashlib.sha256).digest())
        with self.assertRaises(MalformedToken):
            verify_token(f"{body}.{mac}", SECRET)


class TestConfiguration(unittest.TestCase):

    def test_empty_secret_fails_closed_on_issue(self):
        with self.assertRaises(ConfigurationError):
            issue_token(PAYLOAD, "")

    def test_empty_secret_fails_closed_on_verify(self):
        token = issue_token(PAYLOAD, SECRET)
        with self.assertRaises(ConfigurationError):
            verify_token(token, "")

    def test_codec_requires_secret(self):
        with self.assertRaises(ConfigurationError):
            TokenCodec("")


if __name__ == "__main__":
    unittest.main()
