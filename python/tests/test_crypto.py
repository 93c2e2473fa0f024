"""Tests for CryptoUtils."""

import pytest

from sawt.crypto import CryptoUtils


class TestHashing:
    def test_hash_content_deterministic(self):
        h1 = CryptoUtils.hash_content(b"hello")
        h2 = CryptoUtils.hash_content(b"hello")
        assert h1 == h2

    def test_hash_content_different_inputs(self):
        h1 = CryptoUtils.hash_content(b"hello")
        h2 = CryptoUtils.hash_content(b"world")
        assert h1 != h2

    def test_hash_content_returns_hex(self):
        h = CryptoUtils.hash_content(b"data")
        assert len(h) == 64  # SHA-256 hex = 64 chars
        assert all(c in "0123456789abcdef" for c in h)

    def test_known_digest(self):
        assert CryptoUtils.hash_content(b"") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )


class TestCanonicalJson:
    def test_key_order_does_not_matter(self):
        assert CryptoUtils.canonical_json({"b": 1, "a": 2}) == CryptoUtils.canonical_json({"a": 2, "b": 1})

    def test_compact(self):
        assert CryptoUtils.canonical_json({"a": [1, 2]}) == '{"a":[1,2]}'


class TestPayloadSigning:
    def test_sign_and_verify(self):
        signature = CryptoUtils.sign_payload(b"report", "secret")
        assert signature.startswith("sha256=")
        assert CryptoUtils.verify_payload_signature(b"report", signature, "secret")

    def test_known_vector(self):
        # RFC 4231 test case 2
        signature = CryptoUtils.sign_payload(b"what do ya want for nothing?", "Jefe")
        assert signature == "sha256=5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"

    def test_verify_wrong_payload(self):
        signature = CryptoUtils.sign_payload(b"report", "secret")
        assert not CryptoUtils.verify_payload_signature(b"tampered", signature, "secret")

    def test_verify_wrong_secret(self):
        signature = CryptoUtils.sign_payload(b"report", "secret")
        assert not CryptoUtils.verify_payload_signature(b"report", signature, "other")

    @pytest.mark.parametrize("signature", ["", "md5=abcd", "sha256=zz", "sha256=00"])
    def test_verify_malformed(self, signature):
        assert not CryptoUtils.verify_payload_signature(b"report", signature, "secret")
