"""Hashing and payload signing utilities for Sawt."""
import hashlib
import json

from cryptography.hazmat.primitives import hashes, hmac
from cryptography.exceptions import InvalidSignature


class CryptoUtils:
    """Utility class for cryptographic operations."""

    @staticmethod
    def hash_content(content: bytes) -> str:
        """Generate SHA-256 hash of content."""
        return hashlib.sha256(content).hexdigest()

    @staticmethod
    def canonical_json(data: dict) -> str:
        """Create canonical JSON representation for hashing and signing."""
        return json.dumps(data, sort_keys=True, separators=(',', ':'))

    @staticmethod
    def sign_payload(payload: bytes, secret: str) -> str:
        """Sign a payload with HMAC-SHA256.

        Args:
            payload: Bytes to sign
            secret: Shared secret

        Returns:
            Hex-encoded signature prefixed with the algorithm name
        """
        h = hmac.HMAC(secret.encode(), hashes.SHA256())
        h.update(payload)
        return "sha256=" + h.finalize().hex()

    @staticmethod
    def verify_payload_signature(payload: bytes, signature: str, secret: str) -> bool:
        """Verify a signature produced by :meth:`sign_payload`.

        Args:
            payload: Original payload
            signature: Value of the signature header
            secret: Shared secret

        Returns:
            True if signature is valid, False otherwise
        """
        if not signature.startswith("sha256="):
            return False
        try:
            expected = bytes.fromhex(signature[len("sha256="):])
        except ValueError:
            return False

        h = hmac.HMAC(secret.encode(), hashes.SHA256())
        h.update(payload)
        try:
            h.verify(expected)
            return True
        except InvalidSignature:
            return False
