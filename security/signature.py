# --- File: security/signature.py ---
import hashlib
import hmac
import logging
from typing import Iterable

import config

logger = logging.getLogger(__name__)


def compute_signature(parts: Iterable[str]) -> str:
    """
    Sorts the parts lexicographically, concatenates them and returns the lowercase
    hex SHA-1 digest. The result only depends on the multiset of parts.
    """
    joined = "".join(sorted(parts))
    return hashlib.sha1(joined.encode('utf-8')).hexdigest()


class SignatureVerifier:
    """Checks the platform's GET handshake against the shared token."""
    def __init__(self, token: str = config.WX_TOKEN):
        self.token = token
        if not self.token:
            logger.warning("SignatureVerifier initialized without a token. Every handshake will be rejected.")

    def expected_signature(self, timestamp: str, nonce: str) -> str:
        return compute_signature([self.token, timestamp, nonce])

    def verify(self, signature: str, timestamp: str, nonce: str) -> bool:
        if not self.token:
            return False
        expected = self.expected_signature(timestamp, nonce)
        logger.debug(f"Handshake signature check: expected={expected} received={signature}")
        return hmac.compare_digest(expected.encode('ascii'), signature.encode('utf-8'))
