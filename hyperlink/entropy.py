"""
Secret generation.

Secrets come from the libsodium CSPRNG only. Any failure of the source,
including a short read, is fatal for the call: there is no retry and no
weaker fallback.
"""

from typing import Optional

from .errors import EntropySourceUnavailable
from .logging_config import audit_log
from .suite import CryptoSuite, default_suite
from .versions import LinkVersion, secret_length


def generate_secret(length: int, suite: Optional[CryptoSuite] = None) -> bytes:
    """
    Return `length` cryptographically secure random bytes.

    Raises:
        EntropySourceUnavailable: if the random source fails or returns
            the wrong number of bytes.
    """
    if length <= 0:
        raise ValueError(f"secret length must be positive, got {length}")

    suite = suite or default_suite()
    try:
        secret = suite.random_bytes(length)
    except Exception as e:
        audit_log.security_event("entropy_source_failed", severity="critical", error=type(e).__name__)
        raise EntropySourceUnavailable("secure random source failed") from e

    if not isinstance(secret, (bytes, bytearray)) or len(secret) != length:
        audit_log.security_event("entropy_source_short_read", severity="critical", requested=length)
        raise EntropySourceUnavailable(
            f"secure random source returned an invalid buffer for {length} bytes"
        )
    return bytes(secret)


def secret_for_version(version: LinkVersion, suite: Optional[CryptoSuite] = None) -> bytes:
    """Generate a secret of the length `version` requires."""
    return generate_secret(secret_length(version), suite)
