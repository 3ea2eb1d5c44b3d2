"""
Seed derivation and Ed25519 keypairs.

Implements the two seed policies and the seed-to-keypair expansion:

    secret --(policy[version])--> seed (32 bytes) --(Ed25519)--> Keypair

Version 0 ("hardened") runs Argon2id over the 12-byte secret with an
all-zero salt and the libsodium INTERACTIVE limits. The salt is fixed so
that the fragment alone reproduces the seed; it therefore gives no domain
separation, and this KDF call must not be reused for any other purpose.
Changing it breaks every issued v0 link.

Version 1 ("fast") pads the 16-byte secret to 32 bytes with sodium_pad
(ISO/IEC 7816-4: 0x80 then zeros) and uses the result as the seed. It is
padding, not hashing; the secret itself carries the 128 bits of entropy.

Both functions are pure: same inputs, same output, on every platform.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .suite import CryptoSuite, default_suite
from .versions import LinkVersion, parse_version, secret_length


@dataclass(frozen=True, repr=False)
class Keypair:
    """
    Ed25519 keypair.

    `secret_key` uses the 64-byte layout wallets expect: seed followed by
    the public key.
    """
    public_key: bytes
    secret_key: bytes

    def __post_init__(self):
        if len(self.public_key) != 32:
            raise ValueError("public key must be 32 bytes")
        if len(self.secret_key) != 64 or self.secret_key[32:] != self.public_key:
            raise ValueError("secret key must be seed || public key (64 bytes)")

    @property
    def seed(self) -> bytes:
        return self.secret_key[:32]

    @property
    def address(self) -> str:
        """Base58 public key."""
        return base58.b58encode(self.public_key).decode("ascii")

    def sign(self, message: bytes) -> bytes:
        """Detached Ed25519 signature over `message`."""
        return SigningKey(self.seed).sign(message).signature

    def verify(self, message: bytes, signature: bytes) -> bool:
        try:
            VerifyKey(self.public_key).verify(message, signature)
            return True
        except BadSignatureError:
            return False

    def __repr__(self) -> str:
        return f"Keypair(address={self.address!r})"


# ============================================================
# Seed policies
# ============================================================

def _hardened_seed(secret: bytes, suite: CryptoSuite) -> bytes:
    salt = bytes(suite.salt_bytes)
    return suite.argon2id(suite.seed_bytes, secret, salt)


def _fast_seed(secret: bytes, suite: CryptoSuite) -> bytes:
    return suite.pad(secret, suite.seed_bytes)


SEED_POLICIES: Dict[LinkVersion, Callable[[bytes, CryptoSuite], bytes]] = {
    LinkVersion.HARDENED: _hardened_seed,
    LinkVersion.FAST: _fast_seed,
}


def derive_seed(secret: bytes, version, suite: Optional[CryptoSuite] = None) -> bytes:
    """
    Derive the 32-byte signing seed for `secret` under `version`.

    Raises:
        InvalidVersion: if `version` is not 0 or 1.
        ValueError: if `secret` has the wrong length for `version`.
    """
    version = parse_version(version)
    expected = secret_length(version)
    if len(secret) != expected:
        raise ValueError(
            f"version {int(version)} secret must be {expected} bytes, got {len(secret)}"
        )

    suite = suite or default_suite()
    seed = SEED_POLICIES[version](bytes(secret), suite)
    if len(seed) != suite.seed_bytes:
        raise RuntimeError(f"seed policy for version {int(version)} produced {len(seed)} bytes")
    return bytes(seed)


def keypair_from_seed(seed: bytes, suite: Optional[CryptoSuite] = None) -> Keypair:
    """Deterministic Ed25519 expansion of a 32-byte seed."""
    suite = suite or default_suite()
    if len(seed) != suite.seed_bytes:
        raise ValueError(f"seed must be {suite.seed_bytes} bytes, got {len(seed)}")
    public_key = suite.public_key_from_seed(bytes(seed))
    return Keypair(public_key=public_key, secret_key=bytes(seed) + public_key)


def keypair_from_secret(secret: bytes, version, suite: Optional[CryptoSuite] = None) -> Keypair:
    """Seed derivation followed by keypair expansion."""
    return keypair_from_seed(derive_seed(secret, version, suite), suite)
