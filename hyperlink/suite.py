"""
HyperLink Cryptographic Suite

Bundles the libsodium capabilities the identity subsystem depends on:

- a CSPRNG (randombytes_buf)
- the Argon2id password hash (crypto_pwhash, ALG_ARGON2ID13)
- ISO/IEC 7816-4 padding (sodium_pad)
- Ed25519 seed expansion (crypto_sign_seed_keypair)

The suite is immutable and resolved once per process by default_suite().
Callers that need a deterministic or instrumented RNG build their own
CryptoSuite and pass it in explicitly.
"""

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Callable

import nacl.bindings
import nacl.pwhash
import nacl.utils
from nacl.signing import SigningKey


@dataclass(frozen=True)
class CryptoSuite:
    """Stateless cryptographic capabilities, safe to share across threads."""
    random_bytes: Callable[[int], bytes]
    argon2id: Callable[[int, bytes, bytes], bytes]
    pad: Callable[[bytes, int], bytes]
    public_key_from_seed: Callable[[bytes], bytes]
    seed_bytes: int = nacl.bindings.crypto_sign_SEEDBYTES
    salt_bytes: int = nacl.pwhash.argon2id.SALTBYTES

    def with_random(self, random_bytes: Callable[[int], bytes]) -> "CryptoSuite":
        """Copy of this suite with a different random source."""
        return replace(self, random_bytes=random_bytes)


def _argon2id_interactive(size: int, password: bytes, salt: bytes) -> bytes:
    return nacl.pwhash.argon2id.kdf(
        size,
        password,
        salt,
        opslimit=nacl.pwhash.argon2id.OPSLIMIT_INTERACTIVE,
        memlimit=nacl.pwhash.argon2id.MEMLIMIT_INTERACTIVE,
    )


def _public_key_from_seed(seed: bytes) -> bytes:
    return bytes(SigningKey(seed).verify_key)


@lru_cache(maxsize=None)
def default_suite() -> CryptoSuite:
    """The process-wide libsodium suite."""
    return CryptoSuite(
        random_bytes=nacl.utils.random,
        argon2id=_argon2id_interactive,
        pad=nacl.bindings.sodium_pad,
        public_key_from_seed=_public_key_from_seed,
    )
