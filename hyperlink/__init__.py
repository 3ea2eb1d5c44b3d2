"""
HyperLink

Value-bearing Ed25519 identities that live entirely inside a URL.

A HyperLink's keypair is derived from a random secret carried in the URL
fragment. Nothing is stored server-side: whoever holds the link can
re-derive the key and spend what it controls, and losing the link loses
the funds.

Versions:
    0  12-byte secret, Argon2id-stretched seed     fragment = base58(secret)
    1  16-byte secret, ISO/IEC 7816-4 padded seed  fragment = "_" + base58(secret)

Usage:
    from hyperlink import HyperLink, RotationProtocol, SolanaRpcLedgerClient

    link = HyperLink.create()
    print(link.url)

    same = HyperLink.from_link(link.url)
    assert same.keypair == link.keypair

    # Move everything into a fresh link
    protocol = RotationProtocol(SolanaRpcLedgerClient())
    result = protocol.rotate(link)
    print(result.link.url)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Errors
from .errors import (
    HyperLinkError,
    InvalidVersion,
    DecodeError,
    InvalidLink,
    EntropySourceUnavailable,
    InsufficientBalance,
    LedgerError,
    TransferFailed,
    RotationFailed,
)

# Versions and crypto capabilities
from .versions import LinkVersion, SECRET_LENGTHS, parse_version, secret_length
from .suite import CryptoSuite, default_suite

# Derivation pipeline
from .entropy import generate_secret, secret_for_version
from .derivation import (
    Keypair,
    derive_seed,
    keypair_from_seed,
    keypair_from_secret,
)
from .codec import (
    VERSION_DELIMITER,
    encode_fragment,
    decode_fragment,
    resolve_fragment,
)

# Identity
from .link import HyperLink

# Ledger and rotation
from .transfer import TransferInstruction, sign_transfer, parse_transfer
from .ledger import (
    Blockhash,
    LedgerClient,
    SolanaRpcLedgerClient,
    InMemoryLedger,
)
from .rotation import RotationProtocol, RotationResult, transferable_amount


__all__ = [
    "__version__",

    # Errors
    "HyperLinkError",
    "InvalidVersion",
    "DecodeError",
    "InvalidLink",
    "EntropySourceUnavailable",
    "InsufficientBalance",
    "LedgerError",
    "TransferFailed",
    "RotationFailed",

    # Versions
    "LinkVersion",
    "SECRET_LENGTHS",
    "parse_version",
    "secret_length",
    "CryptoSuite",
    "default_suite",

    # Derivation
    "generate_secret",
    "secret_for_version",
    "Keypair",
    "derive_seed",
    "keypair_from_seed",
    "keypair_from_secret",

    # Codec
    "VERSION_DELIMITER",
    "encode_fragment",
    "decode_fragment",
    "resolve_fragment",

    # Identity
    "HyperLink",

    # Ledger
    "TransferInstruction",
    "sign_transfer",
    "parse_transfer",
    "Blockhash",
    "LedgerClient",
    "SolanaRpcLedgerClient",
    "InMemoryLedger",

    # Rotation
    "RotationProtocol",
    "RotationResult",
    "transferable_amount",
]
