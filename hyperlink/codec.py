"""
HyperLink Fragment Codec

The URL fragment is the only durable copy of a link's secret. Its format
is fixed; any change orphans every link already issued.

    version 0:  base58(secret)          e.g. "7Gk2...Qz"
    version 1:  "_" + base58(secret)    e.g. "_3fTx...9a"

The base58 alphabet has no "_", so a fragment without the delimiter is
always version 0.

A non-empty prefix before the delimiter ("2_abc") is a reserved slot for
explicit numeric versions. It is not parsed: such fragments resolve to
version 0 and the prefix is dropped.
"""

from typing import Tuple

import base58

from .errors import DecodeError
from .versions import LinkVersion, parse_version, secret_length

VERSION_DELIMITER = "_"
BASE58_CHARACTERS = frozenset(base58.BITCOIN_ALPHABET.decode("ascii"))


def encode_fragment(version, secret: bytes) -> str:
    """
    Encode (version, secret) as a URL fragment, without the leading "#".

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

    encoded = base58.b58encode(bytes(secret)).decode("ascii")
    if version == LinkVersion.FAST:
        return f"{VERSION_DELIMITER}{encoded}"
    return encoded


def resolve_fragment(slug: str) -> Tuple[LinkVersion, str]:
    """
    Split a fragment into its version and the encoded secret.

    No base58 decoding happens here.
    """
    if VERSION_DELIMITER not in slug:
        return LinkVersion.HARDENED, slug

    version_string, _, rest = slug.partition(VERSION_DELIMITER)
    if len(version_string) == 0:
        return LinkVersion.FAST, rest
    # Reserved numeric-version slot, not interpreted
    return LinkVersion.HARDENED, rest


def decode_fragment(slug: str) -> Tuple[LinkVersion, bytes]:
    """
    Decode a URL fragment (without the leading "#") into (version, secret).

    Raises:
        DecodeError: if the encoded secret is not base58 or decodes to the
            wrong length for its version.
    """
    if not isinstance(slug, str):
        raise DecodeError(f"fragment must be text, got {type(slug).__name__}")

    version, encoded = resolve_fragment(slug)

    # b58decode strips trailing whitespace itself
    if not set(encoded) <= BASE58_CHARACTERS:
        raise DecodeError("fragment contains characters outside the base58 alphabet")

    try:
        secret = base58.b58decode(encoded)
    except ValueError as e:
        raise DecodeError("fragment is not valid base58") from e

    expected = secret_length(version)
    if len(secret) != expected:
        raise DecodeError(
            f"version {int(version)} secret must be {expected} bytes, got {len(secret)}"
        )
    return version, secret
