"""
Link versions.

The version tag selects the secret length, the seed derivation policy and
the fragment shape together. Only the two versions below exist; a new one
changes all three at once, so it is added here and in every table keyed
by LinkVersion.
"""

from enum import IntEnum
from typing import Dict

from .errors import InvalidVersion


class LinkVersion(IntEnum):
    """Supported link versions."""
    HARDENED = 0  # Argon2id-stretched 12-byte secret
    FAST = 1      # 16-byte secret padded to the seed length


SECRET_LENGTHS: Dict[LinkVersion, int] = {
    LinkVersion.HARDENED: 12,
    LinkVersion.FAST: 16,
}


def parse_version(value) -> LinkVersion:
    """
    Validate a version number.

    Raises:
        InvalidVersion: for anything other than the integers 0 and 1.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidVersion(value)
    try:
        return LinkVersion(value)
    except ValueError:
        raise InvalidVersion(value) from None


def secret_length(version: LinkVersion) -> int:
    """Secret length in bytes for `version`."""
    return SECRET_LENGTHS[parse_version(version)]
