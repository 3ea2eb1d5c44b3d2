"""
HyperLink Identity

A HyperLink is a (url, keypair) pair where the keypair is derived
entirely from the secret carried in the URL fragment:

    create(version)
        secret = random(len[version])
        url    = origin + path + "#" + encode_fragment(version, secret)
        keypair = Ed25519(derive_seed(secret, version))

    from_url(url)
        version, secret = decode_fragment(url.fragment)
        keypair = Ed25519(derive_seed(secret, version))

Both paths yield byte-identical keypairs for the same link. The URL is the
only durable representation; losing it loses the funds the keypair holds.

A HyperLink is immutable. Construction either returns a fully valid link
or raises; there is no third state.
"""

from typing import Any, Dict, Optional, Union
from urllib.parse import SplitResult, urlsplit

from . import config
from .codec import decode_fragment, encode_fragment
from .derivation import Keypair, keypair_from_secret
from .entropy import secret_for_version
from .errors import DecodeError, InvalidLink
from .logging_config import audit_log
from .suite import CryptoSuite
from .versions import LinkVersion, parse_version

_CONSTRUCT = object()


class HyperLink:
    """A link-recoverable, value-bearing Ed25519 identity."""

    def __init__(self, url: str, keypair: Keypair, version: LinkVersion, *, _token=None):
        if _token is not _CONSTRUCT:
            raise TypeError("use HyperLink.create(), from_url() or from_link()")
        self._url = url
        self._keypair = keypair
        self._version = version

    @property
    def url(self) -> str:
        return self._url

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    @property
    def version(self) -> LinkVersion:
        return self._version

    @property
    def fragment(self) -> str:
        return urlsplit(self._url).fragment

    @property
    def public_key(self) -> bytes:
        return self._keypair.public_key

    @property
    def address(self) -> str:
        return self._keypair.address

    # ------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------

    @classmethod
    def create(
        cls,
        version=0,
        origin: Optional[str] = None,
        path: Optional[str] = None,
        suite: Optional[CryptoSuite] = None,
    ) -> "HyperLink":
        """
        Create a link with a fresh random secret.

        Args:
            version: 0 (Argon2id, 12-byte secret) or 1 (padded, 16-byte secret)
            origin: URL origin, defaults to HYPERLINK_ORIGIN_OVERRIDE
            path: URL path, defaults to HYPERLINK_PATH
            suite: Crypto capabilities, defaults to the libsodium suite

        Raises:
            InvalidVersion: if `version` is not 0 or 1
            EntropySourceUnavailable: if no secure random bytes are available
        """
        version = parse_version(version)
        secret = secret_for_version(version, suite)
        keypair = keypair_from_secret(secret, version, suite)
        fragment = encode_fragment(version, secret)
        url = f"{config.link_base(origin, path)}#{fragment}"

        link = cls(url, keypair, version, _token=_CONSTRUCT)
        audit_log.link_created(link.address, int(version))
        return link

    @classmethod
    def from_url(cls, url: Union[SplitResult, str], suite: Optional[CryptoSuite] = None) -> "HyperLink":
        """
        Rebuild a link from a parsed URL.

        Raises:
            InvalidLink: if the fragment does not decode to a valid secret
        """
        if isinstance(url, str):
            return cls.from_link(url, suite)

        try:
            version, secret = decode_fragment(url.fragment)
        except DecodeError as e:
            audit_log.link_rejected(str(e))
            raise InvalidLink(f"invalid link fragment: {e}") from e

        keypair = keypair_from_secret(secret, version, suite)
        link = cls(url.geturl(), keypair, version, _token=_CONSTRUCT)
        audit_log.link_opened(link.address, int(version))
        return link

    @classmethod
    def from_link(cls, link: str, suite: Optional[CryptoSuite] = None) -> "HyperLink":
        """
        Rebuild a link from its text form.

        Raises:
            InvalidLink: if the text is not an absolute URL or its fragment
                does not decode
        """
        if not isinstance(link, str):
            raise InvalidLink(f"link must be text, got {type(link).__name__}")
        try:
            url = urlsplit(link.strip())
        except ValueError as e:
            raise InvalidLink(f"malformed link: {e}") from e

        if not url.scheme:
            raise InvalidLink("link is not an absolute URL")
        if url.scheme in ("http", "https") and not url.netloc:
            raise InvalidLink("link has no host")
        return cls.from_url(url, suite)

    # ------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Public description of the link. Contains no secret material."""
        parts = urlsplit(self._url)
        return {
            "address": self.address,
            "version": int(self._version),
            "origin": f"{parts.scheme}://{parts.netloc}",
            "path": parts.path,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, HyperLink):
            return NotImplemented
        return self._url == other._url and self._keypair == other._keypair

    def __hash__(self) -> int:
        return hash((self._url, self._keypair.public_key))

    def __repr__(self) -> str:
        return f"HyperLink(version={int(self._version)}, address={self.address!r})"
