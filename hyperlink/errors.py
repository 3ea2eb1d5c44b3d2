"""
HyperLink Error Taxonomy

Every failure in the identity subsystem is raised as one of these types.
There is no partially-constructed HyperLink: a call either returns a
fully valid link or raises.
"""

from typing import Optional


class HyperLinkError(Exception):
    """Base class for all HyperLink errors."""


class InvalidVersion(HyperLinkError, ValueError):
    """Raised when a link version other than 0 or 1 is requested."""

    def __init__(self, version):
        self.version = version
        super().__init__(f"invalid version: {version!r}")


class DecodeError(HyperLinkError, ValueError):
    """Raised when a fragment is not valid base58 or has the wrong length."""


class InvalidLink(HyperLinkError, ValueError):
    """Raised when link text or a URL cannot be turned into a HyperLink."""


class EntropySourceUnavailable(HyperLinkError):
    """
    Raised when secure random bytes cannot be produced.

    Fatal for the calling operation. There is no fallback source.
    """


class InsufficientBalance(HyperLinkError):
    """Raised when a balance does not cover the network fee."""

    def __init__(self, balance: int, fee: int):
        self.balance = balance
        self.fee = fee
        super().__init__(
            f"balance of {balance} lamports does not cover the {fee} lamport fee"
        )


class LedgerError(HyperLinkError):
    """
    Raised for RPC transport failures and JSON-RPC error responses.

    Always recoverable: the caller may re-query the balance and retry.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        super().__init__(message)


class TransferFailed(LedgerError):
    """Raised when a submitted transfer errors or expires before confirmation."""

    def __init__(self, message: str, signature: Optional[str] = None, code: Optional[int] = None):
        self.signature = signature
        super().__init__(message, code=code)


class RotationFailed(HyperLinkError):
    """
    Raised when the transfer of a rotation did not confirm.

    `pending` is the freshly created link the funds were addressed to. It
    must not be presented as the live link, but it is kept so that funds
    from a transfer that landed after a confirmation timeout stay
    recoverable.
    """

    def __init__(self, cause: LedgerError, pending):
        self.cause = cause
        self.pending = pending
        super().__init__(f"rotation transfer did not confirm: {cause}")
