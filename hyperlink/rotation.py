"""
Link rotation.

Rotation moves everything an old link holds into a freshly created
version 0 link:

    1. balance B (given, or queried from the ledger), fee F
    2. B <= F  ->  InsufficientBalance, nothing is built or sent
    3. new = HyperLink.create(0)
    4. transfer B - F from old to new, signed by old
    5. confirmed  ->  new is the live link, old is drained

The new link is only returned once the transfer confirms, so a link whose
funds never arrived is never advertised. On failure RotationFailed carries
it as `pending` because a transfer may still land after a confirmation
timeout.

Sweeping is the same transfer to an arbitrary address instead of a new
link.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from . import config
from .errors import InsufficientBalance, LedgerError, RotationFailed
from .ledger import LedgerClient
from .link import HyperLink
from .logging_config import audit_log, set_correlation_id
from .suite import CryptoSuite
from .transfer import decode_address
from .versions import LinkVersion


@dataclass(frozen=True)
class RotationResult:
    """Outcome of a confirmed rotation or sweep."""
    source: str
    destination: str
    lamports: int
    fee: int
    signature: str
    link: Optional[HyperLink] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "source": self.source,
            "destination": self.destination,
            "lamports": self.lamports,
            "fee": self.fee,
            "signature": self.signature,
        }
        if self.link is not None:
            data["url"] = self.link.url
        return data


def transferable_amount(balance: int, fee: int) -> int:
    """
    Amount left to move after paying the fee.

    Raises:
        InsufficientBalance: if `balance` does not exceed `fee`
    """
    if balance <= fee:
        raise InsufficientBalance(balance, fee)
    return balance - fee


class RotationProtocol:
    """Moves a link's full balance, minus the fee, to a new owner."""

    def __init__(
        self,
        ledger: LedgerClient,
        fee: Optional[int] = None,
        suite: Optional[CryptoSuite] = None,
        origin: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.ledger = ledger
        self.fee = config.TRANSFER_FEE_LAMPORTS if fee is None else fee
        self._suite = suite
        self._origin = origin
        self._path = path

    def _balance(self, link: HyperLink, balance: Optional[int]) -> int:
        if balance is None:
            balance = self.ledger.get_balance(link.public_key)
        return balance

    def rotate(self, old: HyperLink, balance: Optional[int] = None) -> RotationResult:
        """
        Move the balance of `old` into a new version 0 link.

        Args:
            old: The link being drained
            balance: Known balance in lamports; queried when omitted

        Raises:
            InsufficientBalance: if the balance does not cover the fee
            LedgerError: if the balance query fails
            RotationFailed: if the transfer did not confirm
        """
        set_correlation_id()
        balance = self._balance(old, balance)
        audit_log.rotation_requested(old.address, balance, self.fee)
        lamports = transferable_amount(balance, self.fee)

        new = HyperLink.create(
            LinkVersion.HARDENED,
            origin=self._origin,
            path=self._path,
            suite=self._suite,
        )

        try:
            signature = self.ledger.transfer(old.keypair, new.public_key, lamports)
        except LedgerError as e:
            audit_log.rotation_failed(
                old.address, new.address, str(e), getattr(e, "signature", None)
            )
            raise RotationFailed(e, pending=new) from e

        audit_log.rotation_confirmed(old.address, new.address, lamports, signature)
        return RotationResult(
            source=old.address,
            destination=new.address,
            lamports=lamports,
            fee=self.fee,
            signature=signature,
            link=new,
        )

    def sweep(self, old: HyperLink, destination: str, balance: Optional[int] = None) -> RotationResult:
        """
        Move the balance of `old` to the account at `destination`.

        Raises:
            ValueError: if `destination` is not a valid address or is `old` itself
            InsufficientBalance: if the balance does not cover the fee
            LedgerError: if the balance query or the transfer fails
        """
        target = decode_address(destination)
        if target == old.public_key:
            raise ValueError("cannot sweep a link into itself")

        set_correlation_id()
        balance = self._balance(old, balance)
        audit_log.rotation_requested(old.address, balance, self.fee, destination=destination)
        lamports = transferable_amount(balance, self.fee)

        try:
            signature = self.ledger.transfer(old.keypair, target, lamports)
        except LedgerError as e:
            audit_log.rotation_failed(
                old.address, destination, str(e), getattr(e, "signature", None)
            )
            raise

        audit_log.rotation_confirmed(old.address, destination, lamports, signature)
        return RotationResult(
            source=old.address,
            destination=destination,
            lamports=lamports,
            fee=self.fee,
            signature=signature,
        )
