"""
Ledger clients.

The identity subsystem never performs I/O itself. Balance queries and
transfer submission go through a LedgerClient:

    LedgerClient (ABC)
      ├── SolanaRpcLedgerClient   JSON-RPC over HTTP (requests)
      └── InMemoryLedger          in-process ledger for tests and demos

Every failure is raised as LedgerError or TransferFailed. Both are
recoverable: the caller re-queries the balance and may retry. A transfer
rejected because a concurrent rotation already drained the account is
reported the same way.
"""

import base64
import hashlib
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import base58
import requests
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from . import config
from .derivation import Keypair
from .errors import LedgerError, TransferFailed
from .logging_config import audit_log
from .transfer import (
    TransferInstruction,
    parse_transfer,
    sign_transfer,
    transaction_signature,
)

logger = logging.getLogger(__name__)

COMMITMENT_LEVELS = {"processed": 0, "confirmed": 1, "finalized": 2}


@dataclass(frozen=True)
class Blockhash:
    """Recent blockhash and the last block height at which it is valid."""
    blockhash: str
    last_valid_block_height: int


class LedgerClient(ABC):
    """Abstract ledger capabilities used by rotation and sweeps."""

    @abstractmethod
    def get_balance(self, public_key: bytes) -> int:
        """Balance of an account in lamports."""
        pass

    @abstractmethod
    def get_latest_blockhash(self) -> Blockhash:
        pass

    @abstractmethod
    def send_transaction(self, raw: bytes) -> str:
        """Submit a signed transaction and return its base58 signature."""
        pass

    @abstractmethod
    def confirm_transaction(self, signature: str, blockhash: Blockhash) -> None:
        """
        Block until `signature` reaches the configured commitment.

        Raises:
            TransferFailed: if the transaction errored or its blockhash expired
        """
        pass

    def transfer(self, source: Keypair, destination: bytes, lamports: int) -> str:
        """
        Build, sign, submit and confirm a system transfer.

        Returns:
            The base58 transaction signature
        """
        instruction = TransferInstruction(
            source=source.public_key,
            destination=destination,
            lamports=lamports,
        )
        blockhash = self.get_latest_blockhash()
        raw = sign_transfer(instruction, source, blockhash.blockhash)

        signature = self.send_transaction(raw)
        audit_log.transfer_submitted(
            source.address,
            base58.b58encode(destination).decode("ascii"),
            lamports,
            signature,
        )
        self.confirm_transaction(signature, blockhash)
        return signature


# =============================================================================
# JSON-RPC CLIENT
# =============================================================================

class SolanaRpcLedgerClient(LedgerClient):
    """
    Ledger client speaking Solana JSON-RPC over HTTP.

    Thread-safe: request ids come from a locked counter and requests.Session
    is only used for independent POSTs.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        commitment: Optional[str] = None,
        timeout: Optional[float] = None,
        confirm_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self._rpc_url = rpc_url or config.RPC_URL
        self._commitment = commitment or config.COMMITMENT
        if self._commitment not in COMMITMENT_LEVELS:
            raise ValueError(f"unknown commitment: {self._commitment}")
        self._timeout = config.RPC_TIMEOUT if timeout is None else timeout
        self._confirm_timeout = config.CONFIRM_TIMEOUT if confirm_timeout is None else confirm_timeout
        self._poll_interval = config.CONFIRM_POLL_INTERVAL if poll_interval is None else poll_interval
        self._session = session or requests.Session()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    def _next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def _call(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id(),
            "method": method,
            "params": params,
        }
        try:
            response = self._session.post(self._rpc_url, json=payload, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            logger.warning("RPC %s failed: %s", method, e)
            raise LedgerError(f"{method} request failed: {e}") from e
        except ValueError as e:
            raise LedgerError(f"{method} returned invalid JSON") from e

        if not isinstance(body, dict):
            raise LedgerError(f"{method} returned a malformed response")
        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                raise LedgerError(f"{method} error: {error}")
            raise LedgerError(
                f"{method} error: {error.get('message', 'unknown error')}",
                code=error.get("code"),
            )
        if "result" not in body:
            raise LedgerError(f"{method} returned no result")
        return body["result"]

    def get_balance(self, public_key: bytes) -> int:
        address = base58.b58encode(public_key).decode("ascii")
        result = self._call("getBalance", [address, {"commitment": self._commitment}])
        return int(result["value"])

    def get_latest_blockhash(self) -> Blockhash:
        result = self._call("getLatestBlockhash", [{"commitment": self._commitment}])
        value = result["value"]
        return Blockhash(
            blockhash=value["blockhash"],
            last_valid_block_height=int(value["lastValidBlockHeight"]),
        )

    def get_block_height(self) -> int:
        return int(self._call("getBlockHeight", [{"commitment": self._commitment}]))

    def send_transaction(self, raw: bytes) -> str:
        encoded = base64.b64encode(raw).decode("ascii")
        try:
            signature = self._call(
                "sendTransaction",
                [encoded, {"encoding": "base64", "preflightCommitment": self._commitment}],
            )
        except LedgerError as e:
            raise TransferFailed(
                f"transaction rejected: {e}",
                signature=transaction_signature(raw),
                code=e.code,
            ) from e
        return signature

    def confirm_transaction(self, signature: str, blockhash: Blockhash) -> None:
        deadline = time.monotonic() + self._confirm_timeout
        wanted = COMMITMENT_LEVELS[self._commitment]

        while True:
            result = self._call("getSignatureStatuses", [[signature]])
            status = (result.get("value") or [None])[0]
            if status is not None:
                if status.get("err") is not None:
                    raise TransferFailed(
                        f"transaction {signature} failed: {status['err']}",
                        signature=signature,
                    )
                reached = COMMITMENT_LEVELS.get(status.get("confirmationStatus"), -1)
                if reached >= wanted:
                    return

            if self.get_block_height() > blockhash.last_valid_block_height:
                raise TransferFailed(
                    f"blockhash expired before {signature} confirmed",
                    signature=signature,
                )
            if time.monotonic() >= deadline:
                raise TransferFailed(
                    f"timed out waiting for {signature}",
                    signature=signature,
                )
            time.sleep(self._poll_interval)


# =============================================================================
# IN-MEMORY LEDGER
# =============================================================================

class InMemoryLedger(LedgerClient):
    """
    In-process ledger.

    Verifies signatures, charges a flat fee per transaction and applies
    transfers atomically. Not for production use.
    """

    def __init__(self, fee: Optional[int] = None, validity_blocks: int = 150):
        self.fee = config.TRANSFER_FEE_LAMPORTS if fee is None else fee
        self._balances: Dict[bytes, int] = {}
        self._confirmed: Dict[str, TransferInstruction] = {}
        self._height = 0
        self._validity_blocks = validity_blocks
        self._lock = threading.RLock()

    def airdrop(self, public_key: bytes, lamports: int) -> None:
        with self._lock:
            self._balances[public_key] = self._balances.get(public_key, 0) + lamports

    def get_balance(self, public_key: bytes) -> int:
        with self._lock:
            return self._balances.get(public_key, 0)

    def get_latest_blockhash(self) -> Blockhash:
        with self._lock:
            self._height += 1
            digest = hashlib.sha256(f"block:{self._height}".encode("utf-8")).digest()
            return Blockhash(
                blockhash=base58.b58encode(digest).decode("ascii"),
                last_valid_block_height=self._height + self._validity_blocks,
            )

    def send_transaction(self, raw: bytes) -> str:
        try:
            instruction, _, signature, message = parse_transfer(raw)
            VerifyKey(instruction.source).verify(message, signature)
        except (ValueError, BadSignatureError) as e:
            raise TransferFailed(f"transaction rejected: {e}") from e

        tx_id = transaction_signature(raw)
        with self._lock:
            if tx_id in self._confirmed:
                raise TransferFailed("transaction already processed", signature=tx_id)
            balance = self._balances.get(instruction.source, 0)
            if balance < instruction.lamports + self.fee:
                raise TransferFailed(
                    f"insufficient funds: {balance} < {instruction.lamports + self.fee}",
                    signature=tx_id,
                )
            self._balances[instruction.source] = balance - instruction.lamports - self.fee
            self._balances[instruction.destination] = (
                self._balances.get(instruction.destination, 0) + instruction.lamports
            )
            self._confirmed[tx_id] = instruction
        return tx_id

    def confirm_transaction(self, signature: str, blockhash: Blockhash) -> None:
        with self._lock:
            if signature not in self._confirmed:
                raise TransferFailed(f"unknown transaction {signature}", signature=signature)

    def transactions(self) -> List[TransferInstruction]:
        with self._lock:
            return list(self._confirmed.values())
