"""
System transfer transactions.

Builds the one transaction shape a HyperLink ever signs: a legacy ledger
message with a single System Program transfer from the link's account to
a destination account, fee paid by the source.

Message layout:

    header            [num_required_signatures=1, readonly_signed=0, readonly_unsigned=1]
    account keys      compact-u16(3) || source || destination || system program
    recent blockhash  32 bytes
    instructions      compact-u16(1) || program_index=2 || compact-u16(2) || [0, 1]
                      || compact-u16(12) || u32le(2) || u64le(lamports)

Transaction:

    compact-u16(1) || ed25519 signature (64 bytes) || message
"""

import struct
from dataclasses import dataclass

import base58

from .derivation import Keypair

SYSTEM_PROGRAM_ID = bytes(32)
SYSTEM_TRANSFER_INDEX = 2
MAX_LAMPORTS = 2 ** 64 - 1


def compact_u16(value: int) -> bytes:
    """Encode a length as a compact-u16 (7 bits per byte, little-endian)."""
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"compact-u16 out of range: {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_address(address: str) -> bytes:
    """Decode a base58 account address into its 32 raw bytes."""
    try:
        raw = base58.b58decode(address)
    except ValueError as e:
        raise ValueError(f"invalid address: {address!r}") from e
    if len(raw) != 32:
        raise ValueError(f"address must decode to 32 bytes, got {len(raw)}")
    return raw


@dataclass(frozen=True)
class TransferInstruction:
    """Move `lamports` from `source` to `destination` (32-byte public keys)."""
    source: bytes
    destination: bytes
    lamports: int

    def __post_init__(self):
        if len(self.source) != 32 or len(self.destination) != 32:
            raise ValueError("source and destination must be 32-byte public keys")
        if self.source == self.destination:
            raise ValueError("source and destination must differ")
        if not 0 < self.lamports <= MAX_LAMPORTS:
            raise ValueError(f"lamports must be positive and fit in u64, got {self.lamports}")

    def data(self) -> bytes:
        return struct.pack("<IQ", SYSTEM_TRANSFER_INDEX, self.lamports)

    def message(self, recent_blockhash: str) -> bytes:
        """Serialize the message that the source signs."""
        blockhash = decode_address(recent_blockhash)
        data = self.data()

        header = bytes([1, 0, 1])
        keys = compact_u16(3) + self.source + self.destination + SYSTEM_PROGRAM_ID
        instruction = (
            bytes([2])
            + compact_u16(2) + bytes([0, 1])
            + compact_u16(len(data)) + data
        )
        return header + keys + blockhash + compact_u16(1) + instruction


def sign_transfer(instruction: TransferInstruction, signer: Keypair, recent_blockhash: str) -> bytes:
    """
    Sign and serialize a transfer transaction.

    Raises:
        ValueError: if `signer` does not own the source account
    """
    if signer.public_key != instruction.source:
        raise ValueError("signer does not own the transfer source")
    message = instruction.message(recent_blockhash)
    signature = signer.sign(message)
    return compact_u16(1) + signature + message


def transaction_signature(raw: bytes) -> str:
    """Base58 id of a single-signer transaction (its first signature)."""
    return base58.b58encode(raw[1:65]).decode("ascii")


MESSAGE_LENGTH = 150


def parse_transfer(raw: bytes):
    """
    Parse a transaction produced by sign_transfer().

    Returns:
        Tuple of (instruction, recent_blockhash, signature, message)

    Raises:
        ValueError: if `raw` is not a single-signer system transfer
    """
    if len(raw) != 1 + 64 + MESSAGE_LENGTH or raw[0] != 1:
        raise ValueError("not a single-signer transfer transaction")
    signature = raw[1:65]
    message = raw[65:]

    if message[0:3] != bytes([1, 0, 1]) or message[3] != 3:
        raise ValueError("unexpected message header")
    if message[68:100] != SYSTEM_PROGRAM_ID:
        raise ValueError("instruction is not for the system program")
    if message[132:138] != bytes([1, 2, 2, 0, 1, 12]):
        raise ValueError("unexpected instruction layout")

    index, lamports = struct.unpack("<IQ", message[138:150])
    if index != SYSTEM_TRANSFER_INDEX:
        raise ValueError(f"not a transfer instruction: {index}")

    instruction = TransferInstruction(
        source=message[4:36],
        destination=message[36:68],
        lamports=lamports,
    )
    blockhash = base58.b58encode(message[100:132]).decode("ascii")
    return instruction, blockhash, signature, message
