"""
Configuration module for HyperLink.

Centralizes all configuration with environment variable support.
None of these values affect key derivation: origin and path only shape
the displayed URL, and the ledger settings only reach the RPC client.
"""

import os
from typing import Dict
from urllib.parse import urlsplit

# ============================================================
# Link Configuration
# ============================================================

DEFAULT_ORIGIN = "http://localhost:3000"
HYPERLINK_ORIGIN = os.getenv("HYPERLINK_ORIGIN_OVERRIDE", DEFAULT_ORIGIN)
HYPERLINK_PATH = os.getenv("HYPERLINK_PATH", "/i")

# ============================================================
# Ledger Configuration
# ============================================================

RPC_URL = os.getenv("HYPERLINK_RPC_URL", "https://api.devnet.solana.com")
COMMITMENT = os.getenv("HYPERLINK_COMMITMENT", "confirmed")  # processed|confirmed|finalized

# Fixed per-signature network fee (lamports)
TRANSFER_FEE_LAMPORTS = int(os.getenv("HYPERLINK_TRANSFER_FEE", "5000"))

# Timeouts (seconds)
RPC_TIMEOUT = float(os.getenv("HYPERLINK_RPC_TIMEOUT", "10"))
CONFIRM_TIMEOUT = float(os.getenv("HYPERLINK_CONFIRM_TIMEOUT", "60"))
CONFIRM_POLL_INTERVAL = float(os.getenv("HYPERLINK_CONFIRM_POLL_INTERVAL", "0.5"))

LAMPORTS_PER_SOL = 1_000_000_000

# ============================================================
# Logging Configuration
# ============================================================

LOG_LEVEL = os.getenv("HYPERLINK_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("HYPERLINK_LOG_JSON", "true").lower() in ("1", "true", "yes")


def link_base(origin: str = None, path: str = None) -> str:
    """Origin and path that every generated link starts with."""
    origin = HYPERLINK_ORIGIN if origin is None else origin
    path = HYPERLINK_PATH if path is None else path
    return f"{origin.rstrip('/')}{path}"


# ============================================================
# Validation
# ============================================================

def validate_config(rpc_url: str = None) -> Dict[str, bool]:
    """
    Validate the configured values.
    Returns dict of setting -> valid.

    Args:
        rpc_url: RPC endpoint to check instead of HYPERLINK_RPC_URL
    """
    origin = urlsplit(HYPERLINK_ORIGIN)
    rpc = urlsplit(RPC_URL if rpc_url is None else rpc_url)
    return {
        "origin": bool(origin.scheme and origin.netloc),
        "path": HYPERLINK_PATH.startswith("/") and "#" not in HYPERLINK_PATH,
        "rpc_url": rpc.scheme in ("http", "https") and bool(rpc.netloc),
        "commitment": COMMITMENT in ("processed", "confirmed", "finalized"),
        "transfer_fee": TRANSFER_FEE_LAMPORTS >= 0,
    }


# ============================================================
# Feature Flags
# ============================================================

def is_debug() -> bool:
    """Check if debug mode is enabled. The CLI then re-raises errors with tracebacks."""
    return os.getenv("HYPERLINK_DEBUG", "").lower() in ("1", "true", "yes")
