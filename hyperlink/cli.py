#!/usr/bin/env python3
"""
HyperLink Command Line Interface

Usage:
    hyperlink create [--version 0|1]
    hyperlink inspect <link>
    hyperlink balance <link>
    hyperlink rotate <link> [--balance N] [--fee N]
    hyperlink sweep <link> <destination>
    hyperlink demo
"""

import argparse
import json
import sys

from . import config
from .logging_config import configure_logging

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _ledger(args):
    from .ledger import SolanaRpcLedgerClient
    return SolanaRpcLedgerClient(rpc_url=args.rpc_url)


def _sol(lamports: int) -> str:
    return f"{lamports / config.LAMPORTS_PER_SOL:.9f} SOL"


def cmd_create(args):
    """Create a new link."""
    from . import HyperLink

    link = HyperLink.create(args.version)
    if args.json:
        print(json.dumps({"url": link.url, **link.to_dict()}, indent=2))
    else:
        print(link.url)
        print(f"\nAddress: {link.address}", file=sys.stderr)
        print("Anyone holding this link controls its funds.", file=sys.stderr)
    return 0


def cmd_inspect(args):
    """Show the public side of a link."""
    from . import HyperLink

    link = HyperLink.from_link(args.link)
    print(json.dumps(link.to_dict(), indent=2))
    return 0


def cmd_balance(args):
    """Query the balance held by a link."""
    from . import HyperLink

    link = HyperLink.from_link(args.link)
    lamports = _ledger(args).get_balance(link.public_key)
    print(f"{link.address}: {lamports} lamports ({_sol(lamports)})")
    return 0


def cmd_rotate(args):
    """Move a link's balance into a new link."""
    from . import HyperLink, RotationFailed, RotationProtocol

    old = HyperLink.from_link(args.link)
    protocol = RotationProtocol(_ledger(args), fee=args.fee)
    try:
        result = protocol.rotate(old, balance=args.balance)
    except RotationFailed as e:
        print(f"✗ {e}", file=sys.stderr)
        print("  Keep this pending link until the old balance is re-checked:", file=sys.stderr)
        print(f"  {e.pending.url}", file=sys.stderr)
        return 1

    print(result.link.url)
    print(f"\n✓ Moved {result.lamports} lamports to {result.destination}", file=sys.stderr)
    print(f"  Signature: {result.signature}", file=sys.stderr)
    return 0


def cmd_sweep(args):
    """Move a link's balance to an address."""
    from . import HyperLink, RotationProtocol

    old = HyperLink.from_link(args.link)
    protocol = RotationProtocol(_ledger(args), fee=args.fee)
    result = protocol.sweep(old, args.destination, balance=args.balance)

    print(json.dumps(result.to_dict(), indent=2))
    return 0


def cmd_demo(args):
    """Run a rotation against an in-memory ledger."""
    from . import HyperLink, InMemoryLedger, RotationProtocol

    print("=" * 60)
    print("HyperLink Demonstration")
    print("=" * 60)

    ledger = InMemoryLedger()
    protocol = RotationProtocol(ledger, fee=ledger.fee)

    link = HyperLink.create(0)
    ledger.airdrop(link.public_key, config.LAMPORTS_PER_SOL)
    print(f"\nCreated link: {link.url}")
    print(f"Address: {link.address}")
    print(f"Balance: {_sol(ledger.get_balance(link.public_key))}")

    reopened = HyperLink.from_link(link.url)
    print(f"\nReopened from text, same keypair: {reopened.keypair == link.keypair}")

    print("\n" + "-" * 60)
    print("Rotating into a fresh link")
    print("-" * 60)
    result = protocol.rotate(link)
    print(f"New link: {result.link.url}")
    print(f"Moved: {result.lamports} lamports (fee {result.fee})")
    print(f"Old balance: {ledger.get_balance(link.public_key)}")
    print(f"New balance: {ledger.get_balance(result.link.public_key)}")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="hyperlink",
        description="HyperLink CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hyperlink create                        Create a version 0 link
  hyperlink create --version 1            Create a version 1 link
  hyperlink inspect "http://localhost:3000/i#..."
  hyperlink rotate "http://localhost:3000/i#..."
  hyperlink sweep "http://localhost:3000/i#..." <address>
        """
    )
    parser.add_argument("--rpc-url", default=config.RPC_URL, help="Ledger JSON-RPC endpoint")
    parser.add_argument("--log-level", type=str.upper, default=config.LOG_LEVEL.upper(),
                        choices=LOG_LEVELS, help="Log level")
    parser.add_argument("--log-file", help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    create_parser = subparsers.add_parser("create", help="Create a new link")
    create_parser.add_argument("-v", "--version", type=int, default=0, help="Link version (0 or 1)")
    create_parser.add_argument("--json", action="store_true", help="Print JSON")

    inspect_parser = subparsers.add_parser("inspect", help="Show a link's address and version")
    inspect_parser.add_argument("link", help="Full link text")

    balance_parser = subparsers.add_parser("balance", help="Query a link's balance")
    balance_parser.add_argument("link", help="Full link text")

    for name, help_text in (("rotate", "Move the balance into a new link"),
                            ("sweep", "Move the balance to an address")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("link", help="Full link text")
        if name == "sweep":
            sub.add_argument("destination", help="Base58 destination address")
        sub.add_argument("-b", "--balance", type=int, help="Known balance in lamports")
        sub.add_argument("-f", "--fee", type=int, help="Network fee in lamports")

    subparsers.add_parser("demo", help="Run demonstration")

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_format=config.LOG_JSON, log_file=args.log_file)

    from .errors import HyperLinkError

    commands = {
        "create": cmd_create,
        "inspect": cmd_inspect,
        "balance": cmd_balance,
        "rotate": cmd_rotate,
        "sweep": cmd_sweep,
        "demo": cmd_demo,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 2

    invalid = [name for name, valid in config.validate_config(rpc_url=args.rpc_url).items() if not valid]
    if invalid:
        print(f"✗ Invalid configuration: {', '.join(invalid)}", file=sys.stderr)
        return 2

    try:
        return command(args)
    except (HyperLinkError, ValueError) as e:
        if config.is_debug():
            raise
        print(f"✗ {type(e).__name__}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
