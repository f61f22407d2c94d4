#!/usr/bin/env python3
"""Command line interface for managing a TEN session key against a gateway endpoint"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .client import SessionKeyClient
from .config import settings
from .core.errors import SessionKeyError
from .core.execution import FeePriority, TransactionParams
from .core.state import SessionKeyState
from .logging_config import log_context, setup_logging
from .providers.http import JsonRpcProvider


def print_state(state: SessionKeyState, status: str) -> None:
    """Pretty print the session key record"""
    print("\nSession Key")
    print("=" * 50)
    print(f"Address: {state.session_key or '-'}")
    print(f"Status:  {status}")
    print(f"Active:  {'yes' if state.is_active else 'no'}")
    if state.balance is not None:
        print(f"Balance: {state.balance.eth} ETH (~{state.balance.estimated_transactions} transactions)")
    if state.error is not None:
        print(f"Last error: {state.error}")


async def run_command(args: argparse.Namespace, client: SessionKeyClient) -> None:
    command = args.command

    if command == "status":
        print_state(client.get_state(), client.status.value)
        return

    async with JsonRpcProvider(rpc_url=args.rpc_url) as provider:
        try:
            if command == "create":
                address = await client.create_session_key(provider)
                print(f"Session key: {address}")

            elif command == "fund":
                session_key = client.get_session_key()
                if session_key is None:
                    print("No session key. Run 'create' first.")
                    return
                tx_hash = await client.fund_session_key(session_key, args.amount, provider, args.sender)
                print(f"Funded {session_key} with {args.amount} ETH: {tx_hash}")

            elif command == "activate":
                await client.activate_session_key(provider)
                print("Session key activated")

            elif command == "deactivate":
                await client.deactivate_session_key(provider)
                print("Session key deactivated")

            elif command == "delete":
                await client.delete_session_key(provider)
                print("Session key deleted")

            elif command == "cleanup":
                await client.cleanup_session_key(provider)
                print("Session key deactivated and deleted")

            elif command == "balance":
                snapshot = await client.refresh_balance(provider)
                print(f"Balance: {snapshot.eth} ETH (~{snapshot.estimated_transactions} transactions)")

            elif command == "send":
                params = TransactionParams(
                    to=args.to,
                    data=args.data,
                    value=args.value,
                    nonce=args.nonce,
                    gas_limit=args.gas_limit,
                )
                result = await client.send_transaction(params, provider, FeePriority(args.priority))
                print(f"Submitted: {result}")
        finally:
            # Closing the provider emits disconnect; detach first
            client.detach_listeners()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TEN session key CLI")
    parser.add_argument("--rpc-url", default=settings.rpc_url, help="TEN gateway URL (default: from settings)")
    parser.add_argument("--state-file", default=str(settings.state_file), help="Where the session key record is kept")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Show the stored session key record")
    subparsers.add_parser("create", help="Create (or retrieve) the session key")

    fund_parser = subparsers.add_parser("fund", help="Send ETH from a wallet account to the session key")
    fund_parser.add_argument("amount", help="Amount in ETH, e.g. 0.05")
    fund_parser.add_argument("--from", dest="sender", required=True, help="Funding account address")

    subparsers.add_parser("activate", help="Activate the session key")
    subparsers.add_parser("deactivate", help="Deactivate the session key")
    subparsers.add_parser("delete", help="Delete the session key")
    subparsers.add_parser("cleanup", help="Deactivate, then delete, the session key")
    subparsers.add_parser("balance", help="Refresh the session key balance")

    send_parser = subparsers.add_parser("send", help="Send a transaction with the session key")
    send_parser.add_argument("to", help="Recipient or contract address")
    send_parser.add_argument("--data", default="0x", help="Calldata hex (default: 0x)")
    send_parser.add_argument("--value", default=None, help="Value in wei, hex or decimal")
    send_parser.add_argument("--nonce", type=int, default=None, help="Override the nonce")
    send_parser.add_argument("--gas-limit", type=int, default=None, help="Override the gas limit")
    send_parser.add_argument(
        "--priority",
        choices=[p.value for p in FeePriority],
        default=FeePriority.MEDIUM.value,
        help="Fee tier (default: MEDIUM)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level)
    config = settings.model_copy(update={"rpc_url": args.rpc_url, "state_file": Path(args.state_file)})
    client = SessionKeyClient.with_file_storage(config)

    try:
        with log_context(command=args.command, chain_id=config.target_chain_id):
            asyncio.run(run_command(args, client))
    except SessionKeyError as e:
        print(f"Error ({e.kind.value}): {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
