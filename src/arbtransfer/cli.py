"""
Operator command line for arbtransfer.

Usage:
    arbtransfer transfer [--from ADDR] [--to ADDR] [--amount ETH]
    arbtransfer balance ADDRESS
    arbtransfer gas
    arbtransfer info
    arbtransfer token [CONTRACT]

Environment Variables:
    PRIVATE_KEY: Private key of the sending wallet
    ARBITRUM_SEPOLIA_RPC: RPC URL (default: https://sepolia-rollup.arbitrum.io/rpc)
    ARBTRANSFER_NETWORK: arbitrum-sepolia (default) or arbitrum-one
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional

from .client import TransferClient
from .config import Network, TransferConfig, load_config
from .constants import (
    BASIC_TRANSFER_GAS_LIMIT,
    DEFAULT_PRE_BROADCAST_DELAY_SECONDS,
    ETHER_DECIMALS,
    GWEI_DECIMALS,
    LOW_BALANCE_WARNING_WEI,
)
from .errors import ArbTransferError
from .fees import basic_transfer_gas_limit
from .logging import configure_logging
from .models import OutcomeKind, PollResult, PollState, TransferOutcome
from .validation import format_units, validate_address

__all__ = ["main", "build_parser"]

DEFAULT_SENDER = "0xd78677EFed3b87f8f421E68dA3F984ad8Ef76439"
DEFAULT_RECEIVER = "0x7292dD72151DaCFBbE76305db1C8Ab1928E922E4"
DEFAULT_AMOUNT = "0.0001"
DEFAULT_TOKEN_CONTRACT = "0x812dd1c3eb07bb1f5f93540350ef9af838ab0528"

# Outcomes after which the transaction may still land; not treated as failures
_NON_FATAL_OUTCOMES = {OutcomeKind.CONFIRMED, OutcomeKind.TIMED_OUT, OutcomeKind.POLL_ERROR}

ClientFactory = Callable[[TransferConfig], TransferClient]

RULE = "-" * 57
BANNER = "=" * 57


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="arbtransfer",
        description="Send ETH on Arbitrum and wait for confirmation",
    )
    p.add_argument(
        "--network",
        choices=[n.value for n in Network],
        default=None,
        help="target network (default: $ARBTRANSFER_NETWORK or arbitrum-sepolia)",
    )
    p.add_argument("--rpc-url", default=None, help="RPC endpoint (default: $ARBITRUM_SEPOLIA_RPC or public RPC)")
    p.add_argument("--env-file", default=None, help="path to a .env file")
    p.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    sub = p.add_subparsers(dest="command", required=True)

    t = sub.add_parser("transfer", help="send ETH and poll until confirmed or timed out")
    t.add_argument("--from", dest="sender", default=DEFAULT_SENDER, help="sender address (default: %(default)s)")
    t.add_argument("--to", dest="receiver", default=DEFAULT_RECEIVER, help="receiver address (default: %(default)s)")
    t.add_argument("--amount", default=DEFAULT_AMOUNT, help="amount in ETH (default: %(default)s)")
    t.add_argument(
        "--grace",
        type=float,
        default=DEFAULT_PRE_BROADCAST_DELAY_SECONDS,
        help="seconds to wait before broadcasting, Ctrl+C cancels (default: %(default)s)",
    )
    t.add_argument("--interval", type=float, default=None, help="seconds between receipt queries (default: 5)")
    t.add_argument("--budget", type=int, default=None, help="maximum receipt queries (default: 12)")

    b = sub.add_parser("balance", help="show the ETH balance of an address")
    b.add_argument("address")

    sub.add_parser("gas", help="show the current gas price and a basic transfer fee estimate")
    sub.add_parser("info", help="show chain id and latest block")

    k = sub.add_parser("token", help="read ERC-20 metadata from a contract")
    k.add_argument("contract", nargs="?", default=DEFAULT_TOKEN_CONTRACT)
    return p


def _print_error(error: ArbTransferError, stage: Optional[str] = None) -> None:
    print(f"Error in stage '{stage or error.stage}': {error}", file=sys.stderr)
    for key, value in error.details.items():
        if value is not None:
            print(f"   {key}: {value}", file=sys.stderr)


def _on_tick(result: PollResult) -> None:
    if result.state == PollState.PENDING:
        print(".", end="", flush=True)


def _run_transfer(client: TransferClient, args: argparse.Namespace) -> int:
    network = client.network
    print(BANNER)
    print(f"         {network.name.value} ETH Transfer")
    print(BANNER + "\n")

    print("Transaction Details:")
    print(f"   From:    {args.sender}")
    print(f"   To:      {args.receiver}")
    print(f"   Network: {network.name.value} (Chain ID: {client.config.expected_chain_id})\n")

    print("STEP 1: Validating addresses")
    sender = validate_address(args.sender, "sender")
    validate_address(args.receiver, "receiver")
    print("   Both addresses are valid\n")

    print("STEP 2: Checking sender balance")
    balance = client.get_balance(sender)
    print(f"   Sender Balance: {format_units(balance, ETHER_DECIMALS)} ETH")
    if balance < LOW_BALANCE_WARNING_WEI:
        print("   Warning: sender balance is very low; it may not cover gas fees.")
    print(f"   Transfer Amount: {args.amount} ETH\n")

    print("STEP 3: Estimating gas fee")
    fees = client.estimate_fees()
    print(f"   Base fee:  {format_units(fees.base_fee, GWEI_DECIMALS)} Gwei")
    print(
        f"   Gas price: {format_units(fees.effective_gas_price, GWEI_DECIMALS)} Gwei "
        f"(base fee + {client.config.base_fee_margin_bps / 100:g}% + "
        f"{format_units(fees.priority_fee, GWEI_DECIMALS)} Gwei tip)"
    )
    print(f"   Gas limit: {fees.gas_limit}")
    print(f"   Max fee:   {format_units(fees.max_cost, ETHER_DECIMALS)} ETH\n")

    if client.config.pre_broadcast_delay > 0:
        print(f"   Press Ctrl+C to cancel, or wait {client.config.pre_broadcast_delay:g} seconds to proceed...\n")

    print("STEP 4: Executing transfer")
    print(f"   Waiting for confirmation (up to {client.poller.policy.total_timeout:g} seconds)", end="", flush=True)
    outcome = client.transfer(args.sender, args.receiver, args.amount, on_tick=_on_tick)
    print("\n")
    return _report_outcome(client, outcome, args)


def _report_outcome(client: TransferClient, outcome: TransferOutcome, args: argparse.Namespace) -> int:
    if not outcome.submitted:
        _print_error(outcome.error, outcome.stage)
        if outcome.kind == OutcomeKind.SUBMIT_ERROR:
            print(f"   tx_hash: {outcome.tx_hash}", file=sys.stderr)
            print("\nTroubleshooting tips:", file=sys.stderr)
            print("1. Check that PRIVATE_KEY belongs to the sender address", file=sys.stderr)
            print("2. Ensure the sender has enough ETH for value plus gas", file=sys.stderr)
            print("3. Verify the RPC endpoint is reachable", file=sys.stderr)
        return 1

    print(RULE)
    print(f"Transaction Hash: {outcome.tx_hash}")
    print(f"Explorer:         {client.explorer_tx_url(outcome.tx_hash)}")
    print(RULE)

    if outcome.kind in (OutcomeKind.CONFIRMED, OutcomeKind.FAILED):
        print(f"Block Number: {outcome.receipt.block_number}")
        print(f"Gas Used:     {outcome.receipt.gas_used}")
        print(f"Status:       {'Success' if outcome.kind == OutcomeKind.CONFIRMED else 'Failed'}")
        print(RULE + "\n")

    if outcome.kind == OutcomeKind.CONFIRMED:
        print("Final Balances:")
        print(f"   Sender:   {client.format_balance(args.sender)} ETH")
        print(f"   Receiver: {client.format_balance(args.receiver)} ETH\n")
        print("Transfer completed successfully!")
    elif outcome.kind == OutcomeKind.FAILED:
        print("Transaction was included but reverted.", file=sys.stderr)
    elif outcome.kind == OutcomeKind.TIMED_OUT:
        print(f"Transaction not confirmed after {outcome.attempts} checks.")
        print("It may still be processing. Check the explorer link above.")
    elif outcome.kind == OutcomeKind.POLL_ERROR:
        print(f"Error checking receipt: {outcome.error.message if outcome.error else 'unknown'}")
        print("Transaction may still be pending. Check the explorer link above.")

    return 0 if outcome.kind in _NON_FATAL_OUTCOMES else 1


def _run_balance(client: TransferClient, args: argparse.Namespace) -> int:
    address = validate_address(args.address)
    balance = client.get_balance(address)
    print(f"Target Address: {address.checksum}\n")
    print(RULE)
    print("Balance Query Results:")
    print(RULE)
    print(f"  Raw Balance (wei): {balance} wei")
    print(f"  Formatted Balance: {format_units(balance, ETHER_DECIMALS)} ETH")
    print(RULE)
    return 0


def _run_gas(client: TransferClient, args: argparse.Namespace) -> int:
    print(client.fees.gas_price_info() + "\n")
    gas_limit = basic_transfer_gas_limit()
    print(f"Gas Limit for Basic Transfer: {gas_limit} units\n")
    fee, breakdown = client.estimated_fee(gas_limit)
    print(RULE)
    print("Gas Fee Estimation Results:")
    print(RULE)
    print(breakdown)
    print(RULE)
    print(f"Raw Gas Fee: {fee} wei")
    print(f"\nGas Fee = Gas Price x Gas Limit (a basic ETH transfer uses {BASIC_TRANSFER_GAS_LIMIT} gas)")
    return 0


def _run_info(client: TransferClient, args: argparse.Namespace) -> int:
    info = client.network_info()
    print(f"RPC URL:      {info['rpc_url']}")
    print(f"Chain ID:     {info['chain_id']}")
    if info["chain_id_matches"]:
        print(f"   Connected to {info['network']}")
    else:
        print(f"   Warning: chain id is not {info['network']} ({info['expected_chain_id']})")
    print(f"Latest block: #{info['block_number']}")
    print(f"Block hash:   {info['block_hash']}")
    print(f"Timestamp:    {info['timestamp']}")
    if info["base_fee"] is not None:
        print(f"Base fee:     {format_units(info['base_fee'], GWEI_DECIMALS)} Gwei")
    return 0


def _run_token(client: TransferClient, args: argparse.Namespace) -> int:
    info = client.token_info(args.contract)
    decimals = int(info["decimals"])
    print(f"Contract:     {info['address']}")
    print(f"Name:         {info['name']}")
    print(f"Symbol:       {info['symbol']}")
    print(f"Decimals:     {decimals}")
    print(f"Total Supply: {format_units(int(info['total_supply']), decimals)} {info['symbol']}")
    return 0


_COMMANDS = {
    "transfer": _run_transfer,
    "balance": _run_balance,
    "gas": _run_gas,
    "info": _run_info,
    "token": _run_token,
}


def main(argv: Optional[List[str]] = None, client_factory: Optional[ClientFactory] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    overrides = {"network": args.network, "rpc_url": args.rpc_url}
    if args.command == "transfer":
        overrides.update(
            poll_interval=args.interval,
            poll_budget=args.budget,
            pre_broadcast_delay=args.grace,
        )

    try:
        config = load_config(args.env_file, **overrides)
        client = (client_factory or TransferClient)(config)
        return _COMMANDS[args.command](client, args)
    except ArbTransferError as e:
        _print_error(e)
        return 1
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
