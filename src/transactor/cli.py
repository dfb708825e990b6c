"""
Command-line interface for the transactor.

Provides read-only node queries and a command to wait for a transaction
to be mined.
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Optional

import structlog

from transactor import __version__
from transactor.config import TransactorConfig, set_config
from transactor.core.transactor import Transactor
from transactor.errors import TransactorError


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def non_negative_int(value: str) -> int:
    """Argument type for sizes and counts."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="weave-transactor",
        description="Query a weave node and track transactions",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--node",
        default=None,
        help="Node address (default: TRANSACTOR_NODE_URL or the local node)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("info", help="Show network information")
    subparsers.add_parser("anchor", help="Fetch a fresh transaction anchor")

    price_parser = subparsers.add_parser("price", help="Estimate the fee for a transaction")
    price_parser.add_argument(
        "--size",
        type=non_negative_int,
        default=0,
        help="Payload size in bytes (default: 0)",
    )
    price_parser.add_argument(
        "--target",
        default="",
        help="Recipient address",
    )

    status_parser = subparsers.add_parser("status", help="Look up a transaction once")
    status_parser.add_argument("tx_id", help="Transaction id")

    wait_parser = subparsers.add_parser("wait", help="Wait for a transaction to be mined")
    wait_parser.add_argument("tx_id", help="Transaction id")
    wait_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait before giving up (default: wait forever)",
    )

    return parser


def build_config(args: argparse.Namespace) -> TransactorConfig:
    """Create the configuration from environment and command-line overrides."""
    overrides = {
        "log_level": args.log_level,
        "log_json": args.log_json,
    }
    if args.node is not None:
        overrides["node_url"] = args.node

    config = TransactorConfig(**overrides)
    set_config(config)
    return config


async def run_command(
    args: argparse.Namespace,
    config: TransactorConfig,
    transport: Optional[Any] = None,
) -> None:
    """Connect to the node and run one command."""
    async with await Transactor.dial(config=config, transport=transport) as transactor:
        client = transactor.client

        if args.command == "info":
            info = await client.get_info()
            print(f"Network:  {info.network}")
            print(f"Height:   {info.height}")
            print(f"Current:  {info.current}")
            print(f"Peers:    {info.peers}")
            print(f"Queue:    {info.queue_length}")
        elif args.command == "anchor":
            print(await client.tx_anchor())
        elif args.command == "price":
            print(await client.get_price(args.size, args.target))
        elif args.command == "status":
            tx = await client.get_transaction(args.tx_id)
            print("mined" if tx is not None else "not mined")
        elif args.command == "wait":
            tx = await transactor.wait_mined_by_id(args.tx_id, timeout=args.timeout)
            print(f"Transaction {tx.id} mined")


def main(argv: Optional[list] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level, args.log_json)
    config = build_config(args)

    try:
        asyncio.run(run_command(args, config))
    except TransactorError as e:
        kind = e.kind.value if e.kind is not None else "error"
        print(f"Error ({kind}): {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
