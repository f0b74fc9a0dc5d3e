#!/usr/bin/env python3
"""Bootstrap a Polymarket trading session for the configured wallet.

Derives the Safe, deploys it if needed, obtains CLOB API credentials and sets
token approvals. Prints the Safe address and API key when done.

Usage:
    PYTHONPATH=. python scripts/init_session.py
    PYTHONPATH=. python scripts/init_session.py --no-deploy
"""

import argparse
import asyncio

import structlog
from dotenv import load_dotenv

from src.utils.logging import configure_logging

load_dotenv()
configure_logging()

from config.settings import settings
from src.exceptions import PolyError
from src.trading.kit import TradingKit
from src.trading.models import ProgressEvent

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bootstrap a Polymarket trading session")
    parser.add_argument(
        "--no-deploy", action="store_true",
        help="Fail instead of deploying the Safe when it has no bytecode",
    )
    return parser


def print_progress(event: ProgressEvent) -> None:
    print(f"[{event.step}] {event.message}")


async def main() -> int:
    args = build_parser().parse_args()
    auto_deploy = settings.AUTO_DEPLOY_SAFE and not args.no_deploy

    try:
        kit = TradingKit.from_settings()
        session = await kit.initialize_trading_session(
            on_progress=print_progress, auto_deploy_safe=auto_deploy,
        )
    except PolyError as exc:
        logger.error("session_init_failed", error=str(exc))
        return 1

    print(f"\nEOA:   {session.eoa_address}")
    print(f"Safe:  {session.safe_address}")
    print(f"API key: {session.api_credentials.key}")
    print(f"All approvals set: {session.approvals.all_approved}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
