#!/usr/bin/env python3
"""Place a single order through a freshly bootstrapped session.

Usage:
    PYTHONPATH=. python scripts/place_order.py limit TOKEN BUY --size 10 --price 0.42 --tick round
    PYTHONPATH=. python scripts/place_order.py market TOKEN BUY --amount 5
    PYTHONPATH=. python scripts/place_order.py market TOKEN SELL --amount 10 --order-type FAK
"""

import argparse
import asyncio

import structlog
from dotenv import load_dotenv

from src.utils.logging import configure_logging

load_dotenv()
configure_logging()

from src.exceptions import PolyError
from src.trading.kit import TradingKit
from src.trading.models import LimitOrderRequest, MarketOrderRequest

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Place a Polymarket CLOB order")
    parser.add_argument("kind", choices=["limit", "aggressive", "market"])
    parser.add_argument("token_id")
    parser.add_argument("side", choices=["BUY", "SELL"])
    parser.add_argument("--size", type=float, default=0.0, help="Shares (limit orders)")
    parser.add_argument("--price", type=float, default=None)
    parser.add_argument(
        "--amount", type=float, default=0.0,
        help="USDC for BUY, shares for SELL (market orders)",
    )
    parser.add_argument("--order-type", choices=["FOK", "FAK"], default="FOK")
    parser.add_argument("--tick", choices=["none", "validate", "round"], default="none")
    parser.add_argument("--rounding", choices=["nearest", "down", "up"], default="nearest")
    parser.add_argument("--gtd", type=int, default=None, help="Expiration (unix seconds) for GTD")
    return parser


async def main() -> int:
    args = build_parser().parse_args()

    try:
        kit = TradingKit.from_settings()
        session = await kit.initialize_trading_session(auto_deploy_safe=False)
    except PolyError as exc:
        logger.error("session_init_failed", error=str(exc))
        return 1

    builder = kit.create_order_builder(
        kit.create_clob_client(session.api_credentials, session.safe_address)
    )

    if args.kind == "market":
        result = await builder.create_market_order(MarketOrderRequest(
            token_id=args.token_id,
            side=args.side,
            amount_usdc=args.amount if args.side == "BUY" else None,
            amount_shares=args.amount if args.side == "SELL" else None,
            price=args.price,
            order_type=args.order_type,
            tick_size_mode=args.tick,
            tick_rounding=args.rounding,
        ))
    else:
        result = await builder.create_limit_order(LimitOrderRequest(
            token_id=args.token_id,
            size=args.size,
            side=args.side,
            price=args.price,
            is_market_order=args.kind == "aggressive",
            time_in_force="GTD" if args.gtd else "GTC",
            expiration_unix_seconds=args.gtd,
            tick_size_mode=args.tick,
            tick_rounding=args.rounding,
        ))

    if result.success:
        print(f"Order {result.order_id} accepted (status={result.status})")
        return 0
    print(f"Order rejected: {result.error_code} - {result.error_msg}")
    return 2


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
