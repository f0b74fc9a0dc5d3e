"""Limit and market order construction on top of a CLOB client."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

import structlog

from src.chain.contracts import ZERO_ADDRESS
from src.exceptions import ExecutionError
from src.trading.clob_errors import normalize_order_response, result_from_exception
from src.trading.metadata import TokenMetaCache
from src.trading.models import (
    SIDES,
    BestBidAsk,
    CreateOrderResult,
    LimitOrderRequest,
    MarketOrderRequest,
    ResolvedMeta,
)
from src.trading.protocols import NetworkOrderClient
from src.trading.ticks import TICK_TOLERANCE, align_price_to_tick
from src.utils.parsing import _get_field, parse_probability

logger = structlog.get_logger()

AGGRESSIVE_BUY_CAP = 0.99
AGGRESSIVE_SELL_FLOOR = 0.01
AGGRESSIVE_BUY_MARKUP = 1.05
AGGRESSIVE_SELL_MARKDOWN = 0.95


def aggressive_price(side: str, market_price: Optional[float]) -> float:
    """Price a pseudo market order beyond the current best price."""
    if side == "BUY":
        if market_price is None:
            return AGGRESSIVE_BUY_CAP
        return min(AGGRESSIVE_BUY_CAP, market_price * AGGRESSIVE_BUY_MARKUP)
    if market_price is None:
        return AGGRESSIVE_SELL_FLOOR
    return max(AGGRESSIVE_SELL_FLOOR, market_price * AGGRESSIVE_SELL_MARKDOWN)


class _TickError(Exception):
    """Price cannot be made tick-compliant; carries the failure message."""


def _apply_tick(
    price: float,
    tick_size: Optional[str],
    tick_size_mode: str,
    tick_rounding: str,
) -> float:
    if tick_size_mode == "none":
        return price
    if tick_size is None:
        raise _TickError("Tick size is unavailable for tick validation")
    aligned = align_price_to_tick(price, tick_size, tick_rounding)
    if tick_size_mode == "validate" and abs(aligned - price) > TICK_TOLERANCE:
        raise _TickError(f"Price {price} breaks minimum tick size {tick_size}")
    return aligned


def _meta_options(meta: ResolvedMeta) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if meta.tick_size is not None:
        options["tick_size"] = meta.tick_size
    if meta.neg_risk is not None:
        options["neg_risk"] = meta.neg_risk
    return options


class OrderBuilder:
    """Builds, submits and normalises orders for one CLOB client."""

    def __init__(self, client: NetworkOrderClient, meta_cache: Optional[TokenMetaCache] = None) -> None:
        self._client = client
        self.meta_cache = meta_cache or TokenMetaCache(client.get_order_book)

    async def _market_price(self, token_id: str, side: str) -> Optional[float]:
        try:
            res = await self._client.get_price(token_id, side)
        except Exception as e:
            logger.warning("market_price_failed", token_id=token_id[:16], side=side, error=str(e))
            return None
        price = parse_probability(_get_field(res, "price"))
        if price is None:
            logger.warning("market_price_invalid", token_id=token_id[:16], side=side, raw=res)
        return price

    async def _submit(
        self,
        coro_factory: Callable[[], Awaitable[Any]],
        *,
        kind: str,
        token_id: str,
    ) -> CreateOrderResult:
        try:
            raw = await coro_factory()
        except Exception as e:
            result = result_from_exception(e)
            logger.error(
                "order_submit_failed",
                kind=kind,
                token_id=token_id[:16],
                error_code=result.error_code,
                error=result.error_msg,
            )
            return result

        result = normalize_order_response(raw)
        if result.success and not result.order_id:
            result = CreateOrderResult.failure("UNKNOWN", "Order submission returned no order id", raw=raw)

        if result.success:
            logger.info(
                "order_posted",
                kind=kind,
                token_id=token_id[:16],
                order_id=result.order_id,
                status=result.status,
            )
        else:
            logger.warning(
                "order_rejected",
                kind=kind,
                token_id=token_id[:16],
                error_code=result.error_code,
                error=result.error_msg,
            )
        return result

    async def create_limit_order(self, req: LimitOrderRequest) -> CreateOrderResult:
        """Submit a GTC/GTD limit order, or an aggressive limit if ``is_market_order``.

        An aggressive order prices itself from the current market, so its
        computed price is always snapped to the tick: ``validate`` behaves as
        ``round`` there and never rejects.
        """
        if req.side not in SIDES:
            return CreateOrderResult.failure("INVALID_ORDER_ERROR", f"Invalid side: {req.side}")

        time_in_force = req.time_in_force or "GTC"
        if time_in_force == "GTD" and not req.expiration_unix_seconds:
            return CreateOrderResult.failure(
                "INVALID_ORDER_EXPIRATION", "expiration_unix_seconds is required for GTD orders"
            )
        if not req.is_market_order and req.price is None:
            return CreateOrderResult.failure("INVALID_ORDER_ERROR", "price is required for limit orders")

        meta = await self.meta_cache.resolve(
            req.token_id,
            mode=req.mode,
            tick_size=req.tick_size,
            neg_risk=req.neg_risk,
            needs_tick=req.tick_size_mode != "none",
            needs_neg_risk=req.neg_risk is None,
        )

        if req.is_market_order:
            price = aggressive_price(req.side, await self._market_price(req.token_id, req.side))
            # A computed price is snapped, never rejected.
            tick_mode = "round" if req.tick_size_mode == "validate" else req.tick_size_mode
        else:
            price = req.price
            tick_mode = req.tick_size_mode

        try:
            price = _apply_tick(price, meta.tick_size, tick_mode, req.tick_rounding)
        except _TickError as e:
            return CreateOrderResult.failure("INVALID_ORDER_MIN_TICK_SIZE", str(e))

        order = {
            "token_id": req.token_id,
            "price": price,
            "size": req.size,
            "side": req.side,
            "fee_rate_bps": 0,
            "expiration": req.expiration_unix_seconds if time_in_force == "GTD" else 0,
            "taker": ZERO_ADDRESS,
        }
        options = _meta_options(meta)

        return await self._submit(
            lambda: self._client.create_and_post_order(
                order, options, time_in_force, req.defer_exec
            ),
            kind="aggressive_limit" if req.is_market_order else "limit",
            token_id=req.token_id,
        )

    async def create_market_order(self, req: MarketOrderRequest) -> CreateOrderResult:
        """Submit a FOK/FAK market order sized in USDC (BUY) or shares (SELL)."""
        if req.side not in SIDES:
            return CreateOrderResult.failure("INVALID_ORDER_ERROR", f"Invalid side: {req.side}")

        if req.side == "BUY":
            amount = req.amount_usdc
            if amount is None or amount <= 0:
                return CreateOrderResult.failure(
                    "INVALID_ORDER_ERROR", "amount_usdc must be positive for BUY market orders"
                )
        else:
            amount = req.amount_shares
            if amount is None or amount <= 0:
                return CreateOrderResult.failure(
                    "INVALID_ORDER_ERROR", "amount_shares must be positive for SELL market orders"
                )

        order_type = req.order_type or "FOK"
        if order_type not in ("FOK", "FAK"):
            return CreateOrderResult.failure("INVALID_ORDER_ERROR", f"Invalid market order type: {order_type}")

        meta = await self.meta_cache.resolve(
            req.token_id,
            mode=req.mode,
            tick_size=req.tick_size,
            neg_risk=req.neg_risk,
            needs_tick=req.price is not None and req.tick_size_mode != "none",
            needs_neg_risk=req.neg_risk is None,
        )

        order: dict[str, Any] = {
            "token_id": req.token_id,
            "amount": amount,
            "side": req.side,
            "fee_rate_bps": 0,
        }
        if req.price is not None:
            try:
                order["price"] = _apply_tick(
                    req.price, meta.tick_size, req.tick_size_mode, req.tick_rounding
                )
            except _TickError as e:
                return CreateOrderResult.failure("INVALID_ORDER_MIN_TICK_SIZE", str(e))

        options = _meta_options(meta)

        return await self._submit(
            lambda: self._client.create_and_post_market_order(
                order, options, order_type, req.defer_exec
            ),
            kind="market",
            token_id=req.token_id,
        )

    async def cancel_order(self, order_id: str) -> Any:
        return await self._client.cancel_order(order_id)

    async def get_open_orders(self) -> list[dict[str, Any]]:
        return await self._client.get_open_orders()

    async def get_best_bid_ask(self, token_id: str) -> BestBidAsk:
        """Fetch best bid (BUY side) and best ask (SELL side) concurrently."""
        bid_res, ask_res = await asyncio.gather(
            self._client.get_price(token_id, "BUY"),
            self._client.get_price(token_id, "SELL"),
        )
        bid = parse_probability(_get_field(bid_res, "price"))
        ask = parse_probability(_get_field(ask_res, "price"))
        if bid is None or ask is None:
            raise ExecutionError("Invalid prices")
        return BestBidAsk(
            bid_price=bid,
            ask_price=ask,
            mid_price=(bid + ask) / 2,
            spread=ask - bid,
        )
