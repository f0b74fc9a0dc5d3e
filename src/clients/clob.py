"""Async CLOB client backed by py-clob-client."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import structlog

from src.exceptions import MissingDependencyError
from src.trading.models import ApiCredentials

logger = structlog.get_logger()

try:
    from py_clob_client.client import ClobClient
    from py_clob_client.clob_types import (
        ApiCreds,
        MarketOrderArgs,
        OrderArgs,
        OrderType,
        PartialCreateOrderOptions,
    )
except ImportError:  # pragma: no cover - optional dependency in runtime
    ClobClient = None
    ApiCreds = None
    MarketOrderArgs = None
    OrderArgs = None
    OrderType = None
    PartialCreateOrderOptions = None

SIGNATURE_TYPE_SAFE = 2  # POLY_GNOSIS_SAFE: EOA signs for its Safe


class ClobNetworkClient:
    """Moves the blocking py-clob-client calls onto worker threads."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def create(
        cls,
        host: str,
        chain_id: int,
        private_key: str,
        api_credentials: Optional[ApiCredentials] = None,
        funder: Optional[str] = None,
    ) -> "ClobNetworkClient":
        """Build a client; without credentials it can only derive/create keys and read."""
        if ClobClient is None:
            raise MissingDependencyError("py_clob_client is not installed")

        kwargs: dict[str, Any] = {"host": host, "chain_id": chain_id, "key": private_key}
        if api_credentials is not None:
            kwargs["creds"] = ApiCreds(
                api_key=api_credentials.key,
                api_secret=api_credentials.secret,
                api_passphrase=api_credentials.passphrase,
            )
        if funder:
            kwargs["signature_type"] = SIGNATURE_TYPE_SAFE
            kwargs["funder"] = funder
        return cls(ClobClient(**kwargs))

    @staticmethod
    def _to_credentials(creds: Any) -> Optional[ApiCredentials]:
        if creds is None:
            return None
        return ApiCredentials(
            key=getattr(creds, "api_key", "") or "",
            secret=getattr(creds, "api_secret", "") or "",
            passphrase=getattr(creds, "api_passphrase", "") or "",
        )

    @staticmethod
    def _options(options: dict[str, Any]) -> Any:
        if not options:
            return None
        return PartialCreateOrderOptions(
            tick_size=options.get("tick_size"),
            neg_risk=options.get("neg_risk"),
        )

    async def get_order_book(self, token_id: str) -> Any:
        return await asyncio.to_thread(self._client.get_order_book, token_id)

    async def get_price(self, token_id: str, side: str) -> dict[str, Any]:
        return await asyncio.to_thread(self._client.get_price, token_id, side)

    def _post_sync(self, signed: Any, order_type: str, defer_exec: bool) -> Any:
        if defer_exec:
            logger.warning("defer_exec_not_supported", client="py_clob_client")
        return self._client.post_order(signed, orderType=getattr(OrderType, order_type))

    def _create_and_post_order_sync(
        self, order: dict[str, Any], options: dict[str, Any], order_type: str, defer_exec: bool
    ) -> Any:
        args = OrderArgs(
            token_id=order["token_id"],
            price=order["price"],
            size=order["size"],
            side=order["side"],
            fee_rate_bps=order.get("fee_rate_bps", 0),
            expiration=order.get("expiration", 0),
            taker=order["taker"],
        )
        signed = self._client.create_order(args, self._options(options))
        return self._post_sync(signed, order_type, defer_exec)

    async def create_and_post_order(
        self,
        order: dict[str, Any],
        options: dict[str, Any],
        order_type: str,
        defer_exec: bool = False,
    ) -> Any:
        return await asyncio.to_thread(
            self._create_and_post_order_sync, order, options, order_type, defer_exec
        )

    def _create_and_post_market_order_sync(
        self, order: dict[str, Any], options: dict[str, Any], order_type: str, defer_exec: bool
    ) -> Any:
        args = MarketOrderArgs(
            token_id=order["token_id"],
            amount=order["amount"],
            side=order["side"],
            price=order.get("price", 0),
            fee_rate_bps=order.get("fee_rate_bps", 0),
            order_type=getattr(OrderType, order_type),
        )
        signed = self._client.create_market_order(args, self._options(options))
        return self._post_sync(signed, order_type, defer_exec)

    async def create_and_post_market_order(
        self,
        order: dict[str, Any],
        options: dict[str, Any],
        order_type: str,
        defer_exec: bool = False,
    ) -> Any:
        return await asyncio.to_thread(
            self._create_and_post_market_order_sync, order, options, order_type, defer_exec
        )

    async def cancel_order(self, order_id: str) -> Any:
        return await asyncio.to_thread(self._client.cancel, order_id)

    async def get_open_orders(self) -> list[dict[str, Any]]:
        orders = await asyncio.to_thread(self._client.get_orders)
        return orders if isinstance(orders, list) else []

    async def derive_api_key(self) -> Optional[ApiCredentials]:
        return self._to_credentials(await asyncio.to_thread(self._client.derive_api_key))

    async def create_api_key(self) -> ApiCredentials:
        creds = self._to_credentials(await asyncio.to_thread(self._client.create_api_key))
        if creds is None:
            raise RuntimeError("CLOB returned no API credentials")
        return creds
