"""REST discovery helpers for Polymarket.

Markets and events come from the Gamma API, positions from the Data API and
batched order-book summaries from the CLOB ``/books`` endpoint.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence
from urllib.parse import quote

import httpx
import structlog

from src.exceptions import DataApiError
from src.utils.parsing import _to_float, parse_json_list

logger = structlog.get_logger()

GAMMA_API = "https://gamma-api.polymarket.com"
DATA_API = "https://data-api.polymarket.com"
CLOB_API = "https://clob.polymarket.com"

EVERGREEN_TAGS = (
    "crypto",
    "politics",
    "sports",
    "technology",
    "business",
    "entertainment",
    "science",
    "ai",
    "pop-culture",
)

POSITION_SORT_FIELDS = (
    "CURRENT", "INITIAL", "TOKENS", "CASHPNL", "PERCENTPNL",
    "TITLE", "RESOLVING", "PRICE", "AVGPRICE",
)

_MIN_LIQUIDITY = 1000.0
_MIN_LIQUIDITY_UNTAGGED = 5000.0


def _has_ended_event(market: dict[str, Any]) -> bool:
    for event in market.get("events") or []:
        if event.get("ended") is True or event.get("live") is False or event.get("finishedTimestamp"):
            return True
    return False


def _has_tradeable_price(market: dict[str, Any]) -> bool:
    raw = market.get("outcomePrices")
    if not raw:
        return True
    prices = parse_json_list(raw)
    if not prices:
        return False
    return any(0.05 <= _to_float(p, default=-1.0) <= 0.95 for p in prices)


def is_tradeable_market(market: dict[str, Any]) -> bool:
    """Open, order-accepting market with a mid-range price and enough liquidity."""
    if _has_ended_event(market):
        return False
    if market.get("acceptingOrders") is False:
        return False
    if not market.get("clobTokenIds"):
        return False
    if not _has_tradeable_price(market):
        return False

    tags = {str(t.get("slug", "")).lower() for t in market.get("tags") or [] if isinstance(t, dict)}
    liquidity = _to_float(market.get("liquidity"), default=0.0)
    if not tags.intersection(EVERGREEN_TAGS) and liquidity < _MIN_LIQUIDITY_UNTAGGED:
        return False
    return liquidity >= _MIN_LIQUIDITY


def _activity_score(market: dict[str, Any]) -> float:
    return _to_float(market.get("liquidity"), 0.0) + _to_float(market.get("volume"), 0.0)


class PolymarketDataClient:
    """Async client for market/event/position discovery."""

    def __init__(
        self,
        *,
        gamma_url: str = GAMMA_API,
        data_url: str = DATA_API,
        clob_url: str = CLOB_API,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._gamma_url = gamma_url.rstrip("/")
        self._data_url = data_url.rstrip("/")
        self._clob_url = clob_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls) -> "PolymarketDataClient":
        from config.settings import settings
        return cls(
            gamma_url=settings.GAMMA_API_URL,
            data_url=settings.DATA_API_URL,
            clob_url=settings.POLYMARKET_CLOB_HTTP,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, *, api: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DataApiError(f"{api} API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DataApiError(f"{api} API request failed: {e}") from e
        return resp.json()

    async def _get_object(self, url: str, *, api: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        body = await self._request("GET", url, api=api, params=params)
        if not isinstance(body, dict):
            raise DataApiError(f"Invalid {api} API response")
        return body

    async def _get_list(self, url: str, *, api: str, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        body = await self._request("GET", url, api=api, params=params)
        if not isinstance(body, list):
            raise DataApiError(f"Invalid {api} API response")
        return body

    async def list_high_volume_markets(self, limit: int) -> list[dict[str, Any]]:
        """Top ``limit`` tradeable active markets by liquidity + volume."""
        limit = max(0, int(limit))
        params = {
            "limit": max(1, limit) * 5,
            "offset": 0,
            "active": "true",
            "closed": "false",
            "order": "volume24hr",
            "ascending": "false",
        }
        markets = await self._get_list(f"{self._gamma_url}/markets", api="Gamma", params=params)
        valid = [m for m in markets if isinstance(m, dict) and is_tradeable_market(m)]
        valid.sort(key=_activity_score, reverse=True)
        logger.debug("high_volume_markets", fetched=len(markets), valid=len(valid))
        return valid[:limit]

    async def get_market_by_token_id(self, token_id: str) -> dict[str, Any]:
        params = {"limit": 100, "offset": 0, "active": "true", "closed": "false"}
        markets = await self._get_list(f"{self._gamma_url}/markets", api="Gamma", params=params)
        for market in markets:
            if isinstance(market, dict) and token_id in parse_json_list(market.get("clobTokenIds")):
                return market
        raise DataApiError("Market not found")

    async def get_market_by_slug(self, slug: str, include_tag: Optional[bool] = None) -> dict[str, Any]:
        slug = str(slug).strip()
        if not slug:
            raise ValueError("slug is required")
        params: dict[str, Any] = {}
        if include_tag is not None:
            params["include_tag"] = str(include_tag).lower()
        return await self._get_object(
            f"{self._gamma_url}/markets/slug/{quote(slug, safe='')}", api="Gamma", params=params or None
        )

    async def get_event_by_slug(
        self,
        slug: str,
        include_chat: Optional[bool] = None,
        include_template: Optional[bool] = None,
    ) -> dict[str, Any]:
        slug = str(slug).strip()
        if not slug:
            raise ValueError("slug is required")
        params: dict[str, Any] = {}
        if include_chat is not None:
            params["include_chat"] = str(include_chat).lower()
        if include_template is not None:
            params["include_template"] = str(include_template).lower()
        return await self._get_object(
            f"{self._gamma_url}/events/slug/{quote(slug, safe='')}", api="Gamma", params=params or None
        )

    async def get_positions(
        self,
        user: str,
        *,
        market: Optional[Sequence[str]] = None,
        event_id: Optional[Sequence[int]] = None,
        size_threshold: float = 1,
        redeemable: bool = False,
        mergeable: bool = False,
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "TOKENS",
        sort_direction: str = "DESC",
        title: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Positions held by ``user``; ``market`` and ``event_id`` are exclusive."""
        user = str(user).strip()
        if not user:
            raise ValueError("user is required")
        if market and event_id:
            raise ValueError("market and event_id are mutually exclusive")
        if sort_by not in POSITION_SORT_FIELDS:
            raise ValueError(f"Invalid sort_by: {sort_by}")
        if sort_direction not in ("ASC", "DESC"):
            raise ValueError(f"Invalid sort_direction: {sort_direction}")

        params: dict[str, Any] = {"user": user}
        if market:
            params["market"] = ",".join(str(m).strip() for m in market if str(m).strip())
        if event_id:
            params["eventId"] = ",".join(str(int(e)) for e in event_id)
        params.update(
            sizeThreshold=size_threshold,
            redeemable=str(redeemable).lower(),
            mergeable=str(mergeable).lower(),
            limit=limit,
            offset=offset,
            sortBy=sort_by,
            sortDirection=sort_direction,
        )
        if title is not None:
            params["title"] = title
        return await self._get_list(f"{self._data_url}/positions", api="Data", params=params)

    async def get_order_book_summaries(self, token_ids: Sequence[str]) -> list[dict[str, Any]]:
        """Batch order books for unique, non-empty ``token_ids``."""
        unique = list(dict.fromkeys(t for t in (str(t).strip() for t in token_ids) if t))
        if not unique:
            return []
        body = await self._request(
            "POST",
            f"{self._clob_url}/books",
            api="CLOB",
            json=[{"token_id": t} for t in unique],
        )
        if not isinstance(body, list):
            raise DataApiError("Invalid CLOB API response")
        return body
