"""Time-bounded cache of per-token tick size and neg-risk flag."""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Optional

import structlog

from src.trading.models import TICK_SIZES, ResolvedMeta, TokenMeta
from src.utils.parsing import _get_field

logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 60.0

OrderBookLookup = Callable[[str], Awaitable[Any]]


def _extract_tick_size(book: Any) -> Optional[str]:
    value = _get_field(book, "tick_size")
    if value is None:
        value = _get_field(book, "tickSize")
    if value is None:
        return None
    text = str(value).strip()
    if text in TICK_SIZES:
        return text
    try:
        text = format(float(text), "f").rstrip("0")
    except ValueError:
        return None
    return text if text in TICK_SIZES else None


def _extract_neg_risk(book: Any) -> Optional[bool]:
    value = _get_field(book, "neg_risk")
    if value is None:
        value = _get_field(book, "negRisk")
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return None


class TokenMetaCache:
    """Caches order-book metadata for ``ttl_seconds``.

    Entries are never evicted; a stale entry only triggers a refresh. There is
    no lock: concurrent misses on one token may both hit the order book and
    the last write wins.
    """

    def __init__(
        self,
        lookup: OrderBookLookup,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._lookup = lookup
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, TokenMeta] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, token_id: str) -> Optional[TokenMeta]:
        return self._entries.get(token_id)

    def _fresh(self, token_id: str) -> Optional[TokenMeta]:
        entry = self._entries.get(token_id)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at > self._ttl:
            return None
        return entry

    async def resolve(
        self,
        token_id: str,
        *,
        mode: str = "auto",
        tick_size: Optional[str] = None,
        neg_risk: Optional[bool] = None,
        needs_tick: bool = False,
        needs_neg_risk: bool = False,
    ) -> ResolvedMeta:
        """Resolve tick size / neg-risk, preferring caller overrides.

        Performs at most one order-book lookup, and only in ``auto`` mode when
        a needed field is neither overridden nor freshly cached.
        """
        overrides = ResolvedMeta(tick_size=tick_size, neg_risk=neg_risk)
        if mode == "manual":
            return overrides

        missing_tick = needs_tick and tick_size is None
        missing_neg_risk = needs_neg_risk and neg_risk is None
        if not (missing_tick or missing_neg_risk):
            return overrides

        cached = self._fresh(token_id)
        if cached is not None:
            return ResolvedMeta(
                tick_size=tick_size if tick_size is not None else cached.tick_size,
                neg_risk=neg_risk if neg_risk is not None else cached.neg_risk,
            )

        try:
            book = await self._lookup(token_id)
        except Exception as e:
            logger.warning("token_meta_lookup_failed", token_id=token_id[:16], error=str(e))
            return overrides

        fetched_tick = _extract_tick_size(book)
        fetched_neg_risk = _extract_neg_risk(book)
        if fetched_tick is not None and fetched_neg_risk is not None:
            self._entries[token_id] = TokenMeta(
                tick_size=fetched_tick,
                neg_risk=fetched_neg_risk,
                fetched_at=self._clock(),
            )
            logger.debug(
                "token_meta_cached",
                token_id=token_id[:16],
                tick_size=fetched_tick,
                neg_risk=fetched_neg_risk,
            )

        return ResolvedMeta(
            tick_size=tick_size if tick_size is not None else fetched_tick,
            neg_risk=neg_risk if neg_risk is not None else fetched_neg_risk,
        )
