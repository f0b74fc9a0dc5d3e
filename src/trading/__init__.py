"""Order construction and session bootstrap.

Heavier modules (``orders``, ``kit``, ``metadata``) are imported directly,
e.g. ``from src.trading.kit import TradingKit``.
"""

from src.trading.models import (
    ApiCredentials,
    ApprovalStatus,
    BestBidAsk,
    CreateOrderResult,
    LimitOrderRequest,
    MarketOrderRequest,
    ProgressEvent,
    TradingSession,
)
from src.trading.clob_errors import classify_error_message, normalize_order_response
from src.trading.ticks import align_price_to_tick

__all__ = [
    "ApiCredentials",
    "ApprovalStatus",
    "BestBidAsk",
    "CreateOrderResult",
    "LimitOrderRequest",
    "MarketOrderRequest",
    "ProgressEvent",
    "TradingSession",
    "classify_error_message",
    "normalize_order_response",
    "align_price_to_tick",
]
