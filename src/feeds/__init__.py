from .gamma_api import PolymarketDataClient, is_tradeable_market

__all__ = [
    "PolymarketDataClient",
    "is_tradeable_market",
]
