"""Credential and configuration validators."""

from src.exceptions import ConfigError


def validate_trading_config() -> None:
    """Raise ConfigError if anything the trading session needs is missing."""
    from config.settings import settings
    if not settings.POLYGON_RPC_URL:
        raise ConfigError("POLYGON_RPC_URL is required")
    if not settings.POLYMARKET_PRIVATE_KEY:
        raise ConfigError("POLYMARKET_PRIVATE_KEY is required")
    if not (settings.POLYMARKET_REMOTE_SIGNING_URL or settings.POLYMARKET_BUILDER_API_KEY):
        raise ConfigError(
            "POLYMARKET_REMOTE_SIGNING_URL or POLYMARKET_BUILDER_API_KEY is required"
        )


def validate_builder_creds() -> None:
    """Raise ConfigError if local builder credentials are incomplete."""
    from config.settings import settings
    if settings.POLYMARKET_REMOTE_SIGNING_URL:
        return
    if not settings.POLYMARKET_BUILDER_SECRET:
        raise ConfigError("POLYMARKET_BUILDER_SECRET is required")
    if not settings.POLYMARKET_BUILDER_PASSPHRASE:
        raise ConfigError("POLYMARKET_BUILDER_PASSPHRASE is required")
