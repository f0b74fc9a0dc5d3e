"""Runtime configuration loaded from the environment and ``.env``."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # === Wallet ===
    POLYMARKET_PRIVATE_KEY: str = ""
    POLYMARKET_WALLET_ADDRESS: str = ""  # EOA; derived from the key when empty
    POLYMARKET_CHAIN_ID: int = 137

    # === Endpoints ===
    POLYMARKET_CLOB_HTTP: str = "https://clob.polymarket.com"
    POLYMARKET_RELAYER_URL: str = "https://relayer-v2.polymarket.com/"
    POLYGON_RPC_URL: str = ""
    GAMMA_API_URL: str = "https://gamma-api.polymarket.com"
    DATA_API_URL: str = "https://data-api.polymarket.com"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # === Builder signing (relayer) ===
    # Either a remote signing server or local builder creds must be set.
    POLYMARKET_REMOTE_SIGNING_URL: str = ""
    POLYMARKET_REMOTE_SIGNING_TOKEN: str = ""
    POLYMARKET_BUILDER_API_KEY: str = ""
    POLYMARKET_BUILDER_SECRET: str = ""
    POLYMARKET_BUILDER_PASSPHRASE: str = ""

    # === Trading ===
    TOKEN_META_TTL_SECONDS: float = 60.0
    USDC_APPROVAL_THRESHOLD: int = 1_000_000_000_000  # 1M USDC.e (6 decimals)
    AUTO_DEPLOY_SAFE: bool = True

    model_config = {"env_file": ".env"}


settings = Settings()
