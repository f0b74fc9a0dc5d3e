import pytest

from config.settings import Settings, settings
from config.validators import validate_builder_creds, validate_trading_config
from src.exceptions import ConfigError


def test_settings_defaults():
    s = Settings(_env_file=None)
    assert s.POLYMARKET_CHAIN_ID == 137
    assert s.POLYMARKET_CLOB_HTTP == "https://clob.polymarket.com"
    assert s.POLYMARKET_RELAYER_URL == "https://relayer-v2.polymarket.com/"
    assert s.TOKEN_META_TTL_SECONDS == 60.0
    assert s.USDC_APPROVAL_THRESHOLD == 1_000_000_000_000
    assert s.AUTO_DEPLOY_SAFE is True


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("POLYMARKET_CHAIN_ID", "80002")
    monkeypatch.setenv("AUTO_DEPLOY_SAFE", "false")
    s = Settings(_env_file=None)
    assert s.POLYMARKET_CHAIN_ID == 80002
    assert s.AUTO_DEPLOY_SAFE is False


@pytest.fixture
def trading_env(monkeypatch):
    monkeypatch.setattr(settings, "POLYGON_RPC_URL", "https://polygon.example/rpc")
    monkeypatch.setattr(settings, "POLYMARKET_PRIVATE_KEY", "0x" + "11" * 32)
    monkeypatch.setattr(settings, "POLYMARKET_REMOTE_SIGNING_URL", "")
    monkeypatch.setattr(settings, "POLYMARKET_BUILDER_API_KEY", "builder-key")
    monkeypatch.setattr(settings, "POLYMARKET_BUILDER_SECRET", "builder-secret")
    monkeypatch.setattr(settings, "POLYMARKET_BUILDER_PASSPHRASE", "builder-pass")
    return monkeypatch


def test_trading_config_valid(trading_env):
    validate_trading_config()
    validate_builder_creds()


@pytest.mark.parametrize("key", ["POLYGON_RPC_URL", "POLYMARKET_PRIVATE_KEY", "POLYMARKET_BUILDER_API_KEY"])
def test_trading_config_missing_key(trading_env, key):
    trading_env.setattr(settings, key, "")
    with pytest.raises(ConfigError):
        validate_trading_config()


def test_remote_signer_replaces_builder_creds(trading_env):
    trading_env.setattr(settings, "POLYMARKET_BUILDER_API_KEY", "")
    trading_env.setattr(settings, "POLYMARKET_BUILDER_SECRET", "")
    trading_env.setattr(settings, "POLYMARKET_REMOTE_SIGNING_URL", "https://signer.example")
    validate_trading_config()
    validate_builder_creds()


def test_builder_creds_require_secret(trading_env):
    trading_env.setattr(settings, "POLYMARKET_BUILDER_SECRET", "")
    with pytest.raises(ConfigError, match="POLYMARKET_BUILDER_SECRET"):
        validate_builder_creds()
