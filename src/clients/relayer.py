"""Async wrapper around the Polymarket Builder Relayer (gas-free Safe txs)."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import structlog

from src.chain.transactions import SafeTransaction
from src.exceptions import MissingDependencyError

logger = structlog.get_logger()

try:
    from py_builder_relayer_client.client import RelayClient
    from py_builder_relayer_client.models import (
        OperationType as RelayerOperationType,
        SafeTransaction as RelayerSafeTransaction,
    )
    from py_builder_signing_sdk.config import BuilderConfig
    from py_builder_signing_sdk.sdk_types import BuilderApiKeyCreds
except ImportError:
    RelayClient = None  # type: ignore[assignment,misc]
    RelayerOperationType = None  # type: ignore[assignment,misc]
    RelayerSafeTransaction = None  # type: ignore[assignment,misc]
    BuilderConfig = None  # type: ignore[assignment,misc]
    BuilderApiKeyCreds = None  # type: ignore[assignment,misc]

try:
    from py_builder_signing_sdk.config import RemoteBuilderConfig
except ImportError:
    RemoteBuilderConfig = None  # type: ignore[assignment,misc]


class _ThreadedResponse:
    """Relayer acknowledgement whose ``wait`` runs off the event loop."""

    def __init__(self, response: Any) -> None:
        self._response = response

    async def wait(self) -> Any:
        return await asyncio.to_thread(self._response.wait)


def build_builder_config(
    remote_url: str = "",
    remote_token: str = "",
    api_key: str = "",
    secret: str = "",
    passphrase: str = "",
) -> Any:
    """Builder signing config: remote signer when a URL is given, else local creds."""
    if BuilderConfig is None:
        raise MissingDependencyError("py-builder-signing-sdk is not installed")
    if remote_url:
        if RemoteBuilderConfig is None:
            raise MissingDependencyError("py-builder-signing-sdk has no remote signing support")
        remote_kwargs: dict[str, Any] = {"url": remote_url}
        if remote_token:
            remote_kwargs["token"] = remote_token
        return BuilderConfig(remote_builder_config=RemoteBuilderConfig(**remote_kwargs))
    return BuilderConfig(
        local_builder_creds=BuilderApiKeyCreds(key=api_key, secret=secret, passphrase=passphrase)
    )


class BuilderRelayClient:
    """Executes Safe transactions and deploys the Safe through the relayer."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def create(
        cls,
        relayer_url: str,
        chain_id: int,
        private_key: str,
        builder_config: Any,
    ) -> "BuilderRelayClient":
        if RelayClient is None:
            raise MissingDependencyError("py-builder-relayer-client is not installed")
        return cls(
            RelayClient(
                relayer_url=relayer_url,
                chain_id=chain_id,
                private_key=private_key,
                builder_config=builder_config,
            )
        )

    @classmethod
    def from_settings(cls) -> "BuilderRelayClient":
        from config.settings import settings
        from config.validators import validate_builder_creds
        validate_builder_creds()
        config = build_builder_config(
            remote_url=settings.POLYMARKET_REMOTE_SIGNING_URL,
            remote_token=settings.POLYMARKET_REMOTE_SIGNING_TOKEN,
            api_key=settings.POLYMARKET_BUILDER_API_KEY,
            secret=settings.POLYMARKET_BUILDER_SECRET,
            passphrase=settings.POLYMARKET_BUILDER_PASSPHRASE,
        )
        return cls.create(
            relayer_url=settings.POLYMARKET_RELAYER_URL,
            chain_id=settings.POLYMARKET_CHAIN_ID,
            private_key=settings.POLYMARKET_PRIVATE_KEY,
            builder_config=config,
        )

    @staticmethod
    def _convert(tx: SafeTransaction) -> Any:
        return RelayerSafeTransaction(
            to=tx.to,
            operation=RelayerOperationType(int(tx.operation)),
            data=tx.data,
            value=tx.value,
        )

    async def execute(
        self, transactions: Sequence[SafeTransaction], description: str
    ) -> _ThreadedResponse:
        payload = [self._convert(tx) for tx in transactions]
        logger.info("relayer_execute", txs=len(payload), description=description)
        response = await asyncio.to_thread(self._client.execute, payload, description)
        return _ThreadedResponse(response)

    async def deploy(self) -> _ThreadedResponse:
        logger.info("relayer_deploy")
        response = await asyncio.to_thread(self._client.deploy)
        return _ThreadedResponse(response)
