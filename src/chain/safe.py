"""Deterministic Safe address derivation via the builder relayer client."""

from __future__ import annotations

from typing import Optional

from web3 import Web3

from src.exceptions import MissingDependencyError

try:
    from py_builder_relayer_client.builder.derive import derive
    from py_builder_relayer_client.config import get_contract_config
except ImportError:
    derive = None  # type: ignore[assignment]
    get_contract_config = None  # type: ignore[assignment]

DEFAULT_CHAIN_ID = 137


def derive_safe_address(
    eoa_address: str,
    chain_id: int = DEFAULT_CHAIN_ID,
    factory: Optional[str] = None,
) -> str:
    """Return the checksummed Safe address the relayer deploys for ``eoa_address``.

    ``factory`` defaults to the Safe factory of ``chain_id``.
    """
    if derive is None:
        raise MissingDependencyError("py-builder-relayer-client is not installed")
    safe_factory = factory or get_contract_config(chain_id).safe_factory
    safe = derive(Web3.to_checksum_address(eoa_address), safe_factory)
    return Web3.to_checksum_address(safe)
