"""Interfaces of the external collaborators the kit drives."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from src.chain.transactions import SafeTransaction
from src.trading.models import ApiCredentials


@runtime_checkable
class Signer(Protocol):
    """Signs payloads on behalf of the EOA identified by ``address``."""

    @property
    def address(self) -> str: ...

    def sign_message(self, message: bytes) -> str: ...


@runtime_checkable
class RelayResponse(Protocol):
    async def wait(self) -> Any: ...


@runtime_checkable
class RelayClient(Protocol):
    """Gas-free transaction relayer for the Safe."""

    async def execute(
        self, transactions: Sequence[SafeTransaction], description: str
    ) -> RelayResponse: ...

    async def deploy(self) -> RelayResponse: ...


@runtime_checkable
class NetworkOrderClient(Protocol):
    """Async view of the CLOB REST client."""

    async def get_order_book(self, token_id: str) -> Any: ...

    async def get_price(self, token_id: str, side: str) -> dict[str, Any]: ...

    async def create_and_post_order(
        self,
        order: dict[str, Any],
        options: dict[str, Any],
        order_type: str,
        defer_exec: bool = False,
    ) -> Any: ...

    async def create_and_post_market_order(
        self,
        order: dict[str, Any],
        options: dict[str, Any],
        order_type: str,
        defer_exec: bool = False,
    ) -> Any: ...

    async def cancel_order(self, order_id: str) -> Any: ...

    async def get_open_orders(self) -> list[dict[str, Any]]: ...

    async def derive_api_key(self) -> Optional[ApiCredentials]: ...

    async def create_api_key(self) -> ApiCredentials: ...


@runtime_checkable
class ChainReader(Protocol):
    """Read-only access to Polygon state."""

    async def get_bytecode(self, address: str) -> Optional[str]: ...

    async def erc20_allowance(self, token: str, owner: str, spender: str) -> int: ...

    async def is_approved_for_all(self, token: str, owner: str, operator: str) -> bool: ...
