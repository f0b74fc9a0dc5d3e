"""Minimal Polygon JSON-RPC reader over httpx."""

from __future__ import annotations

from typing import Any, Optional

import httpx
from eth_abi import decode
from web3 import Web3

from src.chain.transactions import encode_call
from src.exceptions import ExecutionError

DEFAULT_RPC = "https://polygon-rpc.com"


class RpcChainReader:
    """Reads bytecode, allowances and ERC1155 approvals with raw ``eth_call``."""

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    async def close(self) -> None:
        await self._client.aclose()

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        resp = await self._client.post(
            self._rpc_url,
            json={"jsonrpc": "2.0", "method": method, "params": params, "id": self._request_id},
        )
        resp.raise_for_status()
        body = resp.json()
        if body.get("error"):
            raise ExecutionError(f"RPC {method} failed: {body['error']}")
        return body.get("result")

    async def _call(self, to: str, data: str) -> bytes:
        result = await self._rpc("eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise ExecutionError(f"Unexpected eth_call result: {result!r}")
        return bytes.fromhex(result[2:])

    async def get_bytecode(self, address: str) -> Optional[str]:
        """Deployed bytecode, or ``None`` when the address has no code."""
        code = await self._rpc("eth_getCode", [Web3.to_checksum_address(address), "latest"])
        if not code or code == "0x" or len(code) <= 2:
            return None
        return code

    async def erc20_allowance(self, token: str, owner: str, spender: str) -> int:
        data = encode_call(
            "allowance(address,address)",
            ["address", "address"],
            [Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)],
        )
        (allowance,) = decode(["uint256"], await self._call(token, data))
        return int(allowance)

    async def is_approved_for_all(self, token: str, owner: str, operator: str) -> bool:
        data = encode_call(
            "isApprovedForAll(address,address)",
            ["address", "address"],
            [Web3.to_checksum_address(owner), Web3.to_checksum_address(operator)],
        )
        (approved,) = decode(["bool"], await self._call(token, data))
        return bool(approved)
