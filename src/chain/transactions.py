"""Encoders for the Safe transactions the relayer executes.

Each builder returns a ``SafeTransaction`` (``to``, ``operation``, ``data``,
``value``); amounts are raw uint256 values in token base units.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, Sequence

from eth_abi import encode
from web3 import Web3

from src.chain.contracts import (
    CTF_CONTRACT_ADDRESS,
    MAX_UINT256,
    USDC_E_CONTRACT_ADDRESS,
    ZERO_BYTES32,
)


class OperationType(IntEnum):
    CALL = 0
    DELEGATE_CALL = 1


@dataclass(frozen=True, slots=True)
class SafeTransaction:
    to: str
    data: str
    value: str = "0"
    operation: OperationType = OperationType.CALL

    def to_dict(self) -> dict[str, Any]:
        return {
            "to": self.to,
            "operation": int(self.operation),
            "data": self.data,
            "value": self.value,
        }


def function_selector(signature: str) -> bytes:
    return bytes(Web3.keccak(text=signature)[:4])


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> str:
    """ABI-encode a call as 0x-prefixed calldata."""
    calldata = function_selector(signature) + encode(list(arg_types), list(args))
    return "0x" + calldata.hex()


def _address(value: str) -> str:
    return Web3.to_checksum_address(value)


def _bytes32(value: str) -> bytes:
    raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    if len(raw) != 32:
        raise ValueError(f"Expected 32-byte hex value, got {len(raw)} bytes")
    return raw


def create_usdc_approve_tx(
    spender: str,
    amount: Optional[int] = None,
    token_address: Optional[str] = None,
) -> SafeTransaction:
    """ERC20 ``approve`` on USDC.e; defaults to the max allowance."""
    data = encode_call(
        "approve(address,uint256)",
        ["address", "uint256"],
        [_address(spender), MAX_UINT256 if amount is None else amount],
    )
    return SafeTransaction(to=token_address or USDC_E_CONTRACT_ADDRESS, data=data)


def create_usdc_transfer_tx(
    to: str,
    amount: int,
    token_address: Optional[str] = None,
) -> SafeTransaction:
    data = encode_call(
        "transfer(address,uint256)",
        ["address", "uint256"],
        [_address(to), amount],
    )
    return SafeTransaction(to=token_address or USDC_E_CONTRACT_ADDRESS, data=data)


def create_approve_and_transfer_usdc_txs(
    spender: str,
    to: str,
    transfer_amount: int,
    approve_amount: Optional[int] = None,
    token_address: Optional[str] = None,
) -> list[SafeTransaction]:
    """Approve ``spender`` then transfer to ``to``, in that order."""
    return [
        create_usdc_approve_tx(spender, approve_amount, token_address),
        create_usdc_transfer_tx(to, transfer_amount, token_address),
    ]


def create_set_approval_for_all_tx(
    operator: str,
    approved: bool = True,
    token_address: Optional[str] = None,
) -> SafeTransaction:
    """ERC1155 ``setApprovalForAll`` on the conditional tokens contract."""
    data = encode_call(
        "setApprovalForAll(address,bool)",
        ["address", "bool"],
        [_address(operator), approved],
    )
    return SafeTransaction(to=token_address or CTF_CONTRACT_ADDRESS, data=data)


def _position_call(
    signature: str,
    condition_id: str,
    partition: Sequence[int],
    amount: int,
    collateral_token: Optional[str],
    parent_collection_id: Optional[str],
    ctf_address: Optional[str],
) -> SafeTransaction:
    data = encode_call(
        signature,
        ["address", "bytes32", "bytes32", "uint256[]", "uint256"],
        [
            _address(collateral_token or USDC_E_CONTRACT_ADDRESS),
            _bytes32(parent_collection_id or ZERO_BYTES32),
            _bytes32(condition_id),
            list(partition),
            amount,
        ],
    )
    return SafeTransaction(to=ctf_address or CTF_CONTRACT_ADDRESS, data=data)


def create_split_position_tx(
    condition_id: str,
    partition: Sequence[int],
    amount: int,
    collateral_token: Optional[str] = None,
    parent_collection_id: Optional[str] = None,
    ctf_address: Optional[str] = None,
) -> SafeTransaction:
    """CTF ``splitPosition``: collateral into a full set of outcome tokens."""
    return _position_call(
        "splitPosition(address,bytes32,bytes32,uint256[],uint256)",
        condition_id, partition, amount,
        collateral_token, parent_collection_id, ctf_address,
    )


def create_merge_positions_tx(
    condition_id: str,
    partition: Sequence[int],
    amount: int,
    collateral_token: Optional[str] = None,
    parent_collection_id: Optional[str] = None,
    ctf_address: Optional[str] = None,
) -> SafeTransaction:
    """CTF ``mergePositions``: a full set of outcome tokens back into collateral."""
    return _position_call(
        "mergePositions(address,bytes32,bytes32,uint256[],uint256)",
        condition_id, partition, amount,
        collateral_token, parent_collection_id, ctf_address,
    )


def create_redeem_tx(condition_id: str, outcome_index: int) -> SafeTransaction:
    """CTF ``redeemPositions`` for a single resolved outcome."""
    index_set = 1 << outcome_index
    data = encode_call(
        "redeemPositions(address,bytes32,bytes32,uint256[])",
        ["address", "bytes32", "bytes32", "uint256[]"],
        [
            _address(USDC_E_CONTRACT_ADDRESS),
            _bytes32(ZERO_BYTES32),
            _bytes32(condition_id),
            [index_set],
        ],
    )
    return SafeTransaction(to=CTF_CONTRACT_ADDRESS, data=data)
