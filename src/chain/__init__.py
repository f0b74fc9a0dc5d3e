"""On-chain helpers: Safe derivation and relayer transaction encoders."""

from src.chain.safe import derive_safe_address
from src.chain.transactions import (
    OperationType,
    SafeTransaction,
    create_approve_and_transfer_usdc_txs,
    create_merge_positions_tx,
    create_redeem_tx,
    create_split_position_tx,
    create_usdc_approve_tx,
    create_usdc_transfer_tx,
)

__all__ = [
    "derive_safe_address",
    "OperationType",
    "SafeTransaction",
    "create_approve_and_transfer_usdc_txs",
    "create_merge_positions_tx",
    "create_redeem_tx",
    "create_split_position_tx",
    "create_usdc_approve_tx",
    "create_usdc_transfer_tx",
]
