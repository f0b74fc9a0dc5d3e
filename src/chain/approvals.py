"""Token approvals a Safe needs before it can trade on the CLOB."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from src.chain.contracts import (
    CTF_CONTRACT_ADDRESS,
    CTF_EXCHANGE_ADDRESS,
    DEFAULT_USDC_APPROVAL_THRESHOLD,
    NEG_RISK_ADAPTER_ADDRESS,
    NEG_RISK_CTF_EXCHANGE_ADDRESS,
    USDC_E_CONTRACT_ADDRESS,
)
from src.chain.transactions import (
    SafeTransaction,
    create_set_approval_for_all_tx,
    create_usdc_approve_tx,
)
from src.trading.models import ApprovalStatus

if TYPE_CHECKING:
    from src.trading.protocols import ChainReader

logger = structlog.get_logger()

# Spenders of the Safe's USDC.e (ERC20 allowance).
USDC_E_SPENDERS: tuple[tuple[str, str], ...] = (
    ("CTF Contract", CTF_CONTRACT_ADDRESS),
    ("Neg Risk Adapter", NEG_RISK_ADAPTER_ADDRESS),
    ("CTF Exchange", CTF_EXCHANGE_ADDRESS),
    ("Neg Risk CTF Exchange", NEG_RISK_CTF_EXCHANGE_ADDRESS),
)

# Operators of the Safe's outcome tokens (ERC1155 approval-for-all).
OUTCOME_TOKEN_SPENDERS: tuple[tuple[str, str], ...] = (
    ("CTF Exchange", CTF_EXCHANGE_ADDRESS),
    ("Neg Risk Exchange", NEG_RISK_CTF_EXCHANGE_ADDRESS),
    ("Neg Risk Adapter", NEG_RISK_ADAPTER_ADDRESS),
)


class ApprovalManager:
    """Checks and builds the USDC.e / CTF approvals for a Safe."""

    def __init__(
        self,
        reader: "ChainReader",
        threshold: int = DEFAULT_USDC_APPROVAL_THRESHOLD,
    ) -> None:
        self._reader = reader
        self.threshold = threshold

    async def _usdc_approved(self, safe_address: str, name: str, spender: str) -> bool:
        try:
            allowance = await self._reader.erc20_allowance(
                USDC_E_CONTRACT_ADDRESS, safe_address, spender
            )
        except Exception as e:
            logger.warning("approval_check_failed", kind="usdc", spender=name, error=str(e))
            return False
        return allowance >= self.threshold

    async def _outcome_approved(self, safe_address: str, name: str, operator: str) -> bool:
        try:
            approved = await self._reader.is_approved_for_all(
                CTF_CONTRACT_ADDRESS, safe_address, operator
            )
        except Exception as e:
            logger.warning("approval_check_failed", kind="outcome_token", spender=name, error=str(e))
            return False
        return bool(approved)

    async def check_all_approvals(self, safe_address: str) -> ApprovalStatus:
        """Read every approval concurrently.

        A failed read counts as not approved for that spender and is never
        raised; the caller will simply submit the approval batch again.
        """
        usdc_results, outcome_results = await asyncio.gather(
            asyncio.gather(*(
                self._usdc_approved(safe_address, name, addr) for name, addr in USDC_E_SPENDERS
            )),
            asyncio.gather(*(
                self._outcome_approved(safe_address, name, addr)
                for name, addr in OUTCOME_TOKEN_SPENDERS
            )),
        )
        usdc_approvals = {name: ok for (name, _), ok in zip(USDC_E_SPENDERS, usdc_results)}
        outcome_approvals = {
            name: ok for (name, _), ok in zip(OUTCOME_TOKEN_SPENDERS, outcome_results)
        }
        all_approved = all(usdc_approvals.values()) and all(outcome_approvals.values())

        logger.info(
            "approvals_checked",
            safe=safe_address,
            all_approved=all_approved,
            missing_usdc=[n for n, ok in usdc_approvals.items() if not ok],
            missing_outcome=[n for n, ok in outcome_approvals.items() if not ok],
        )
        return ApprovalStatus(
            all_approved=all_approved,
            usdc_approvals=usdc_approvals,
            outcome_token_approvals=outcome_approvals,
        )

    @staticmethod
    def create_all_approval_txs() -> list[SafeTransaction]:
        """Full approval batch, regardless of current on-chain state."""
        txs = [create_usdc_approve_tx(addr) for _, addr in USDC_E_SPENDERS]
        txs.extend(create_set_approval_for_all_tx(addr) for _, addr in OUTCOME_TOKEN_SPENDERS)
        return txs
