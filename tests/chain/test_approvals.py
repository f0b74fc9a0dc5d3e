import pytest

from src.chain.approvals import OUTCOME_TOKEN_SPENDERS, USDC_E_SPENDERS, ApprovalManager
from src.chain.contracts import (
    CTF_CONTRACT_ADDRESS,
    CTF_EXCHANGE_ADDRESS,
    NEG_RISK_ADAPTER_ADDRESS,
    USDC_E_CONTRACT_ADDRESS,
)

SAFE = "0x1111111111111111111111111111111111111111"


class FakeReader:
    def __init__(self, allowance=10**30, approved=True, failing_spender=None):
        self.allowance = allowance
        self.approved = approved
        self.failing_spender = failing_spender
        self.allowance_calls = []
        self.approval_calls = []

    async def get_bytecode(self, address):
        return None

    async def erc20_allowance(self, token, owner, spender):
        self.allowance_calls.append((token, owner, spender))
        if spender == self.failing_spender:
            raise ConnectionError("rpc down")
        return self.allowance

    async def is_approved_for_all(self, token, owner, operator):
        self.approval_calls.append((token, owner, operator))
        return self.approved


@pytest.mark.asyncio
async def test_all_approved():
    reader = FakeReader()
    status = await ApprovalManager(reader).check_all_approvals(SAFE)

    assert status.all_approved
    assert set(status.usdc_approvals) == {name for name, _ in USDC_E_SPENDERS}
    assert set(status.outcome_token_approvals) == {name for name, _ in OUTCOME_TOKEN_SPENDERS}
    assert len(reader.allowance_calls) == 4
    assert len(reader.approval_calls) == 3
    assert all(token == USDC_E_CONTRACT_ADDRESS for token, _, _ in reader.allowance_calls)
    assert all(token == CTF_CONTRACT_ADDRESS for token, _, _ in reader.approval_calls)


@pytest.mark.asyncio
async def test_failed_read_counts_as_not_approved():
    reader = FakeReader(failing_spender=NEG_RISK_ADAPTER_ADDRESS)
    status = await ApprovalManager(reader).check_all_approvals(SAFE)

    assert not status.all_approved
    assert status.usdc_approvals["Neg Risk Adapter"] is False
    assert status.usdc_approvals["CTF Contract"] is True
    assert status.usdc_approvals["CTF Exchange"] is True
    assert all(status.outcome_token_approvals.values())


@pytest.mark.asyncio
async def test_allowance_below_threshold():
    reader = FakeReader(allowance=999)
    status = await ApprovalManager(reader, threshold=1000).check_all_approvals(SAFE)
    assert not status.all_approved
    assert not any(status.usdc_approvals.values())


@pytest.mark.asyncio
async def test_allowance_at_threshold_is_enough():
    reader = FakeReader(allowance=1000)
    status = await ApprovalManager(reader, threshold=1000).check_all_approvals(SAFE)
    assert status.all_approved


@pytest.mark.asyncio
async def test_missing_operator_approval():
    status = await ApprovalManager(FakeReader(approved=False)).check_all_approvals(SAFE)
    assert not status.all_approved
    assert all(status.usdc_approvals.values())
    assert not any(status.outcome_token_approvals.values())


def test_approval_batch():
    txs = ApprovalManager.create_all_approval_txs()
    assert len(txs) == 7

    usdc_txs, ctf_txs = txs[:4], txs[4:]
    assert all(tx.to == USDC_E_CONTRACT_ADDRESS for tx in usdc_txs)
    assert all(tx.data.startswith("0x095ea7b3") for tx in usdc_txs)
    assert all(tx.to == CTF_CONTRACT_ADDRESS for tx in ctf_txs)
    assert all(tx.data.startswith("0xa22cb465") for tx in ctf_txs)

    # Spender address is the first ABI word after the selector.
    assert CTF_EXCHANGE_ADDRESS[2:].lower() in ctf_txs[0].data
    assert all(tx.value == "0" for tx in txs)
