"""Unit tests for the swap operation with fake contracts."""

from decimal import Decimal

import pytest
from web3 import Web3

from amm_ops.core.runner import OperationRunner
from amm_ops.core.settings import OperationSettings
from amm_ops.operations import swap as swap_module
from amm_ops.operations.swap import SWAP
from tests.conftest import DEPLOYER, NETWORK, TOKEN_A, TOKEN_B
from tests.fakes import RECEIPT, Ledger

ONE = 10 ** 18
ROUTER = Web3.to_checksum_address("0x" + "5e" * 20)


class FakeRouter:
    """Router paying out a fixed fraction of the input."""

    def __init__(self, ledger, rate=Decimal("0.99")):
        self.ledger = ledger
        self.rate = rate
        self.calls = []

    def __call__(self, manager, address, tx_builder=None):
        self.address = address
        return self

    def exact_input_single(self, token_in, token_out, fee, amount_in, deadline,
                           amount_out_minimum=0, recipient=None, sqrt_price_limit_x96=0):
        self.calls.append({
            "token_in": token_in,
            "token_out": token_out,
            "fee": fee,
            "amount_in": amount_in,
            "amount_out_minimum": amount_out_minimum,
        })
        self.ledger.credit(token_in, DEPLOYER, -amount_in)
        self.ledger.credit(token_out, DEPLOYER, int(amount_in * self.rate))
        return RECEIPT


@pytest.fixture
def ledger(monkeypatch):
    ledger = Ledger()
    ledger.credit(TOKEN_A, DEPLOYER, 50 * ONE)
    ledger.credit(TOKEN_B, DEPLOYER, 50 * ONE)
    monkeypatch.setattr(swap_module, "ERC20", ledger.token_class())
    return ledger


@pytest.fixture
def run(monkeypatch, fake_manager, reporter, store, pool_manifest):
    pool_manifest.record("SwapRouter", ROUTER)
    store.save(NETWORK, pool_manifest, "pool")

    def run_op(router, **settings):
        monkeypatch.setattr(swap_module, "SwapRouter", router)
        runner = OperationRunner(
            OperationSettings(manifest="pool", **settings),
            manager=fake_manager,
            reporter=reporter,
            store=store,
        )
        return runner.run(SWAP), runner.result

    return run_op


class TestSwap:
    """Exact-input swaps against the recorded pool."""

    def test_swap_a_for_b(self, run, ledger, reporter):
        router = FakeRouter(ledger)

        code, result = run(router, amount=10, min_out=9)

        assert code == 0
        call = router.calls[0]
        assert (call["token_in"], call["token_out"]) == (TOKEN_A, TOKEN_B)
        assert call["fee"] == 500
        assert call["amount_out_minimum"] == 9 * ONE
        assert result["amount_out"] == int(10 * ONE * Decimal("0.99"))
        assert ledger.approvals == [(TOKEN_A, ROUTER)]
        assert "Received TKB" in reporter.out.getvalue()

    def test_reverse(self, run, ledger):
        router = FakeRouter(ledger)

        code, _ = run(router, amount=1, reverse=True)

        assert code == 0
        assert router.calls[0]["token_in"] == TOKEN_B

    def test_existing_allowance_skips_approval(self, run, ledger):
        ledger.allowances[(TOKEN_A, ROUTER)] = 100 * ONE

        code, _ = run(FakeRouter(ledger), amount=1)

        assert code == 0
        assert ledger.approvals == []

    def test_fee_flag_overrides_manifest(self, run, ledger):
        router = FakeRouter(ledger)

        run(router, amount=1, fee=3000)

        assert router.calls[0]["fee"] == 3000

    def test_zero_amount_is_rejected(self, run, ledger, reporter):
        router = FakeRouter(ledger)

        code, _ = run(router, amount=Decimal(0))

        assert code == 1
        assert router.calls == []
        assert ledger.approvals == []
        assert "greater than 0" in reporter.err.getvalue()

    def test_zero_min_out_is_respected(self, run, ledger):
        router = FakeRouter(ledger)

        code, _ = run(router, amount=1, min_out=Decimal(0))

        assert code == 0
        assert router.calls[0]["amount_out_minimum"] == 0

    def test_insufficient_balance(self, run, ledger, reporter):
        router = FakeRouter(ledger)

        code, _ = run(router, amount=51)

        assert code == 1
        assert router.calls == []
        assert "Insufficient TKA" in reporter.err.getvalue()
