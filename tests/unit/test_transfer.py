"""Unit tests for the token transfer operation."""

from decimal import Decimal

import pytest

from amm_ops.core.runner import OperationRunner
from amm_ops.core.settings import OperationSettings
from amm_ops.operations import transfer as transfer_module
from amm_ops.operations.transfer import TRANSFER
from tests.conftest import DEPLOYER, RECIPIENT, TOKEN_A, TOKEN_B
from tests.fakes import Ledger

ONE = 10 ** 18


@pytest.fixture
def ledger(monkeypatch):
    ledger = Ledger()
    ledger.credit(TOKEN_A, DEPLOYER, 100 * ONE)
    ledger.credit(TOKEN_B, DEPLOYER, 100 * ONE)
    monkeypatch.setattr(transfer_module, "ERC20", ledger.token_class())
    return ledger


@pytest.fixture
def run(fake_manager, reporter, store, pool_manifest):
    def run_op(**settings):
        settings.setdefault("recipient", RECIPIENT)
        runner = OperationRunner(
            OperationSettings(**settings),
            manager=fake_manager,
            reporter=reporter,
            store=store,
        )
        return runner.run(TRANSFER), runner.result

    return run_op


class TestTransfer:
    """Sending TokenA and TokenB to a recipient."""

    def test_sends_both_tokens(self, run, ledger, reporter):
        code, result = run(amount=10)

        assert code == 0
        assert ledger.transfers == [(TOKEN_A, RECIPIENT, 10 * ONE), (TOKEN_B, RECIPIENT, 10 * ONE)]
        assert ledger.balance(TOKEN_A, RECIPIENT) == 10 * ONE
        assert [t["received"] for t in result["transfers"]] == [10 * ONE, 10 * ONE]
        assert reporter.warnings == []

    def test_lower_case_recipient_is_checksummed(self, run, ledger):
        code, result = run(amount=1, recipient=RECIPIENT.lower())

        assert code == 0
        assert result["recipient"] == RECIPIENT

    def test_insufficient_balance_sends_nothing(self, run, ledger, reporter):
        ledger.credit(TOKEN_B, DEPLOYER, -95 * ONE)

        code, _ = run(amount=10)

        assert code == 1
        assert ledger.transfers == []
        assert "Insufficient TKB" in reporter.err.getvalue()

    def test_mismatch_warns_but_succeeds(self, run, ledger, reporter, caplog):
        ledger.transfer_fee = 1

        with caplog.at_level("WARNING", logger="amm_ops"):
            code, result = run(amount=10)

        assert code == 0
        assert len(reporter.warnings) == 2
        assert "expected" in caplog.text
        assert result["transfers"][0]["received"] == 10 * ONE - 1

    def test_mismatch_fails_when_strict(self, run, ledger, reporter):
        ledger.transfer_fee = 1

        code, _ = run(amount=10, strict=True)

        assert code == 1
        # The first token was already sent when the check failed
        assert len(ledger.transfers) == 1
        assert "expected" in reporter.err.getvalue()

    def test_zero_amount_is_rejected(self, run, ledger, reporter):
        code, _ = run(amount=Decimal(0))

        assert code == 1
        assert ledger.transfers == []
        assert ledger.balance(TOKEN_A, RECIPIENT) == 0
        assert "greater than 0" in reporter.err.getvalue()

    def test_missing_recipient(self, run, ledger, reporter):
        code, _ = run(recipient=None)

        assert code == 1
        assert ledger.transfers == []
