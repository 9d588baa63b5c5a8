"""Unit tests for the operation runner."""

import pytest

from amm_ops.core.exceptions import MissingContractError, PositionError
from amm_ops.core.runner import Operation, OperationRunner
from amm_ops.core.settings import OperationSettings
from tests.conftest import NETWORK, NFPM_ADDRESS, POOL, TOKEN_A


class Recorder:
    """Operation body that remembers whether it ran."""

    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result
        self.error = error

    def __call__(self, ctx):
        self.calls.append(ctx)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def make_runner(fake_manager, reporter, store):
    def make(**settings):
        return OperationRunner(
            OperationSettings(**settings),
            manager=fake_manager,
            reporter=reporter,
            store=store,
        )
    return make


class TestPreconditions:
    """Failures before the operation body runs."""

    def test_missing_manifest(self, make_runner, reporter):
        body = Recorder()
        op = Operation(name="collect", func=body, manifest="pool", roles=("NonfungiblePositionManager",))

        assert make_runner().run(op) == 1
        assert body.calls == []
        assert "pool-deployment.json" in reporter.err.getvalue()

    def test_missing_role(self, make_runner, reporter, pool_manifest):
        body = Recorder()
        op = Operation(name="swap", func=body, manifest="pool", roles=("TokenA", "SwapRouter"))

        assert make_runner().run(op) == 1
        assert body.calls == []
        assert "SwapRouter" in reporter.err.getvalue()

    def test_optional_manifest_starts_empty(self, make_runner, store):
        body = Recorder(result={"ok": True})
        op = Operation(name="deploy", func=body, manifest="weth", manifest_required=False)

        runner = make_runner()
        assert runner.run(op) == 0
        assert body.calls[0].manifest is None
        assert runner.result == {"ok": True}
        assert not store.exists(NETWORK, "weth")


class TestResolution:
    """Role lookup through the context."""

    def test_roles_resolve_from_manifest(self, make_runner, pool_manifest):
        body = Recorder()
        op = Operation(name="q", func=body, manifest="pool", roles=("Pool",))

        assert make_runner().run(op) == 0
        ctx = body.calls[0]
        assert ctx.resolve("Pool") == POOL
        assert ctx.has("NonfungiblePositionManager")
        assert not ctx.has("SwapRouter")
        with pytest.raises(MissingContractError):
            ctx.resolve("SwapRouter")

    def test_network_default(self, make_runner, fake_manager):
        fake_manager.network = "sepolia"
        body = Recorder()
        op = Operation(name="q", func=body, roles=("UniswapV3Factory",))

        assert make_runner().run(op) == 0
        assert body.calls[0].resolve("UniswapV3Factory").startswith("0x")


class TestPersistence:
    """Manifests written by operations."""

    def test_recorded_contracts_are_saved(self, make_runner, store, reporter):
        def deploy(ctx):
            ctx.record("TokenA", TOKEN_A, transaction_hash="0x01")
            return {}

        op = Operation(name="deploy", func=deploy, manifest="daibi2", manifest_required=False)

        assert make_runner().run(op) == 0
        manifest = store.load(NETWORK, "daibi2")
        assert manifest.require("TokenA").transaction_hash == "0x01"
        assert "daibi2-deployment.json" in reporter.out.getvalue()

    def test_manifest_override(self, make_runner, store, pool_manifest):
        def amend(ctx):
            ctx.record("Extra", NFPM_ADDRESS)

        op = Operation(name="x", func=amend, manifest="other", roles=("Pool",))

        assert make_runner(manifest="pool").run(op) == 0
        assert store.load(NETWORK, "pool").has("Extra")
        assert not store.exists(NETWORK, "other")

    def test_nothing_saved_without_changes(self, make_runner, store, pool_manifest):
        before = store.path(NETWORK, "pool").read_text()
        op = Operation(name="q", func=Recorder(), manifest="pool")

        assert make_runner().run(op) == 0
        assert store.path(NETWORK, "pool").read_text() == before


class TestFailures:
    """Errors raised by operation bodies."""

    def test_error_gives_exit_code_one(self, make_runner, reporter, pool_manifest):
        op = Operation(name="q", func=Recorder(error=PositionError("Position 9 not found")), manifest="pool")

        assert make_runner().run(op) == 1
        assert "Position 9 not found" in reporter.err.getvalue()

    def test_strict_verification(self, make_runner, reporter):
        def check(ctx):
            ctx.verify(False, "balance moved by 1, expected 2")

        op = Operation(name="q", func=check)

        assert make_runner().run(op) == 0
        assert reporter.warnings == ["balance moved by 1, expected 2"]

        assert make_runner(strict=True).run(op) == 1
        assert "expected 2" in reporter.err.getvalue()

    def test_deadline_override(self, make_runner, monkeypatch):
        monkeypatch.setattr("amm_ops.core.runner.time.time", lambda: 1000.0)
        body = Recorder()
        op = Operation(name="q", func=body)

        make_runner().run(op)
        assert body.calls[0].deadline(20) == 1000 + 20 * 60

        make_runner(deadline_minutes=1).run(op)
        assert body.calls[1].deadline(20) == 1060

    def test_zero_deadline_minutes_is_respected(self, make_runner, monkeypatch):
        monkeypatch.setattr("amm_ops.core.runner.time.time", lambda: 1000.0)
        body = Recorder()

        make_runner(deadline_minutes=0).run(Operation(name="q", func=body))

        assert body.calls[0].deadline(20) == 1000
