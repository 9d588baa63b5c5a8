"""Unit tests for pool creation with fake contracts."""

import pytest
from web3 import Web3

from amm_ops.core.manifest import Manifest
from amm_ops.core.runner import OperationRunner
from amm_ops.core.settings import OperationSettings
from amm_ops.operations import pools
from amm_ops.operations.pools import CREATE_POOL
from amm_ops.utils.math import Q96
from tests.conftest import CHAIN_ID, DEPLOYER, POOL, TOKEN_A, TOKEN_B
from tests.fakes import RECEIPT, Ledger

NETWORK = "sepolia"
EXISTING_POOL = Web3.to_checksum_address("0x" + "77" * 20)


class FakeChain:
    """Factory, pool and position manager sharing one state."""

    def __init__(self, existing_pool=None, mint_error=None):
        self.pools = {}
        self.existing_pool = existing_pool
        self.mint_error = mint_error
        self.created = []
        self.sqrt_price = 0
        self.minted = []

    def factory(self, manager, address, tx_builder=None):
        chain = self

        class Factory:
            def get_pool(self, token0, token1, fee):
                return chain.existing_pool

            def create_pool(self, token0, token1, fee):
                chain.created.append((token0, token1, fee))
                return {"pool": POOL, "receipt": RECEIPT}

        return Factory()

    def pool(self, manager, address, tx_builder=None):
        chain = self

        class FakePool:
            def is_initialized(self):
                return chain.sqrt_price != 0

            def initialize(self, sqrt_price):
                chain.sqrt_price = sqrt_price
                return RECEIPT

            def slot0(self):
                return {"sqrtPriceX96": chain.sqrt_price, "tick": 0}

        return FakePool()

    def nfpm(self, manager, address, tx_builder=None):
        chain = self

        class FakeNFPM:
            def __init__(self):
                self.address = address

            def mint(self, params, gas_limit=None):
                if chain.mint_error:
                    raise chain.mint_error
                chain.minted.append(params)
                return {"receipt": RECEIPT, "token_id": 11, "liquidity": 1000, "amount0": 1, "amount1": 1}

        return FakeNFPM()


@pytest.fixture
def token_manifest(store):
    def save(token_a, token_b):
        manifest = Manifest(network=NETWORK, chain_id=CHAIN_ID, deployer=DEPLOYER)
        manifest.record("TokenA", token_a, transaction_hash="0x01")
        manifest.record("TokenB", token_b, transaction_hash="0x02")
        store.save(NETWORK, manifest, "daibi2")
    return save


@pytest.fixture
def run(monkeypatch, fake_manager, reporter, store):
    fake_manager.network = NETWORK
    ledger = Ledger()
    monkeypatch.setattr(pools, "ERC20", ledger.token_class())

    def run_op(chain, **settings):
        monkeypatch.setattr(pools, "UniswapV3Factory", chain.factory)
        monkeypatch.setattr(pools, "Pool", chain.pool)
        monkeypatch.setattr(pools, "NFPM", chain.nfpm)
        settings.setdefault("tokens_from", "daibi2")
        runner = OperationRunner(
            OperationSettings(**settings),
            manager=fake_manager,
            reporter=reporter,
            store=store,
        )
        return runner.run(CREATE_POOL), runner.result

    return run_op


class TestCreatePool:
    """Pool creation, initialization and first mint."""

    def test_creates_initializes_and_mints(self, run, token_manifest, store):
        token_manifest(TOKEN_A, TOKEN_B)
        chain = FakeChain()

        code, result = run(chain, price=4)

        assert code == 0
        assert chain.created == [(TOKEN_A, TOKEN_B, 500)]
        # TokenA sorts first, so price 4 TokenB per TokenA is sqrt(4)
        assert chain.sqrt_price == 2 * Q96
        assert chain.minted[0]["tick_lower"] == -100
        assert chain.minted[0]["tick_upper"] == 100
        assert result["token_id"] == 11

        manifest = store.load(NETWORK, "pool")
        record = manifest.require("Pool")
        assert record.address == POOL
        assert record["token0"] == TOKEN_A
        assert record["fee"] == 500
        assert record["tokenId"] == 11
        assert record["liquidityTransaction"] == "0x" + "ab" * 32
        assert manifest.require("TokenA").address == TOKEN_A

    def test_swapped_tokens_invert_price(self, run, token_manifest):
        token_manifest(TOKEN_B, TOKEN_A)
        chain = FakeChain()

        code, _ = run(chain, price=4)

        assert code == 0
        assert chain.created == [(TOKEN_A, TOKEN_B, 500)]
        assert chain.sqrt_price == Q96 // 2

    def test_existing_pool_is_reused(self, run, token_manifest, store):
        token_manifest(TOKEN_A, TOKEN_B)
        chain = FakeChain(existing_pool=EXISTING_POOL)
        chain.sqrt_price = Q96

        code, _ = run(chain, price=4)

        assert code == 0
        assert chain.created == []
        assert chain.sqrt_price == Q96
        assert store.load(NETWORK, "pool").require("Pool").address == EXISTING_POOL

    def test_failed_mint_keeps_pool_on_record(self, run, token_manifest, store):
        token_manifest(TOKEN_A, TOKEN_B)
        chain = FakeChain(mint_error=RuntimeError("mint reverted"))

        code, _ = run(chain)

        assert code == 1
        record = store.load(NETWORK, "pool").require("Pool")
        assert record.address == POOL
        assert "tokenId" not in record.extra

    def test_invalid_fee(self, run, token_manifest, reporter):
        token_manifest(TOKEN_A, TOKEN_B)

        code, _ = run(FakeChain(), fee=123)

        assert code == 1
        assert "Invalid fee tier" in reporter.err.getvalue()
