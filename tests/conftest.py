"""Shared pytest fixtures for amm-ops tests."""

import io
import os
from pathlib import Path

import pytest
from web3 import Web3

from amm_ops.core.manifest import Manifest, ManifestStore
from amm_ops.core.reporter import Reporter

NETWORK = "testnet"
CHAIN_ID = 31337

DEPLOYER = Web3.to_checksum_address("0x" + "d0" * 20)
TOKEN_A = Web3.to_checksum_address("0x" + "a1" * 20)
TOKEN_B = Web3.to_checksum_address("0x" + "b2" * 20)
POOL = Web3.to_checksum_address("0x" + "c3" * 20)
NFPM_ADDRESS = Web3.to_checksum_address("0x" + "e4" * 20)
RECIPIENT = Web3.to_checksum_address("0x" + "f5" * 20)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: needs a live node (set AMM_INTEGRATION_RPC_URL)"
    )


class FakeManager:
    """Stand-in for Web3Manager with a fixed network and signer"""

    def __init__(self, network=NETWORK, chain_id=CHAIN_ID, address=DEPLOYER):
        self.network = network
        self.chain_id = chain_id
        self.address = address
        self.account = object()
        self.w3 = None

    def checksum(self, address):
        return Web3.to_checksum_address(address)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch):
    """Run every test from an empty directory so no local gas_config.json or
    config/ directory leaks in."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("AMM_CONFIG_DIR", raising=False)
    monkeypatch.delenv("AMM_ARTIFACTS_DIR", raising=False)
    return tmp_path


@pytest.fixture
def fake_manager() -> FakeManager:
    return FakeManager()


@pytest.fixture
def reporter() -> Reporter:
    """Reporter writing into in-memory buffers."""
    return Reporter(out=io.StringIO(), err=io.StringIO())


@pytest.fixture
def deployments_dir(tmp_path: Path) -> Path:
    path = tmp_path / "deployments"
    path.mkdir()
    return path


@pytest.fixture
def store(deployments_dir: Path) -> ManifestStore:
    return ManifestStore(deployments_dir)


@pytest.fixture
def pool_manifest(store: ManifestStore) -> Manifest:
    """A saved pool-deployment.json with tokens, pool and position manager."""
    manifest = Manifest(network=NETWORK, chain_id=CHAIN_ID, deployer=DEPLOYER)
    manifest.record("TokenA", TOKEN_A, transaction_hash="0x" + "01" * 32)
    manifest.record("TokenB", TOKEN_B, transaction_hash="0x" + "02" * 32)
    manifest.record("Pool", POOL, token0=TOKEN_A, token1=TOKEN_B, fee=500)
    manifest.record("NonfungiblePositionManager", NFPM_ADDRESS)
    store.save(NETWORK, manifest, "pool")
    return manifest


@pytest.fixture
def integration_rpc_url():
    url = os.getenv("AMM_INTEGRATION_RPC_URL")
    if not url:
        pytest.skip("AMM_INTEGRATION_RPC_URL not set")
    return url
