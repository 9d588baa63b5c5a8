"""Configuration loading and management"""

import os
import json
from pathlib import Path
from .exceptions import ConfigError


# Chain ID to network name mapping (used for manifest directories)
CHAIN_NAMES = {
    1: "mainnet",
    5: "goerli",
    11155111: "sepolia",
    42161: "arbitrum",
    10: "optimism",
    8453: "base",
    137: "polygon",
    1337: "localhost",
    31337: "localhost",
}

# Name used when the chain is not recognised (local dev nodes)
DEFAULT_NETWORK = "localhost"


class Config:
    """Centralized configuration manager for shared settings"""

    _instance = None
    _abis = None
    _addresses = None

    # ABIs and default addresses ship inside the package (not user-configurable)
    PACKAGE_DIR = Path(__file__).parent.parent
    PACKAGE_ABIS = PACKAGE_DIR / "abis.json"
    UNISWAP_V3_ABIS = PACKAGE_DIR / "uniswap_v3_abis.json"
    ADDRESSES_FILE = PACKAGE_DIR / "addresses.json"

    # Fee tier to tick spacing mapping
    TICK_SPACING = {
        100: 1,
        500: 10,
        3000: 60,
        10000: 200,
    }

    # Constants
    MAX_UINT128 = 2 ** 128 - 1
    MAX_UINT256 = 2 ** 256 - 1
    ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if Config._abis is None:
            self._load()

    def _find_config_dir(self):
        """Find user config directory (optional)"""
        env_path = os.getenv("AMM_CONFIG_DIR")
        if env_path:
            path = Path(env_path)
            if path.exists():
                return path

        locations = [
            Path.cwd() / "config",
            Path.home() / ".amm-ops" / "config",
        ]

        for path in locations:
            if path.exists():
                return path

        return None

    def _load(self):
        """Load package ABIs and default addresses, then user overrides"""
        abis = {}
        for abi_file in (self.PACKAGE_ABIS, self.UNISWAP_V3_ABIS):
            if not abi_file.exists():
                raise ConfigError(f"ABIs not found: {abi_file}")
            with open(abi_file) as f:
                abis.update(json.load(f))
        Config._abis = abis

        if not self.ADDRESSES_FILE.exists():
            raise ConfigError(f"Default addresses not found: {self.ADDRESSES_FILE}")
        with open(self.ADDRESSES_FILE) as f:
            addresses = json.load(f)

        # User addresses.json entries win over the packaged defaults
        config_dir = self._find_config_dir()
        if config_dir:
            user_file = config_dir / "addresses.json"
            if user_file.exists():
                with open(user_file) as f:
                    for network, contracts in json.load(f).items():
                        addresses.setdefault(network, {}).update(contracts)

        Config._addresses = addresses

    @classmethod
    def reset(cls):
        """Drop cached configuration (next Config() reloads from disk)"""
        cls._instance = None
        cls._abis = None
        cls._addresses = None

    def get_abi(self, name):
        """Get ABI by name (e.g. "erc20", "uniswap_v3_pool")"""
        if name in Config._abis:
            return Config._abis[name]
        raise ConfigError(f"ABI not found: {name}")

    def network_name(self, chain_id):
        """Map a chain ID to the manifest network name"""
        return CHAIN_NAMES.get(chain_id, DEFAULT_NETWORK)

    def get_default_address(self, network, role):
        """Default address for a role on a network, or None"""
        return Config._addresses.get(network, {}).get(role)

    def get_tick_spacing(self, fee):
        """Get tick spacing for fee tier"""
        if fee not in self.TICK_SPACING:
            raise ConfigError(f"Invalid fee tier: {fee}. Valid: {list(self.TICK_SPACING.keys())}")
        return self.TICK_SPACING[fee]
