"""Web3 connection management"""

import os
from web3 import Web3
from dotenv import load_dotenv
from .config import Config
from .exceptions import ConnectionError, ConfigError


class Web3Manager:
    """Manages Web3 connection, signing account and network name"""

    def __init__(self, require_signer=False, rpc_url=None, network=None, w3=None):
        """
        Initialize Web3 connection.

        Args:
            require_signer: If True, loads private key for signing transactions
            rpc_url: Endpoint override (default: RPC_URL from .env)
            network: Manifest network name override (default: derived from chain ID)
            w3: Pre-built Web3 instance (skips provider setup)
        """
        load_dotenv()
        load_dotenv("wallet.env")

        self.config = Config()
        self._network = network

        if w3 is not None:
            self.w3 = w3
        else:
            self._setup_web3(rpc_url)

        self.account = None
        if require_signer:
            self._setup_account()

    def _setup_web3(self, rpc_url=None):
        """Setup Web3 connection"""
        rpc_url = rpc_url or os.getenv("RPC_URL")
        if not rpc_url:
            raise ConfigError("RPC_URL not found in environment")

        self.w3 = Web3(Web3.HTTPProvider(rpc_url))

        if not self.w3.is_connected():
            raise ConnectionError(f"Failed to connect to {rpc_url}")

    def _setup_account(self):
        """Setup signing account from private key"""
        private_key = os.getenv("PRIVATE_KEY")
        if not private_key:
            raise ConfigError("PRIVATE_KEY not found in wallet.env")

        self.account = self.w3.eth.account.from_key(private_key)

    @property
    def address(self):
        """Get account address (from signer or PUBLIC_KEY in wallet.env)"""
        if self.account:
            return self.account.address
        # Fall back to PUBLIC_KEY for read-only operations
        public_key = os.getenv("PUBLIC_KEY")
        return public_key if public_key else None

    @property
    def chain_id(self):
        """Get current chain ID"""
        return self.w3.eth.chain_id

    @property
    def network(self):
        """Network name used for deployment manifests"""
        if self._network:
            return self._network
        return self.config.network_name(self.chain_id)

    def get_nonce(self, address=None):
        """Get transaction count (nonce), including pending transactions"""
        addr = address or self.address
        if not addr:
            raise ValueError("No address provided")
        return self.w3.eth.get_transaction_count(addr, "pending")

    def get_contract(self, address, abi):
        """
        Bind a contract at address.

        Args:
            address: Contract address (any case)
            abi: ABI name from the package ABI files, or an ABI list

        No check is made that the address hosts a matching contract;
        mismatches surface when a call fails at the remote end.
        """
        if isinstance(abi, str):
            abi = self.config.get_abi(abi)
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=abi
        )

    def get_contract_factory(self, abi, bytecode):
        """Create an undeployed contract factory from ABI and bytecode"""
        return self.w3.eth.contract(abi=abi, bytecode=bytecode)

    def checksum(self, address):
        """Convert address to checksum format"""
        return Web3.to_checksum_address(address)
