"""Operation runner: resolve, load, bind, execute, persist, report"""

import time
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Tuple

from web3.exceptions import ContractLogicError

from ..utils.gas import GasConfig, GasManager
from ..utils.reverts import to_remote_rejection
from ..utils.transactions import TransactionBuilder
from .config import Config
from .connection import Web3Manager
from .exceptions import MissingContractError, MissingManifestError, VerificationError
from .logs import get_logger
from .manifest import Manifest, ManifestStore
from .reporter import Reporter
from .settings import OperationSettings

logger = get_logger(__name__)


@dataclass(frozen=True)
class Operation:
    """
    Declaration of a one-shot operation.

    Attributes:
        name: CLI name, e.g. "collect"
        func: Callable taking an OperationContext, returning a result dict
        manifest: Name of the manifest to load (None = no manifest)
        manifest_required: Fail if the manifest does not exist
        save_as: Manifest name written when the operation marks it dirty
                 (defaults to manifest)
        roles: Contract roles that must resolve before func runs
        signer: Whether a private key is needed
    """

    name: str
    func: Callable
    manifest: Optional[str] = None
    manifest_required: bool = True
    save_as: Optional[str] = None
    roles: Tuple[str, ...] = field(default_factory=tuple)
    signer: bool = True
    description: str = ""


class OperationContext:
    """State shared with an operation while it runs"""

    def __init__(self, operation, settings, manager, reporter, store, manifest):
        self.operation = operation
        self.settings = settings
        self.manager = manager
        self.reporter = reporter
        self.store = store
        self.manifest = manifest
        self.config = Config()
        self.dirty = False
        self._addresses = {}
        self._tx_builder = None
        self._gas_manager = None

    @property
    def network(self):
        return self.manager.network

    @property
    def gas_manager(self):
        if self._gas_manager is None:
            self._gas_manager = GasManager(self.manager, config=GasConfig(self.settings.gas_config))
        return self._gas_manager

    @property
    def tx(self):
        """TransactionBuilder shared by all contract wrappers of this run"""
        if self._tx_builder is None:
            self._tx_builder = TransactionBuilder(self.manager, self.gas_manager)
        return self._tx_builder

    def resolve(self, role):
        """
        Address for a role: manifest first, then the network default.

        Raises:
            MissingContractError: If neither knows the role
        """
        if role in self._addresses:
            return self._addresses[role]

        record = self.manifest.get(role) if self.manifest else None
        address = record.address if record else None
        if not address:
            address = self.config.get_default_address(self.network, role)
        if not address:
            where = f"manifest '{self.operation.manifest}'" if self.operation.manifest else "any manifest"
            raise MissingContractError(
                f"Contract '{role}' not found in {where} and has no default on {self.network}"
            )

        address = self.manager.checksum(address)
        self._addresses[role] = address
        return address

    def has(self, role):
        try:
            self.resolve(role)
        except MissingContractError:
            return False
        return True

    def ensure_manifest(self):
        """Manifest for this run, created empty if none was loaded"""
        if self.manifest is None:
            self.manifest = Manifest(
                network=self.network,
                chain_id=self.manager.chain_id,
                deployer=self.manager.address,
            )
        return self.manifest

    def record(self, role, address, transaction_hash=None, abi=None, **extra):
        """Record a contract in the manifest and mark it for saving"""
        manifest = self.ensure_manifest()
        manifest.record(role, address, transaction_hash=transaction_hash, abi=abi, **extra)
        self._addresses[role] = self.manager.checksum(address)
        self.dirty = True

    def amend(self, role, **extra):
        self.ensure_manifest().amend(role, **extra)
        self.dirty = True

    def save(self):
        """Write the manifest now"""
        manifest = self.ensure_manifest()
        name = self.operation.save_as or self.operation.manifest
        path = self.store.save(self.network, manifest, name)
        self.dirty = False
        return path

    def deadline(self, minutes):
        """On-chain expiry timestamp minutes from now"""
        if self.settings.deadline_minutes is not None:
            minutes = self.settings.deadline_minutes
        return int(time.time()) + minutes * 60

    def verify(self, ok, message):
        """
        Report a post-transaction mismatch.

        Logs a warning, or raises VerificationError in strict mode.
        """
        if ok:
            return True
        if self.settings.strict:
            raise VerificationError(message)
        self.reporter.warning(message)
        return False


class OperationRunner:
    """Runs one Operation and turns the outcome into an exit code"""

    def __init__(self, settings=None, manager=None, reporter=None, store=None):
        """
        Args:
            settings: OperationSettings (defaults used if None)
            manager: Web3Manager (created from settings if None)
            reporter: Reporter (stdout/stderr if None)
            store: ManifestStore (rooted at settings.deployments if None)
        """
        self.settings = settings or OperationSettings()
        self.manager = manager
        self.reporter = reporter or Reporter()
        self.store = store or ManifestStore(self.settings.deployments)
        self.result = None

    def _manager(self, operation):
        if self.manager is None:
            self.manager = Web3Manager(
                require_signer=operation.signer,
                rpc_url=self.settings.rpc_url,
                network=self.settings.network,
            )
        return self.manager

    def _load_manifest(self, operation, network):
        if not operation.manifest:
            return None
        try:
            return self.store.load(network, operation.manifest)
        except MissingManifestError:
            if operation.manifest_required:
                raise
            logger.debug(f"No {operation.manifest} manifest for {network}, starting empty")
            return None

    def prepare(self, operation):
        """Resolve network, load manifest and resolve required roles"""
        if self.settings.manifest:
            # --manifest replaces both the manifest read and the one written
            operation = replace(
                operation,
                manifest=self.settings.manifest if operation.manifest else None,
                save_as=self.settings.manifest,
            )
        manager = self._manager(operation)
        manifest = self._load_manifest(operation, manager.network)
        ctx = OperationContext(operation, self.settings, manager, self.reporter, self.store, manifest)
        for role in operation.roles:
            ctx.resolve(role)
        return ctx

    def run(self, operation):
        """
        Run an operation.

        Returns:
            0 on success, 1 on any failure
        """
        self.result = None
        try:
            ctx = self.prepare(operation)
            result = operation.func(ctx)
            if ctx.dirty:
                path = ctx.save()
                self.reporter.kv("Manifest", path)
            self.result = result
            return 0
        except KeyboardInterrupt:
            self.reporter.failure("Interrupted")
            return 1
        except ContractLogicError as e:
            self.reporter.failure(to_remote_rejection(e))
            return 1
        except Exception as e:
            logger.debug(f"{operation.name} failed", exc_info=True)
            self.reporter.failure(e)
            return 1
