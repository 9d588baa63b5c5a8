"""Deployment manifest store

A manifest is one JSON document per network and deployment name recording
the contracts an operation deployed or created:

    deployments/<network>/<name>-deployment.json

    {
        "network": "sepolia",
        "chainId": 11155111,
        "deployer": "0x...",
        "timestamp": "2025-01-01T00:00:00.000Z",
        "contracts": {
            "TokenA": {"address": "0x...", "transactionHash": "0x..."},
            "Pool": {"address": "0x...", "token0": "0x...", "fee": 500}
        }
    }

Manifests are always rewritten whole. There is no locking: two processes
saving the same manifest concurrently race and the last writer wins.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import MissingContractError, MissingManifestError

# Keys of a contract record that map to named fields, everything else is extra
_RECORD_KEYS = ("address", "abi", "transactionHash")


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-01T00:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ContractRecord:
    """
    One deployed or referenced contract.

    Attributes:
        address: Contract address
        abi: Inline ABI (full Uniswap deploys keep it alongside the address)
        transaction_hash: Hash of the transaction that created the contract
        extra: Protocol-specific fields (token0, token1, fee, liquidityTransaction, ...)
    """

    address: str
    abi: Optional[List[Dict[str, Any]]] = None
    transaction_hash: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key):
        return self.to_dict()[key]

    def get(self, key, default=None):
        return self.to_dict().get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        data = {"address": self.address}
        if self.abi is not None:
            data["abi"] = self.abi
        if self.transaction_hash is not None:
            data["transactionHash"] = self.transaction_hash
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractRecord":
        if "address" not in data:
            raise ValueError(f"Contract record without address: {data}")
        return cls(
            address=data["address"],
            abi=data.get("abi"),
            transaction_hash=data.get("transactionHash"),
            extra={k: v for k, v in data.items() if k not in _RECORD_KEYS},
        )


@dataclass
class Manifest:
    """Deployment record for one network"""

    network: str
    chain_id: int
    deployer: str
    timestamp: str = field(default_factory=utc_timestamp)
    contracts: Dict[str, ContractRecord] = field(default_factory=dict)

    def has(self, role: str) -> bool:
        return role in self.contracts

    def get(self, role: str) -> Optional[ContractRecord]:
        return self.contracts.get(role)

    def require(self, role: str) -> ContractRecord:
        """Get the record for a role or raise MissingContractError"""
        record = self.contracts.get(role)
        if record is None or not record.address:
            raise MissingContractError(
                f"Contract '{role}' not found in {self.network} manifest "
                f"(available: {sorted(self.contracts)})"
            )
        return record

    def set(self, role: str, record: ContractRecord) -> ContractRecord:
        self.contracts[role] = record
        return record

    def record(self, role: str, address: str, transaction_hash=None, abi=None, **extra) -> ContractRecord:
        """Create or replace the record for a role"""
        return self.set(role, ContractRecord(
            address=address,
            abi=abi,
            transaction_hash=transaction_hash,
            extra=dict(extra),
        ))

    def amend(self, role: str, **extra) -> ContractRecord:
        """Add or overwrite extra fields of an existing record"""
        record = self.require(role)
        record.extra.update(extra)
        return record

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "chainId": self.chain_id,
            "deployer": self.deployer,
            "timestamp": self.timestamp,
            "contracts": {role: rec.to_dict() for role, rec in self.contracts.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        return cls(
            network=data["network"],
            chain_id=data["chainId"],
            deployer=data["deployer"],
            timestamp=data["timestamp"],
            contracts={
                role: ContractRecord.from_dict(rec)
                for role, rec in data.get("contracts", {}).items()
            },
        )


class ManifestStore:
    """Read and write deployment manifests under a root directory"""

    SUFFIX = "deployment.json"

    def __init__(self, root="deployments"):
        """
        Args:
            root: Directory holding one sub-directory per network
        """
        self.root = Path(root)

    def path(self, network: str, name: Optional[str] = None) -> Path:
        """
        Manifest file path.

        Args:
            network: Network name
            name: Deployment name prefix ("pool" -> pool-deployment.json),
                  None for the bare deployment.json of a full Uniswap deploy
        """
        filename = f"{name}-{self.SUFFIX}" if name else self.SUFFIX
        return self.root / network / filename

    def exists(self, network: str, name: Optional[str] = None) -> bool:
        return self.path(network, name).exists()

    def load(self, network: str, name: Optional[str] = None) -> Manifest:
        """
        Load a manifest.

        Raises:
            MissingManifestError: If the manifest file was never written
        """
        path = self.path(network, name)
        if not path.exists():
            raise MissingManifestError(f"Deployment manifest not found: {path}")

        with open(path, encoding="utf-8") as f:
            return Manifest.from_dict(json.load(f))

    def save(self, network: str, manifest: Manifest, name: Optional[str] = None) -> Path:
        """
        Write the whole manifest, replacing any previous file atomically.

        Returns:
            Path of the written file
        """
        path = self.path(network, name)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(manifest.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        return path

    def save_abis(self, network: str, manifest: Manifest) -> List[Path]:
        """Write abi/<role>.json for every record that carries an inline ABI"""
        abi_dir = self.root / network / "abi"
        written = []
        for role, record in manifest.contracts.items():
            if record.abi is None:
                continue
            abi_dir.mkdir(parents=True, exist_ok=True)
            abi_path = abi_dir / f"{role}.json"
            with open(abi_path, "w", encoding="utf-8") as f:
                json.dump(record.abi, f, indent=2)
            written.append(abi_path)
        return written
