"""Core module - configuration, connection, exceptions and deployment manifests"""

from .config import Config
from .connection import Web3Manager
from .exceptions import (
    AMMError,
    ConfigError,
    ConnectionError,
    TransactionError,
    RemoteRejectionError,
    MissingManifestError,
    MissingContractError,
)
from .manifest import Manifest, ManifestStore

__all__ = [
    "Config",
    "Web3Manager",
    "AMMError",
    "ConfigError",
    "ConnectionError",
    "TransactionError",
    "RemoteRejectionError",
    "MissingManifestError",
    "MissingContractError",
    "Manifest",
    "ManifestStore",
]
