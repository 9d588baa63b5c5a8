"""Compiled contract artifacts (Hardhat JSON) and library linking"""

import json
import os
from pathlib import Path

from ..core.exceptions import ArtifactError
from ..core.logs import get_logger

logger = get_logger(__name__)


def link_libraries(artifact, libraries):
    """
    Splice library addresses into an artifact's bytecode.

    Args:
        artifact: Artifact dict with "bytecode" and "linkReferences"
        libraries: {library contract name: address}

    Returns:
        Linked bytecode as a 0x-prefixed hex string

    Raises:
        ArtifactError: If a referenced library has no address
    """
    bytecode = artifact["bytecode"]
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    for source, contracts in (artifact.get("linkReferences") or {}).items():
        for contract_name, references in contracts.items():
            address = libraries.get(contract_name)
            if not address:
                raise ArtifactError(f"Missing address for library {contract_name} ({source})")
            replacement = address.lower().replace("0x", "")
            for ref in references:
                # Offsets are in bytes after the 0x prefix
                begin = 2 + ref["start"] * 2
                end = 2 + (ref["start"] + ref["length"]) * 2
                bytecode = bytecode[:begin] + replacement + bytecode[end:]

    return bytecode


class ArtifactStore:
    """Locate Hardhat-style artifacts by contract name"""

    def __init__(self, search_paths=None):
        """
        Args:
            search_paths: Directories to search (AMM_ARTIFACTS_DIR, ./artifacts
                          and ./node_modules/@uniswap when None)
        """
        if search_paths is None:
            search_paths = self._default_paths()
        self.search_paths = [Path(p) for p in search_paths]

    @staticmethod
    def _default_paths():
        paths = []
        env_path = os.getenv("AMM_ARTIFACTS_DIR")
        if env_path:
            paths.append(Path(env_path))
        paths.append(Path.cwd() / "artifacts")
        paths.append(Path.cwd() / "node_modules" / "@uniswap")
        return paths

    def find(self, name):
        """Path of <name>.json under the first search path that has it"""
        filename = f"{name}.json"
        for root in self.search_paths:
            if not root.exists():
                continue
            for path in sorted(root.rglob(filename)):
                if path.name == filename:
                    logger.debug(f"Artifact {name}: {path}")
                    return path
        raise ArtifactError(
            f"Artifact {name} not found in {', '.join(str(p) for p in self.search_paths)}"
        )

    def load(self, name):
        """
        Load an artifact.

        Raises:
            ArtifactError: If missing, unreadable, or without deployable bytecode
        """
        path = self.find(name)
        try:
            with open(path, encoding="utf-8") as f:
                artifact = json.load(f)
        except json.JSONDecodeError as e:
            raise ArtifactError(f"Invalid artifact {path}: {e}") from e

        if "abi" not in artifact:
            raise ArtifactError(f"Artifact {path} has no ABI")
        if artifact.get("bytecode") in (None, "", "0x"):
            raise ArtifactError(f"Artifact {path} has no bytecode (interface or abstract contract?)")
        return artifact

    def factory(self, manager, name, libraries=None):
        """
        Contract factory for an artifact.

        Returns:
            (factory, artifact)
        """
        artifact = self.load(name)
        bytecode = link_libraries(artifact, libraries or {})
        return manager.get_contract_factory(artifact["abi"], bytecode), artifact
