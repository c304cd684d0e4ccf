import json
import os
from dataclasses import dataclass
from typing import List

from l2_trial_scores.errors import ConfigError, StorageError


@dataclass(frozen=True)
class VersionDescriptor:
    release: str
    tag: str
    commit: str
    date: str
    address: str


class DeploymentRegistry:
    """
    Reads a Synthetix publish directory for one network.

    versions.json maps each release tag to its metadata and the contracts it
    deployed; deployment.json holds the current targets and their ABI sources.
    """

    def __init__(self, network: str, use_ovm: bool, deployment_dir: str):
        self.network = network
        self.use_ovm = use_ovm
        self.deployment_dir = deployment_dir
        self._versions = None
        self._deployment = None

    @property
    def network_dir(self) -> str:
        name = f"{self.network}-ovm" if self.use_ovm else self.network
        return os.path.join(self.deployment_dir, name)

    def _read(self, filename: str) -> dict:
        path = os.path.join(self.network_dir, filename)
        if not os.path.exists(path):
            raise ConfigError(f"No deployment data at '{path}'")
        try:
            with open(path, "r") as f:
                return json.load(f)
        except ValueError as e:
            raise StorageError(f"Invalid JSON in '{path}': {e}") from e
        except OSError as e:
            raise StorageError(f"Could not read '{path}': {e}") from e

    @property
    def versions(self) -> dict:
        if self._versions is None:
            self._versions = self._read("versions.json")
        return self._versions

    @property
    def deployment(self) -> dict:
        if self._deployment is None:
            self._deployment = self._read("deployment.json")
        return self._deployment

    def get_versions(self, contract_name: str) -> List[VersionDescriptor]:
        """Every deployment of ``contract_name``, oldest first."""
        result = []
        for tag, version in self.versions.items():
            entry = version.get("contracts", {}).get(contract_name)
            if not entry:
                continue
            result.append(VersionDescriptor(
                release=version.get("release", ""),
                tag=version.get("tag", tag),
                commit=version.get("commit", ""),
                date=version.get("date", ""),
                address=entry["address"],
            ))
        if not result:
            raise ConfigError(f"No versions of {contract_name} found in '{self.network_dir}'")
        return result

    def get_source(self, contract_name: str) -> dict:
        targets = self.deployment.get("targets", {})
        sources = self.deployment.get("sources", {})
        source_name = targets.get(contract_name, {}).get("source", contract_name)
        abi = sources.get(source_name, {}).get("abi")
        if abi is None:
            raise ConfigError(f"No ABI source for {contract_name} on {self.network}")
        return {"abi": abi}

    def get_target(self, contract_name: str) -> str:
        target = self.deployment.get("targets", {}).get(contract_name)
        if not target:
            raise ConfigError(f"{contract_name} is not deployed on {self.network}")
        return target["address"]
