"""Loading of the standard configuration from a directory of TOML files."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

from chainvet.standard.params import Params
from chainvet.standard.roles import MultisigRoles, Roles
from chainvet.standard.versions import (
    ContractBytecodeImmutables,
    ContractVersions,
    L1ContractBytecodeHashes,
    Tag,
)

NETWORKS = ("mainnet", "sepolia")


@dataclass
class StandardConfig:
    """Standard parameters, roles, versions and bytecode data of every network."""

    release: Tag
    params: dict[str, Params] = field(default_factory=dict)
    roles: Roles = field(default_factory=Roles)
    multisig_roles: dict[str, MultisigRoles] = field(default_factory=dict)
    network_versions: dict[str, dict[Tag, ContractVersions]] = field(default_factory=dict)
    bytecode_hashes: dict[Tag, L1ContractBytecodeHashes] = field(default_factory=dict)
    bytecode_immutables: dict[Tag, ContractBytecodeImmutables] = field(default_factory=dict)


def decode_toml_file(directory: str | PathLike[str], filename: str) -> dict[str, Any]:
    """Read and decode one TOML file from directory."""
    with (Path(directory) / filename).open("rb") as handle:
        return tomllib.load(handle)


def load_standard_config(directory: str | PathLike[str]) -> StandardConfig:
    """Load every standard config file; raise ValueError if the release is empty."""
    roles = Roles.from_dict(decode_toml_file(directory, "standard-config-roles-universal.toml"))

    params: dict[str, Params] = {}
    multisig_roles: dict[str, MultisigRoles] = {}
    network_versions: dict[str, dict[Tag, ContractVersions]] = {}
    for network in NETWORKS:
        multisig_roles[network] = MultisigRoles.from_dict(
            decode_toml_file(directory, f"standard-config-roles-{network}.toml")
        )
        params[network] = Params.from_dict(
            decode_toml_file(directory, f"standard-config-params-{network}.toml")
        )
        releases = decode_toml_file(directory, f"standard-versions-{network}.toml").get(
            "releases", {}
        )
        network_versions[network] = {
            tag: ContractVersions.from_dict(entries) for tag, entries in releases.items()
        }

    bytecode_hashes = {
        tag: L1ContractBytecodeHashes.from_dict(entries)
        for tag, entries in decode_toml_file(directory, "standard-bytecodes.toml").items()
    }
    bytecode_immutables = {
        tag: ContractBytecodeImmutables.from_dict(entries)
        for tag, entries in decode_toml_file(directory, "standard-immutables.toml").items()
    }

    release = decode_toml_file(directory, "standard-releases.toml").get("standard_release", "")
    if not release:
        raise ValueError("empty standard release")

    return StandardConfig(
        release=release,
        params=params,
        roles=roles,
        multisig_roles=multisig_roles,
        network_versions=network_versions,
        bytecode_hashes=bytecode_hashes,
        bytecode_immutables=bytecode_immutables,
    )