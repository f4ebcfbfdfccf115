"""Standard contract versions, bytecode hashes and immutable references."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

Tag = str

_ACRONYMS = {"weth": "WETH", "mips": "MIPS", "erc20": "ERC20", "erc721": "ERC721"}


def _contract_name(key: str) -> str:
    """Turn a snake_case config key into a contract name."""
    if "_" not in key and key[:1].isupper():
        return key
    return "".join(_ACRONYMS.get(part, part.capitalize()) for part in key.split("_"))


def _string(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name}: expected a string, got {value!r}")
    return value


_IMMUTABLE_FIELDS = {
    "AnchorStateRegistry": "anchor_state_registry",
    "DelayedWETH": "delayed_weth",
    "FaultDisputeGame": "fault_dispute_game",
    "MIPS": "mips",
}


@dataclass
class ContractBytecodeImmutables:
    """Raw JSON immutable references, as copied from compiler output."""

    anchor_state_registry: str = ""
    delayed_weth: str = ""
    fault_dispute_game: str = ""
    mips: str = ""

    def for_contract_with_name(self, name: str) -> str | None:
        """The immutable references of a contract, or None if there are none."""
        attribute = _IMMUTABLE_FIELDS.get(name)
        if attribute is None:
            return None
        return getattr(self, attribute) or None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContractBytecodeImmutables:
        """Build from a decoded TOML table."""
        return cls(
            **{
                attribute: _string(data[attribute], attribute)
                for attribute in _IMMUTABLE_FIELDS.values()
                if attribute in data
            }
        )


@dataclass
class L1ContractBytecodeHashes:
    """Bytecode hash (hex string) of each L1 contract, by contract name."""

    hashes: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str:
        """The hash for a contract, or an empty string."""
        return self.hashes.get(name, "")

    def get_non_empty(self) -> list[str]:
        """Names of contracts with a non-empty hash, in order."""
        return [name for name, value in self.hashes.items() if value]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> L1ContractBytecodeHashes:
        """Build from a decoded TOML table keyed by snake_case contract name."""
        return cls({_contract_name(key): _string(value, key) for key, value in data.items()})


@dataclass
class VersionedContract:
    """A contract version and where it may be deployed."""

    version: str = ""
    address: str | None = None
    implementation_address: str | None = None


@dataclass
class ContractVersions:
    """Versions of each contract in a release, by contract name."""

    contracts: dict[str, VersionedContract] = field(default_factory=dict)

    def get(self, name: str) -> VersionedContract:
        """The entry for a contract, or an empty one."""
        return self.contracts.get(name, VersionedContract())

    def get_non_empty(self) -> list[str]:
        """Names of contracts with a non-empty version, in order."""
        return [name for name, entry in self.contracts.items() if entry.version]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContractVersions:
        """Build from a decoded TOML table; entries are tables or bare version strings."""
        contracts: dict[str, VersionedContract] = {}
        for key, value in data.items():
            if isinstance(value, str):
                entry = VersionedContract(version=value)
            elif isinstance(value, Mapping):
                address = value.get("address")
                implementation = value.get("implementation_address")
                entry = VersionedContract(
                    version=_string(value.get("version", ""), f"{key}.version"),
                    address=None if address is None else _string(address, f"{key}.address"),
                    implementation_address=(
                        None
                        if implementation is None
                        else _string(implementation, f"{key}.implementation_address")
                    ),
                )
            else:
                raise ValueError(f"{key}: expected a table or a string, got {value!r}")
            contracts[_contract_name(key)] = entry
        return cls(contracts)