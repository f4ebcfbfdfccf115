"""Expected role holders for standard chains."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# contract -> method -> expected owner, e.g. "AddressManager" -> "owner()" -> "ProxyAdmin"
Resolutions = dict[str, dict[str, str]]


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    """Find key exactly, falling back to a case-insensitive match."""
    if key in data:
        return data[key]
    lowered = key.lower()
    for candidate, value in data.items():
        if candidate.lower() == lowered:
            return value
    return None


def _table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = _lookup(data, key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{key}: expected a table, got {value!r}")
    return value


def _resolutions(data: Mapping[str, Any], key: str) -> Resolutions:
    result: Resolutions = {}
    for contract, methods in _table(data, key).items():
        if not isinstance(methods, Mapping):
            raise ValueError(f"{key}.{contract}: expected a table, got {methods!r}")
        for method, output in methods.items():
            if not isinstance(output, str):
                raise ValueError(f"{key}.{contract}.{method}: expected a string, got {output!r}")
        result[contract] = dict(methods)
    return result


@dataclass
class L1Roles:
    """Role resolutions on the L1 side."""

    universal: Resolutions = field(default_factory=dict)
    non_fault_proofs: Resolutions = field(default_factory=dict)
    fault_proofs: Resolutions = field(default_factory=dict)

    def get_resolutions(self, is_fault_proofs: bool) -> Resolutions:
        """Universal resolutions overlaid with the fault-proof or legacy set."""
        combined = dict(self.universal)
        combined.update(self.fault_proofs if is_fault_proofs else self.non_fault_proofs)
        return combined

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> L1Roles:
        """Build from a decoded TOML table."""
        return cls(
            universal=_resolutions(data, "universal"),
            non_fault_proofs=_resolutions(data, "nonFaultProofs"),
            fault_proofs=_resolutions(data, "FaultProofs"),
        )


@dataclass
class L2Roles:
    """Role resolutions on the L2 side."""

    universal: Resolutions = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> L2Roles:
        """Build from a decoded TOML table."""
        return cls(universal=_resolutions(data, "universal"))


@dataclass
class Roles:
    """Roles shared by every superchain target."""

    l1: L1Roles = field(default_factory=L1Roles)
    l2: L2Roles = field(default_factory=L2Roles)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Roles:
        """Build from a decoded TOML document."""
        return cls(
            l1=L1Roles.from_dict(_table(data, "l1")),
            l2=L2Roles.from_dict(_table(data, "L2")),
        )


@dataclass
class KeyHandover:
    """Roles expected after a key handover."""

    l1: L1Roles = field(default_factory=L1Roles)
    l2: L2Roles = field(default_factory=L2Roles)


@dataclass
class MultisigRoles:
    """Multisig roles of one superchain target."""

    l1: L1Roles = field(default_factory=L1Roles)
    l2: L2Roles = field(default_factory=L2Roles)
    key_handover: KeyHandover = field(default_factory=KeyHandover)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MultisigRoles:
        """Build from a decoded TOML document."""
        handover = _table(data, "key-handover")
        return cls(
            l1=L1Roles.from_dict(_table(data, "l1")),
            l2=L2Roles.from_dict(_table(data, "l2")),
            key_handover=KeyHandover(
                l1=L1Roles.from_dict(_table(handover, "L1")),
                l2=L2Roles.from_dict(_table(handover, "L2")),
            ),
        )