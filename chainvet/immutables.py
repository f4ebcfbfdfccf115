"""Masking of immutable values embedded in deployed contract bytecode."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from chainvet.standard.versions import ContractBytecodeImmutables


@dataclass(frozen=True)
class ImmutableReference:
    """Offset and length of one immutable value inside deployed bytecode."""

    start: int
    length: int


@dataclass
class BytecodeAndImmutableReferences:
    """Deployed bytecode with the positions of its immutables."""

    bytecode: bytearray
    immutable_references: dict[str, list[ImmutableReference]] = field(default_factory=dict)

    def mask_bytecode(self, contract_name: str) -> None:
        """Zero every byte covered by an immutable reference, in place."""
        size = len(self.bytecode)
        for references in self.immutable_references.values():
            for ref in references:
                if ref.length <= 0:
                    continue
                end = ref.start + ref.length
                if ref.start < 0 or end > size:
                    raise ValueError(
                        f"immutable reference for contract {contract_name} "
                        f"[start:{ref.start}, length: {ref.length}] extends beyond bytecode"
                    )
                self.bytecode[ref.start:end] = bytes(ref.length)


def _int_field(entry: Mapping[str, Any], key: str) -> int:
    value = entry.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key}: expected an integer, got {value!r}")
    return value


def _parse_references(raw: str) -> dict[str, list[ImmutableReference]]:
    decoded = json.loads(raw)
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise ValueError(f"expected an object, got {type(decoded).__name__}")
    parsed: dict[str, list[ImmutableReference]] = {}
    for key, entries in decoded.items():
        if entries is None:
            parsed[key] = []
            continue
        if not isinstance(entries, list):
            raise ValueError(f"{key}: expected a list, got {entries!r}")
        references = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise ValueError(f"{key}: expected an object, got {entry!r}")
            references.append(
                ImmutableReference(_int_field(entry, "start"), _int_field(entry, "length"))
            )
        parsed[key] = references
    return parsed


def init_bytecode_immutable_mask(
    bytecode: bytes,
    immutables: ContractBytecodeImmutables | None,
    contract_name: str,
) -> BytecodeAndImmutableReferences:
    """Pair bytecode with the immutable references known for the contract, if any."""
    name = contract_name.removesuffix("Proxy")
    references: dict[str, list[ImmutableReference]] = {}
    raw = immutables.for_contract_with_name(name) if immutables is not None else None
    if raw:
        try:
            references = _parse_references(raw)
        except ValueError as exc:
            raise ValueError(
                f"unable to parse immutable references for {name}: {exc}"
            ) from exc
    return BytecodeAndImmutableReferences(bytearray(bytecode), references)