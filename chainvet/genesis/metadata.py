"""Per-chain metadata needed to regenerate and validate a genesis."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any

_CHAIN_ID = re.compile(r"\+?[0-9]+")


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a string, got {value!r}")
    return value


@dataclass(frozen=True)
class ValidationMetadata:
    """How the genesis of a chain was created."""

    genesis_creation_commit: str = ""
    node_version: str = ""
    monorepo_build_command: str = ""
    genesis_creation_command: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValidationMetadata:
        """Build from a decoded meta.toml document."""
        return cls(
            genesis_creation_commit=_string(data, "genesis_creation_commit"),
            node_version=_string(data, "node_version"),
            monorepo_build_command=_string(data, "monorepo_build_command"),
            genesis_creation_command=_string(data, "genesis_creation_command"),
        )


def load_validation_inputs(directory: str | PathLike[str]) -> dict[int, ValidationMetadata]:
    """Read meta.toml of every chain directory, keyed by chain ID; '-test' directories are skipped."""
    inputs: dict[int, ValidationMetadata] = {}
    for entry in sorted(Path(directory).iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue
        with (entry / "meta.toml").open("rb") as handle:
            metadata = ValidationMetadata.from_dict(tomllib.load(handle))
        if entry.name.endswith("-test"):
            continue
        if not _CHAIN_ID.fullmatch(entry.name):
            raise ValueError(f"failed to decode chain id from dir name: {entry.name!r}")
        inputs[int(entry.name)] = metadata
    return inputs