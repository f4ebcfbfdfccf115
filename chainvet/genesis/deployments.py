"""Running helper commands and writing contract deployment files."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from collections.abc import Callable, Iterable, Mapping, Sequence
from os import PathLike
from pathlib import Path

logger = logging.getLogger(__name__)

_ZERO_HASH = "0x" + "0" * 64


def execute_command_in_dir(directory: str | PathLike[str], args: Sequence[str]) -> None:
    """Run a command in directory; stdout is inherited, stderr is printed on failure."""
    logger.info("executing %s", " ".join(args))
    completed = subprocess.run(
        list(args), cwd=directory, stdout=None, stderr=subprocess.PIPE, text=True, check=False
    )
    if completed.returncode != 0:
        print(completed.stderr)
        raise subprocess.CalledProcessError(
            completed.returncode, list(args), stderr=completed.stderr
        )


def stream_output(stream: Iterable[str], log: Callable[[str], object]) -> None:
    """Pass each line of stream, without its line ending, to log."""
    for line in stream:
        log(line.rstrip("\r\n"))


def _write(path: Path, data: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o777)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)


def write_deployments(addresses: Mapping[str, str], directory: str | PathLike[str]) -> Path:
    """Write the address list as compact JSON to directory/.deploy."""
    target = Path(directory) / ".deploy"
    _write(target, json.dumps(dict(addresses), separators=(",", ":")).encode())
    return target


def _deployment(name: str, address: str) -> dict[str, object]:
    return {
        "Name": name,
        "abi": None,
        "address": address,
        "args": None,
        "bytecode": "",
        "deployedBytecode": "",
        "devdoc": None,
        "metadata": "",
        "receipt": None,
        "solcInputHash": "",
        "storageLayout": {"storage": None, "types": None},
        "transactionHash": _ZERO_HASH,
        "userdoc": None,
    }


def write_deployments_legacy(
    addresses: Mapping[str, str], directory: str | PathLike[str]
) -> list[Path]:
    """Write one hardhat-style deployment file per address; non-address values are skipped."""
    created: list[Path] = []
    for name, address in addresses.items():
        if not isinstance(address, str) or not address.startswith("0x"):
            continue
        file_name = f"{name}.json"
        target = Path(directory) / file_name
        raw = json.dumps(_deployment(name, address), indent=1, ensure_ascii=False)
        try:
            target.write_bytes(raw.encode())
        except OSError as exc:
            raise OSError(f"failed to write JSON to file for field {name}: {exc}") from exc
        print(f"Created file: {file_name}")
        created.append(target)
    return created