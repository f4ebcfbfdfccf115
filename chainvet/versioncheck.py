"""Comparison of on-chain contract versions and bytecode against the standard release."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from chainvet.immutables import init_bytecode_immutable_mask
from chainvet.rpc import RpcError, function_selector, keccak256
from chainvet.standard.versions import (
    ContractBytecodeImmutables,
    ContractVersions,
    L1ContractBytecodeHashes,
    VersionedContract,
)
from chainvet.utils import retry

# Cannot be checked on chain yet, so it is left out of every comparison.
_UNCHECKED = "ProtocolVersions"

_SEMVER = re.compile(
    r"v(0|[1-9][0-9]*)"
    r"(?:\.(0|[1-9][0-9]*)"
    r"(?:\.(0|[1-9][0-9]*)"
    r"(?:-([0-9A-Za-z.-]+))?"
    r"(?:\+([0-9A-Za-z.-]+))?)?)?"
)


class StandardMismatchError(Exception):
    """On-chain data does not match the standard release."""

    def __init__(self, message: str, diff: str) -> None:
        super().__init__(f"{message}\n{diff}")
        self.diff = diff


# --- semantic versions -----------------------------------------------------


def canonicalize_semver(version: str) -> str:
    """Prefix a version with 'v' so it can be compared as a semantic version."""
    version = version.strip()
    return version if version.startswith("v") else "v" + version


def _parse_semver(version: str) -> tuple[int, int, int, str] | None:
    match = _SEMVER.fullmatch(version)
    if match is None:
        return None
    major, minor, patch, prerelease, build = match.groups()
    if prerelease is not None:
        for ident in prerelease.split("."):
            if not ident or (ident.isdigit() and len(ident) > 1 and ident[0] == "0"):
                return None
    if build is not None and any(not ident for ident in build.split(".")):
        return None
    return int(major), int(minor or 0), int(patch or 0), prerelease or ""


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _compare_prerelease(x: str, y: str) -> int:
    if x == y:
        return 0
    if not x:
        return 1
    if not y:
        return -1
    xs, ys = x.split("."), y.split(".")
    for a, b in zip(xs, ys):
        if a == b:
            continue
        a_num, b_num = a.isdigit(), b.isdigit()
        if a_num and b_num:
            return _cmp(int(a), int(b))
        if a_num:
            return -1
        if b_num:
            return 1
        return _cmp(a, b)
    return _cmp(len(xs), len(ys))


def compare_semver(a: str, b: str) -> int:
    """-1, 0 or 1 as a is older, equal or newer than b; invalid versions sort first."""
    pa, pb = _parse_semver(a), _parse_semver(b)
    if pa is None or pb is None:
        return _cmp(pa is not None, pb is not None)
    core = _cmp(pa[:3], pb[:3])
    if core:
        return core
    return _compare_prerelease(pa[3], pb[3])


# --- comparisons -----------------------------------------------------------


def check_match(standard: L1ContractBytecodeHashes, actual: L1ContractBytecodeHashes) -> bool:
    """True if every non-empty standard hash equals the actual one."""
    return all(
        actual.get(name) == value
        for name, value in standard.hashes.items()
        if name != _UNCHECKED and value
    )


def check_match_or_testnet(
    standard: ContractVersions, actual: ContractVersions, is_testnet: bool
) -> bool:
    """True if versions match, or on a testnet if no actual version is older than standard."""
    for name, entry in standard.contracts.items():
        if name == _UNCHECKED or not entry.version:
            continue
        current = actual.get(name).version
        if entry.version == current:
            continue
        if not is_testnet:
            return False
        minimum = canonicalize_semver(entry.version)
        if compare_semver(minimum, canonicalize_semver(current)) > 0:
            return False
    return True


def _diff(standard: Mapping[str, str], actual: Mapping[str, str]) -> str:
    lines: list[str] = []
    for name in dict.fromkeys([*standard, *actual]):
        want, got = standard.get(name, ""), actual.get(name, "")
        if want != got:
            lines.append(f"-  {name}: {want!r}")
            lines.append(f"+  {name}: {got!r}")
    return "\n".join(lines)


def require_standard_semvers(
    standard: ContractVersions, actual: ContractVersions, is_testnet: bool, release: str
) -> None:
    """Raise StandardMismatchError unless the actual versions are acceptable."""
    if check_match_or_testnet(standard, actual, is_testnet):
        return
    diff = _diff(
        {name: entry.version for name, entry in standard.contracts.items()},
        {name: entry.version for name, entry in actual.contracts.items()},
    )
    raise StandardMismatchError(
        f"contract versions do not match the standard versions for the {release} release \n"
        " (-removed from standard / +added to actual):",
        diff,
    )


def require_standard_bytecode_hashes(
    standard: L1ContractBytecodeHashes, actual: L1ContractBytecodeHashes, release: str
) -> None:
    """Raise StandardMismatchError unless the actual bytecode hashes match."""
    if check_match(standard, actual):
        return
    raise StandardMismatchError(
        "contract bytecode hashes do not match the standard bytecode hashes for the "
        f"{release} release \n (-removed from standard / +added to actual):",
        _diff(standard.hashes, actual.hashes),
    )


# --- reading from chain ----------------------------------------------------


def _address_bytes(address: str) -> bytes:
    text = address[2:] if address.startswith(("0x", "0X")) else address
    if len(text) != 40:
        raise ValueError(f"invalid address {address!r}")
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ValueError(f"invalid address {address!r}") from exc


def _bytes_to_address(data: bytes) -> str:
    return "0x" + data[-20:].rjust(20, b"\x00").hex()


def _decode_abi_string(data: bytes) -> str:
    if len(data) < 64:
        raise ValueError("result too short for a string")
    offset = int.from_bytes(data[:32], "big")
    if offset + 32 > len(data):
        raise ValueError("string offset beyond result")
    length = int.from_bytes(data[offset : offset + 32], "big")
    start = offset + 32
    if start + length > len(data):
        raise ValueError("string length beyond result")
    return data[start : start + length].decode("utf-8")


def get_version(client: Any, address: str) -> str:
    """Call version() on the contract at address."""
    try:
        output = retry(client.call)(address, function_selector("version()"))
        return _decode_abi_string(output)
    except (RpcError, ValueError) as exc:
        raise RpcError(f"{address}: {exc}") from exc


def get_contract_impl_addr(client: Any, proxy_admin: str, target: str) -> str:
    """Ask the ProxyAdmin at proxy_admin for the implementation behind the proxy target."""
    try:
        data = function_selector("getProxyImplementation(address)") + _address_bytes(
            target
        ).rjust(32, b"\x00")
    except ValueError as exc:
        raise ValueError(f"{target}: {exc}") from exc
    return _bytes_to_address(retry(client.call)(proxy_admin, data))


def get_bytecode_hash(
    client: Any,
    contract_name: str,
    address: str,
    proxy_admin: str | None,
    immutables: ContractBytecodeImmutables | None,
) -> str:
    """Keccak hash of deployed bytecode with immutables masked; proxies are resolved first."""
    to_check = address
    if contract_name.lower().endswith("proxy"):
        if not proxy_admin:
            raise ValueError(f"{contract_name}: no ProxyAdmin address to resolve the proxy")
        try:
            to_check = get_contract_impl_addr(client, proxy_admin, address)
        except (RpcError, ValueError) as exc:
            raise RpcError(f"{contract_name}/{proxy_admin}: {exc}") from exc

    try:
        code = client.get_code(to_check)
    except RpcError as exc:
        raise RpcError(f"{to_check}: {exc}") from exc

    try:
        masked = init_bytecode_immutable_mask(code, immutables, contract_name)
    except ValueError as exc:
        raise ValueError(
            f"unable to check for presence of immutables in bytecode: {exc}"
        ) from exc
    try:
        masked.mask_bytecode(contract_name)
    except ValueError as exc:
        raise ValueError(f"unable to retrieve bytecode without immutables: {exc}") from exc
    return "0x" + keccak256(bytes(masked.bytecode)).hex()


def _resolve(addresses: Mapping[str, str], name: str) -> tuple[str, str]:
    """The address of a contract and the name it was found under, trying its proxy second."""
    for candidate in (name, name + "Proxy"):
        address = addresses.get(candidate)
        if address:
            return candidate, address
    raise ValueError(f"could not find address for {name}")


def get_contract_versions_from_chain(
    client: Any, addresses: Mapping[str, str], contract_names: Iterable[str]
) -> ContractVersions:
    """Read version() of each named contract concurrently, stored by implementation name."""
    targets = [(name, _resolve(addresses, name)[1]) for name in contract_names]
    if not targets:
        return ContractVersions()
    with ThreadPoolExecutor(max_workers=len(targets)) as pool:
        futures = [(name, pool.submit(get_version, client, address)) for name, address in targets]
        return ContractVersions(
            {name: VersionedContract(version=future.result()) for name, future in futures}
        )


def get_contract_bytecode_hashes_from_chain(
    client: Any,
    addresses: Mapping[str, str],
    contract_names: Iterable[str],
    proxy_admin: str | None,
    immutables: ContractBytecodeImmutables | None,
) -> L1ContractBytecodeHashes:
    """Hash the bytecode of each named contract concurrently, stored by implementation name."""
    targets = []
    for name in contract_names:
        found_as, address = _resolve(addresses, name)
        targets.append((name, found_as, address))
    if not targets:
        return L1ContractBytecodeHashes()
    with ThreadPoolExecutor(max_workers=len(targets)) as pool:
        futures = [
            (
                name,
                pool.submit(
                    get_bytecode_hash, client, found_as, address, proxy_admin, immutables
                ),
            )
            for name, found_as, address in targets
        ]
        return L1ContractBytecodeHashes({name: future.result() for name, future in futures})