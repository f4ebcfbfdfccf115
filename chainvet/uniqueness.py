"""Checks that a chain's ID, name and public RPC match the global chain list."""

from __future__ import annotations

import json
import re
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from string import ascii_letters, digits
from typing import Any
from urllib.parse import quote, unquote

import requests

CHAIN_LIST_URL = "https://chainid.network/chains_mini.json"
USER_AGENT = "optimism-superchain-registry-validation"


class UniquenessError(Exception):
    """A chain is not uniquely and correctly listed."""

    message = "chain is not globally unique"

    def __init__(self, detail: str = "") -> None:
        super().__init__(f"{self.message}{detail}")


class ChainIdNotListedError(UniquenessError):
    message = "chain ID is not listed at chainid.network"


class LocalChainNameMismatchError(UniquenessError):
    message = "local chain name does not match name from chainid.network"


class ChainIdDuplicatedError(UniquenessError):
    message = "chain ID is duplicated"


class ChainNameDuplicatedError(UniquenessError):
    message = "chain name duplicated"


class ChainPublicRpcNotListedError(UniquenessError):
    message = "chain public RPC not listed in chainid.network"


@dataclass(frozen=True)
class UniqueProperties:
    """What the global chain list records for one chain ID."""

    name: str
    short_name: str
    rpc: list[str] = field(default_factory=list)


class ChainInfo:
    """Thread-safe record of chain IDs and names seen locally."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._chain_ids: set[int] = set()
        self._chain_names: set[str] = set()

    def add_if_unique(self, chain_id: int, chain_name: str) -> None:
        """Record the chain, raising if its ID or name was seen before."""
        with self._lock:
            if chain_id in self._chain_ids:
                raise ChainIdDuplicatedError(f": {chain_id}")
            self._chain_ids.add(chain_id)
            if chain_name in self._chain_names:
                raise ChainNameDuplicatedError(f": {chain_name}")
            self._chain_names.add(chain_name)


# --- URL parsing -----------------------------------------------------------

_SCHEME_CHARS = frozenset(ascii_letters + digits + "+-.")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_PATH_SAFE = "/:@&=+$,;"
_VALID_ENCODED = frozenset(ascii_letters + digits + "-_.~$&+,/:;=@!'()*[]%")


@dataclass
class _ParsedURL:
    scheme: str = ""
    opaque: str | None = None
    userinfo: str | None = None
    host: str = ""
    raw_path: str = ""
    omit_host: bool = False
    query: str = ""
    force_query: bool = False
    fragment: str = ""


def _split_scheme(raw: str) -> tuple[str, str]:
    for index, char in enumerate(raw):
        if char in ascii_letters:
            continue
        if char in _SCHEME_CHARS:
            if index == 0:
                return "", raw
            continue
        if char == ":":
            if index == 0:
                raise ValueError("missing protocol scheme")
            return raw[:index], raw[index + 1 :]
        return "", raw
    return "", raw


def _valid_optional_port(port: str) -> bool:
    if not port:
        return True
    return port[0] == ":" and all(char in digits for char in port[1:])


def _check_escapes(text: str) -> None:
    if _BAD_ESCAPE.search(text):
        raise ValueError(f"invalid URL escape in {text!r}")


def _check_host(host: str) -> None:
    if host.startswith("["):
        close = host.rfind("]")
        if close < 0:
            raise ValueError("missing ']' in host")
        port = host[close + 1 :]
        if not _valid_optional_port(port):
            raise ValueError(f"invalid port {port!r} after host")
    else:
        colon = host.rfind(":")
        if colon != -1 and not _valid_optional_port(host[colon:]):
            raise ValueError(f"invalid port {host[colon:]!r} after host")
    _check_escapes(host)


def _parse(raw: str) -> _ParsedURL:
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in raw):
        raise ValueError("invalid control character in URL")
    parsed = _ParsedURL()
    rest, _, parsed.fragment = raw.partition("#")
    parsed.scheme, rest = _split_scheme(rest)
    parsed.scheme = parsed.scheme.lower()
    rest, question, parsed.query = rest.partition("?")
    parsed.force_query = bool(question) and not parsed.query

    if not rest.startswith("/"):
        if parsed.scheme:
            parsed.opaque = rest
            return parsed
        segment = rest.partition("/")[0]
        if ":" in segment:
            raise ValueError("first path segment in URL cannot contain colon")

    if (parsed.scheme or not rest.startswith("///")) and rest.startswith("//"):
        authority, slash, remainder = rest[2:].partition("/")
        rest = slash + remainder
        userinfo, at, host = authority.rpartition("@")
        if at:
            parsed.userinfo = userinfo
        _check_host(host)
        parsed.host = host
    elif parsed.scheme and rest.startswith("/"):
        parsed.omit_host = True

    _check_escapes(rest)
    parsed.raw_path = rest
    return parsed


def _port(host: str) -> str:
    colon = host.rfind(":")
    if colon == -1:
        return ""
    bracket = host.find("]:")
    if bracket != -1:
        return host[bracket + 2 :]
    if "]" in host:
        return ""
    return host[colon + 1 :]


def _hostname(host: str) -> str:
    colon = host.rfind(":")
    if colon != -1 and _valid_optional_port(host[colon:]):
        host = host[:colon]
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host


def _valid_encoded(raw_path: str) -> bool:
    return all(char in _VALID_ENCODED for char in raw_path)


def normalize_url(raw_url: str) -> str:
    """Canonical form of a URL: lower-case scheme and host, trailing slash, no default port."""
    parsed = _parse(raw_url)
    scheme = parsed.scheme.lower()

    if parsed.opaque is not None:
        result = f"{scheme}:{parsed.opaque}"
    else:
        host = parsed.host.lower()
        old_path = unquote(parsed.raw_path, errors="surrogateescape")
        if not old_path:
            path = "/"
        else:
            path = old_path.replace("//", "/")
            if not path.endswith("/"):
                path += "/"

        port = _port(host)
        if (scheme == "http" and port == "80") or (scheme == "https" and port == "443"):
            host = _hostname(host)

        if path == old_path and _valid_encoded(parsed.raw_path):
            escaped_path = parsed.raw_path
        else:
            escaped_path = quote(path, safe=_PATH_SAFE, errors="surrogateescape")

        pieces: list[str] = []
        if scheme:
            pieces.append(f"{scheme}:")
        if scheme or host or parsed.userinfo is not None:
            if not (parsed.omit_host and not host and parsed.userinfo is None):
                pieces.append("//")
                if parsed.userinfo is not None:
                    pieces.append(f"{parsed.userinfo}@")
                pieces.append(host)
        if escaped_path and not escaped_path.startswith("/") and host:
            pieces.append("/")
        if not pieces and ":" in escaped_path.partition("/")[0]:
            pieces.append("./")
        pieces.append(escaped_path)
        result = "".join(pieces)

    if parsed.force_query or parsed.query:
        result += f"?{parsed.query}"
    if parsed.fragment:
        result += f"#{parsed.fragment}"
    return result


# --- global chain list -----------------------------------------------------


def parse_global_chains(entries: Iterable[Mapping[str, Any]]) -> dict[int, UniqueProperties]:
    """Index decoded chain list entries by chain ID, normalising their RPC URLs."""
    chains: dict[int, UniqueProperties] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise ValueError(f"expected a chain object, got {entry!r}")
        chain_id = entry.get("chainId", 0)
        if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id < 0:
            raise ValueError(f"invalid chainId {chain_id!r}")
        if chain_id in chains:
            raise ValueError(
                f"Chains listed at {CHAIN_LIST_URL} have duplicate chain Id {chain_id}"
            )
        rpc = [normalize_url(url) for url in entry.get("rpc") or []]
        chains[chain_id] = UniqueProperties(
            name=entry.get("name") or "",
            short_name=entry.get("shortName") or "",
            rpc=rpc,
        )
    return chains


def fetch_global_chains(
    url: str = CHAIN_LIST_URL, timeout: float = 30.0
) -> dict[int, UniqueProperties]:
    """Download the global chain list and index it by chain ID."""
    response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    entries = json.loads(response.content)
    if not isinstance(entries, list):
        raise ValueError(f"expected a list of chains from {url}")
    return parse_global_chains(entries)


def check_is_globally_unique(
    global_ids: Mapping[int, UniqueProperties],
    chains: ChainInfo,
    chain_id: int,
    name: str,
    public_rpc: str,
) -> None:
    """Raise a UniquenessError unless the chain is listed, named and reachable as declared."""
    props = global_ids.get(chain_id)
    if props is None:
        raise ChainIdNotListedError()
    if props.name != name:
        raise LocalChainNameMismatchError(f", chainId={chain_id}")
    if normalize_url(public_rpc) not in props.rpc:
        raise ChainPublicRpcNotListedError()
    chains.add_if_unique(chain_id, name)