"""A small JSON-RPC client for reading contract state from an Ethereum node."""

from __future__ import annotations

import itertools
from typing import Any

import requests
from Crypto.Hash import keccak


class RpcError(RuntimeError):
    """A JSON-RPC request failed or returned something unusable."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


def keccak256(data: bytes) -> bytes:
    """The Keccak-256 digest of data."""
    digest = keccak.new(digest_bits=256)
    digest.update(data)
    return digest.digest()


def function_selector(signature: str) -> bytes:
    """The four-byte selector of a Solidity function signature such as 'version()'."""
    return keccak256(signature.encode())[:4]


def _hex_bytes(value: Any, method: str) -> bytes:
    if not isinstance(value, str) or not value.startswith(("0x", "0X")):
        raise RpcError(f"{method}: expected a hex string, got {value!r}")
    text = value[2:]
    if len(text) % 2:
        text = "0" + text
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise RpcError(f"{method}: invalid hex result {value!r}") from exc


class JsonRpcClient:
    """Client for the eth_call and eth_getCode methods of a node."""

    def __init__(
        self,
        url: str,
        *,
        session: Any | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout
        self._ids = itertools.count(1)

    def __enter__(self) -> JsonRpcClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP session."""
        close = getattr(self._session, "close", None)
        if close is not None:
            close()

    def _request(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self._session.post(self.url, json=payload, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RpcError(f"{method}: {exc}") from exc
        if not isinstance(body, dict):
            raise RpcError(f"{method}: malformed response {body!r}")
        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RpcError(f"{method}: {error.get('message', error)}", error.get("code"))
            raise RpcError(f"{method}: {error}")
        if "result" not in body:
            raise RpcError(f"{method}: response holds no result")
        return body["result"]

    def call(self, to: str, data: bytes) -> bytes:
        """Execute a read-only call against the latest block and return its output."""
        result = self._request("eth_call", [{"to": to, "data": "0x" + data.hex()}, "latest"])
        return _hex_bytes(result, "eth_call")

    def get_code(self, address: str) -> bytes:
        """The deployed bytecode at address in the latest block."""
        result = self._request("eth_getCode", [address, "latest"])
        return _hex_bytes(result, "eth_getCode")