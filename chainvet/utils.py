"""Bounds checks, retries and calls to contracts through the cast tool."""

from __future__ import annotations

import functools
import random
import subprocess
import time
from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeVar

DEFAULT_MAX_RETRIES = 3

_MAX_BACKOFF_SECONDS = 10.0
_MAX_JITTER_SECONDS = 0.25

T = TypeVar("T")


class _Comparable(Protocol):
    def __lt__(self, other: Any, /) -> bool: ...

    def __le__(self, other: Any, /) -> bool: ...


class CastCallError(RuntimeError):
    """The cast tool failed or returned nothing."""


def is_within_bounds(actual: Any, bounds: Sequence[Any]) -> bool:
    """True if actual lies in the inclusive range [lower, upper]."""
    lower, upper = bounds
    if upper < lower:
        raise ValueError("bounds are in wrong order")
    return lower <= actual <= upper


def cast_call(
    contract_address: object,
    calldata: str,
    args: Sequence[str] | None,
    rpc_url: str,
) -> list[str]:
    """Run `cast call` against a contract and return its whitespace-separated output."""
    command = ["cast", "call", str(contract_address), calldata, *(args or ()), "-r", rpc_url]
    try:
        completed = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise CastCallError(f"unable to run cast: {exc}") from exc
    if completed.returncode != 0:
        raise CastCallError(
            f"{completed.stderr}, exit status {completed.returncode}"
        )
    results = completed.stdout.split()
    if not results:
        raise CastCallError("cast call returned empty address")
    return results


def _backoff(attempt: int) -> float:
    delay = 2.0**attempt + random.uniform(0.0, _MAX_JITTER_SECONDS)
    return min(delay, _MAX_BACKOFF_SECONDS)


def retry(
    fn: Callable[..., T], max_retries: int = DEFAULT_MAX_RETRIES
) -> Callable[..., T]:
    """Wrap fn so that it is attempted up to max_retries times with exponential backoff."""
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        for attempt in range(max_retries - 1):
            try:
                return fn(*args, **kwargs)
            except Exception:
                time.sleep(_backoff(attempt))
        return fn(*args, **kwargs)

    return wrapper