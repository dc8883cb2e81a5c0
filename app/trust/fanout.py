"""Fan-out / join combinator for per-entity capability calls.

Every call is scheduled before any is awaited, so latency is bounded by the
slowest call. Failures are captured per key rather than cancelling
siblings, and results stay keyed by entity so identifier and outcome are
never separated.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Dict, Generic, Hashable, Mapping, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one call: a value or the exception it raised."""
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(calls: Mapping[K, Awaitable[T]]) -> Dict[K, Settled[T]]:
    """Run all awaitables concurrently and collect outcomes by key.

    Keys keep their mapping order. Cancellation is not captured: if the
    caller is cancelled the whole join is abandoned.
    """
    keys = list(calls.keys())
    results = await asyncio.gather(*calls.values(), return_exceptions=True)

    settled: Dict[K, Settled[T]] = {}
    for key, result in zip(keys, results):
        if isinstance(result, Exception):
            settled[key] = Settled(error=result)
        elif isinstance(result, BaseException):
            raise result
        else:
            settled[key] = Settled(value=result)
    return settled
