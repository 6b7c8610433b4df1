"""
Index-space scanning.

The ledger has no "list" query, only a counter and point lookups, so every
collection is rebuilt by looking up each index in [0, count).  Each lookup
becomes a ScanOutcome (value or error) and the skip policy is an explicit fold
over those outcomes: failures are logged and dropped, successes kept in index
order.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from ledgersync.errors import NotInitialized, ProviderUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ScanOutcome(Generic[T]):
    index: int
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def collect(
    count: int,
    fetch: Callable[[int], Awaitable[T]],
    concurrency: int = 1,
) -> List[ScanOutcome[T]]:
    """
    Look up every index in [0, count) with at most `concurrency` lookups in
    flight.  Returns one outcome per index, ordered by index.  Losing the
    gateway (NotInitialized / ProviderUnavailable) aborts the whole scan.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def lookup(index: int) -> ScanOutcome[T]:
        async with semaphore:
            try:
                return ScanOutcome(index=index, value=await fetch(index))
            except (NotInitialized, ProviderUnavailable):
                # gateway lost its identity mid-scan; the whole scan is void
                raise
            except Exception as e:
                return ScanOutcome(index=index, error=e)

    outcomes = await asyncio.gather(*[lookup(i) for i in range(count)])
    return sorted(outcomes, key=lambda o: o.index)


def fold(outcomes: List[ScanOutcome[T]], label: str) -> List[T]:
    """Keep successful values in index order; log and skip failures."""
    values: List[T] = []
    for outcome in outcomes:
        if outcome.ok:
            values.append(outcome.value)
        else:
            logger.warning("Could not fetch %s %d: %s", label, outcome.index, outcome.error)
    return values


def failed_indices(outcomes: List[ScanOutcome[Any]]) -> List[int]:
    return [o.index for o in outcomes if not o.ok]
