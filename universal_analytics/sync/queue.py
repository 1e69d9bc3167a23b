"""
Hit queue and batch planning for tracking calls.
"""

import math
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Sequence

from universal_analytics.exceptions import ConfigurationError

Hit = dict[str, str]
DispatchUnit = list[Hit]


@dataclass(frozen=True)
class BatchingPolicy:
    """Whether and how hits are grouped into a single request."""

    enabled: bool = False
    batch_size: int = 10

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be a positive integer, got {self.batch_size}")

    @property
    def effective_batch_size(self) -> int:
        """Number of hits a single dispatch unit may hold."""
        return self.batch_size if self.enabled else 1

    def planned_units(self, hit_count: int) -> int:
        """Number of dispatch units `hit_count` hits are split into."""
        return math.ceil(hit_count / self.effective_batch_size)


class HitQueue:
    """
    In-memory FIFO of hits waiting to be sent.

    One queue exists per root visitor and is shared by reference with every
    context view derived from it. None of the operations await, so under a
    single event loop an append can never interleave with a drain.
    """

    def __init__(self, hits: Iterable[Hit] = ()):
        self._hits: deque[Hit] = deque(hits)

    def __len__(self) -> int:
        return len(self._hits)

    def __bool__(self) -> bool:
        return bool(self._hits)

    def __iter__(self):
        return iter(list(self._hits))

    def append(self, hit: Hit) -> None:
        """Add a hit to the tail of the queue."""
        self._hits.append(hit)

    def extend(self, hits: Iterable[Hit]) -> None:
        """Add several hits to the tail of the queue, keeping their order."""
        self._hits.extend(hits)

    def drain(self, max_count: int) -> list[Hit]:
        """
        Remove and return up to `max_count` hits from the head of the queue.

        Args:
            max_count: Maximum number of hits to remove

        Returns:
            The removed hits in queue order (fewer if the queue is shorter)
        """
        count = min(max(max_count, 0), len(self._hits))
        return [self._hits.popleft() for _ in range(count)]

    def drain_all(self) -> list[Hit]:
        """Remove and return every queued hit."""
        return self.drain(len(self._hits))

    def drain_units(self, policy: BatchingPolicy) -> list[DispatchUnit]:
        """Empty the queue in one step and split its contents into dispatch units."""
        return plan_dispatch_units(self.drain_all(), policy)

    def get_stats(self) -> dict:
        """Get queue statistics."""
        return {
            "queue_size": len(self._hits),
        }


def plan_dispatch_units(hits: Sequence[Hit], policy: BatchingPolicy) -> list[DispatchUnit]:
    """
    Partition hits into dispatch units, one HTTP request each.

    Without batching every hit becomes its own unit. With batching hits are
    taken in FIFO order in chunks of `policy.batch_size`, the last chunk may
    be shorter. Empty input yields no units.

    Args:
        hits: Hits in queue order
        policy: Batching policy to apply

    Returns:
        Non-empty units that together contain every hit exactly once, in order
    """
    size = policy.effective_batch_size
    units = [list(hits[i:i + size]) for i in range(0, len(hits), size)]
    return [unit for unit in units if unit]
