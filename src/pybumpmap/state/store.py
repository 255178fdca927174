"""Fixed-capacity, insertion-ordered store of weighted geo points."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterable

from pybumpmap._constants import DEFAULT_CAPACITY
from pybumpmap.exceptions import BumpMapConfigError
from pybumpmap.models.point import WeightedGeoPoint

_logger = logging.getLogger(__name__)


class GeoTaggedPointStore:
    """Chronological store of points with strict FIFO eviction.

    Insertion order is meaningful: the renderer draws newer points last.
    Writers and ``snapshot()`` share one lock and snapshots are tuple
    copies, so a render pass never sees a partially applied batch and
    later writes never show through an earlier snapshot.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise BumpMapConfigError(f"capacity must be positive, got {capacity}", field="capacity")
        self._capacity = capacity
        self._points: deque[WeightedGeoPoint] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)

    def add(self, point: WeightedGeoPoint) -> None:
        """Append *point*, evicting the oldest entry when full."""
        with self._lock:
            evicted = len(self._points) == self._capacity
            self._points.append(point)
        if evicted:
            _logger.debug("Store at capacity=%d; evicted oldest point", self._capacity)

    def add_batch(self, points: Iterable[WeightedGeoPoint]) -> None:
        """Append all *points* in order, then evict down to capacity."""
        batch = list(points)
        if not batch:
            return
        with self._lock:
            overflow = max(0, len(self._points) + len(batch) - self._capacity)
            self._points.extend(batch)
        if overflow:
            _logger.debug("Batch of %d evicted %d oldest points", len(batch), overflow)

    def replace(self, points: Iterable[WeightedGeoPoint]) -> None:
        """Swap the contents for *points*, keeping only the newest ``capacity``."""
        batch = list(points)
        with self._lock:
            self._points.clear()
            self._points.extend(batch)

    def clear(self) -> None:
        with self._lock:
            self._points.clear()

    def snapshot(self) -> tuple[WeightedGeoPoint, ...]:
        """Immutable, consistent copy of the current contents, oldest first."""
        with self._lock:
            return tuple(self._points)
