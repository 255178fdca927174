"""Bump score accumulation between location ticks."""

from __future__ import annotations

import logging
import threading

from pybumpmap._constants import DEFAULT_GRAVITY_ALPHA, DEFAULT_GYRO_WEIGHT
from pybumpmap.models.sensor import SensorSample, Vec3
from pybumpmap.sensing.filter import SensorFusionFilter

_logger = logging.getLogger(__name__)


class BumpAccumulator:
    """Owns the fusion filter and hands out its score once per location tick.

    ``accumulate`` and ``flush`` share one lock, so a flush never observes
    half of a sample and two flushes never overlap when samples arrive on
    another thread.
    """

    def __init__(
        self,
        *,
        alpha: float = DEFAULT_GRAVITY_ALPHA,
        gyro_weight: float = DEFAULT_GYRO_WEIGHT,
        fusion_filter: SensorFusionFilter | None = None,
    ) -> None:
        self._filter = fusion_filter or SensorFusionFilter(alpha=alpha, gyro_weight=gyro_weight)
        self._lock = threading.Lock()

    @property
    def gravity(self) -> Vec3:
        with self._lock:
            return self._filter.gravity

    @property
    def pending_score(self) -> float:
        """Score accumulated since the last flush, without resetting it."""
        with self._lock:
            return self._filter.running_score

    def accumulate(self, sample: SensorSample) -> None:
        with self._lock:
            self._filter.on_sample(sample)

    def flush(self) -> float:
        """Return the score accumulated since the previous flush and reset it."""
        with self._lock:
            score = self._filter.take_score()
        _logger.debug("Flushed bump score=%.4f", score)
        return score
