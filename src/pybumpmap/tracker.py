"""High-level roughness tracker.

Wires sensor sources, the bump accumulator, the point store, the repaint
scheduler and the heatmap renderer together. Location ticks drive the
flush/insert cycle.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pybumpmap.config import BumpMapConfig
from pybumpmap.models.location import LocationFix
from pybumpmap.models.point import WeightedGeoPoint
from pybumpmap.models.render import DrawCommand, ScreenRect
from pybumpmap.models.sensor import SensorSample
from pybumpmap.render.heatmap import HeatmapRenderer, RenderSurface, paint
from pybumpmap.render.projection import Projection
from pybumpmap.sensing.accumulator import BumpAccumulator
from pybumpmap.sensing.listener import SensorListener, SensorSource
from pybumpmap.state.scheduler import TimerFactory, UpdateScheduler, threading_timer
from pybumpmap.state.store import GeoTaggedPointStore

_logger = logging.getLogger(__name__)


class RoughnessTracker:
    """Collects bump scores per location fix and renders them as a heatmap.

    Usage::

        with RoughnessTracker(config, accelerometer=accel, gyroscope=gyro, repaint=view.invalidate) as tracker:
            ...
            tracker.on_location(fix)
            commands = tracker.render(view.screen_rect, view.projection)

    Parameters
    ----------
    config : BumpMapConfig or None
        Thresholds and render settings; defaults when omitted.
    accelerometer, gyroscope : SensorSource or None
        Sensor sources; ``None`` for a sensor the device lacks.
    repaint : callable or None
        Host hook called (debounced) after points are stored.
    on_first_point : callable or None
        Called once with the first point stored, e.g. to centre the map.
    on_sensors_unavailable : callable or None
        Called from ``start()`` when neither sensor exists.
    timer_factory : TimerFactory
        Delay primitive for the repaint debounce.
    """

    def __init__(
        self,
        config: BumpMapConfig | None = None,
        *,
        accelerometer: SensorSource | None = None,
        gyroscope: SensorSource | None = None,
        repaint: Callable[[], None] | None = None,
        on_first_point: Callable[[WeightedGeoPoint], None] | None = None,
        on_sensors_unavailable: Callable[[], None] | None = None,
        timer_factory: TimerFactory = threading_timer,
    ) -> None:
        self._config = config or BumpMapConfig()
        self._accumulator = BumpAccumulator(
            alpha=self._config.gravity_alpha,
            gyro_weight=self._config.gyro_weight,
        )
        self._store = GeoTaggedPointStore(self._config.capacity)
        self._renderer = HeatmapRenderer(self._config.render_config())
        self._repaint_hook = repaint
        self._scheduler = UpdateScheduler(
            self._on_repaint,
            delay=self._config.debounce_delay,
            timer_factory=timer_factory,
        )
        self._listener = SensorListener(
            self.on_sample,
            accelerometer=accelerometer,
            gyroscope=gyroscope,
            on_unavailable=on_sensors_unavailable,
        )
        self._on_first_point = on_first_point
        self._first_point_seen = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> RoughnessTracker:
        self.start()
        return self

    def __exit__(self, *_: Any) -> None:
        self.stop()

    def start(self) -> bool:
        """Register sensors and enable repaints.

        Returns ``False`` when no sensor is available.
        """
        self._scheduler.start()
        return self._listener.start()

    def stop(self) -> None:
        """Unregister sensors and cancel any pending repaint."""
        self._listener.stop()
        self._scheduler.stop()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> BumpMapConfig:
        return self._config

    @property
    def store(self) -> GeoTaggedPointStore:
        return self._store

    @property
    def accumulator(self) -> BumpAccumulator:
        return self._accumulator

    @property
    def scheduler(self) -> UpdateScheduler:
        return self._scheduler

    @property
    def listener(self) -> SensorListener:
        return self._listener

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def on_sample(self, sample: SensorSample) -> None:
        self._accumulator.accumulate(sample)

    def on_location(self, fix: LocationFix) -> WeightedGeoPoint | None:
        """Flush the accumulated score and store it at *fix* if it qualifies.

        The score is always reset. It is dropped when the fix is less
        accurate than the configured threshold or when it does not exceed
        the bump threshold.
        """
        score = self._accumulator.flush()

        if not fix.is_accurate(self._config.accuracy_threshold):
            _logger.warning(
                "Discarding fix with poor accuracy=%.1f (threshold=%.1f)",
                fix.accuracy,
                self._config.accuracy_threshold,
            )
            return None

        if score <= self._config.bump_threshold:
            return None

        point = WeightedGeoPoint(latitude=fix.latitude, longitude=fix.longitude, weight=score)
        self._store.add(point)
        self._scheduler.request_repaint()
        _logger.debug("Stored point lat=%.6f lon=%.6f weight=%.4f", point.latitude, point.longitude, score)

        if not self._first_point_seen:
            self._first_point_seen = True
            if self._on_first_point is not None:
                self._on_first_point(point)
        return point

    def load(self, points: Iterable[WeightedGeoPoint]) -> None:
        """Append previously collected points in order."""
        self._store.add_batch(points)
        self._scheduler.request_repaint()

    def clear(self) -> None:
        self._store.clear()
        self._scheduler.request_repaint()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, viewport: ScreenRect, projection: Projection) -> list[DrawCommand]:
        return self._renderer.render(self._store.snapshot(), viewport, projection)

    def render_to(self, surface: RenderSurface, viewport: ScreenRect, projection: Projection) -> int:
        return paint(surface, self.render(viewport, projection))

    def _on_repaint(self) -> None:
        if self._repaint_hook is not None:
            self._repaint_hook()
