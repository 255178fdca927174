"""Sensor subscription lifecycle.

Hosts expose each physical sensor as a :class:`SensorSource`. The
:class:`SensorListener` registers every available source on ``start()``
and unregisters on ``stop()``; both calls are idempotent, so pause/resume
style hosts can call them as often as their lifecycle fires.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Protocol

from pybumpmap.models.sensor import SensorKind, SensorSample

_logger = logging.getLogger(__name__)

SampleCallback = Callable[[SensorSample], None]


class SensorSource(Protocol):
    """A stream of samples from one sensor."""

    def register(self, callback: SampleCallback) -> None: ...

    def unregister(self) -> None: ...


class CallbackSensorSource:
    """In-process sensor source fed by the host.

    Samples emitted while no callback is registered are dropped.
    """

    def __init__(self, kind: SensorKind) -> None:
        self.kind = kind
        self._callback: SampleCallback | None = None
        self._lock = threading.Lock()

    @property
    def is_registered(self) -> bool:
        return self._callback is not None

    def register(self, callback: SampleCallback) -> None:
        with self._lock:
            self._callback = callback

    def unregister(self) -> None:
        with self._lock:
            self._callback = None

    def emit(self, x: float, y: float, z: float, *, timestamp: float | None = None) -> None:
        self.emit_sample(SensorSample(kind=self.kind, x=x, y=y, z=z, timestamp=timestamp))

    def emit_sample(self, sample: SensorSample) -> None:
        with self._lock:
            callback = self._callback
        if callback is None:
            return
        callback(sample)


class SensorListener:
    """Registers the available sensors as one unit.

    Parameters
    ----------
    on_sample : callable
        Receives every sample from every registered source.
    accelerometer, gyroscope : SensorSource or None
        ``None`` when the device lacks that sensor; its contribution is
        simply omitted.
    on_unavailable : callable or None
        Called from ``start()`` when neither sensor exists, so the host can
        tell the user the feature is inert.
    """

    def __init__(
        self,
        on_sample: SampleCallback,
        *,
        accelerometer: SensorSource | None = None,
        gyroscope: SensorSource | None = None,
        on_unavailable: Callable[[], None] | None = None,
    ) -> None:
        self._on_sample = on_sample
        self._sources: dict[SensorKind, SensorSource | None] = {
            SensorKind.ACCELEROMETER: accelerometer,
            SensorKind.GYROSCOPE: gyroscope,
        }
        self._on_unavailable = on_unavailable
        self._registered = False

    @property
    def is_registered(self) -> bool:
        return self._registered

    @property
    def available(self) -> frozenset[SensorKind]:
        return frozenset(kind for kind, source in self._sources.items() if source is not None)

    def start(self) -> bool:
        """Register every available source.

        Returns ``True`` when at least one sensor is registered.
        """
        if self._registered:
            return True

        for kind, source in self._sources.items():
            if source is None:
                _logger.warning("%s is not available; its contribution is omitted", kind.value)
                continue
            source.register(self._on_sample)
            _logger.debug("Registered %s listener", kind.value)

        if not self.available:
            _logger.warning("No inertial sensors available; bump tracking is inert")
            if self._on_unavailable is not None:
                self._on_unavailable()
            return False

        self._registered = True
        return True

    def stop(self) -> None:
        """Unregister every source registered by ``start()``."""
        if not self._registered:
            return
        for source in self._sources.values():
            if source is not None:
                source.unregister()
        self._registered = False
        _logger.debug("Sensor listeners unregistered")
