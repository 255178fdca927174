from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pybumpmap.config import BumpMapConfig
from pybumpmap.models.location import LocationFix
from pybumpmap.models.point import WeightedGeoPoint
from pybumpmap.models.render import ScreenRect
from pybumpmap.models.sensor import SensorKind, SensorSample
from pybumpmap.sensing.listener import CallbackSensorSource
from pybumpmap.state.scheduler import SchedulerState
from pybumpmap.tracker import RoughnessTracker

if TYPE_CHECKING:
    from conftest import ManualTimerFactory


class _CountingSource:
    def __init__(self) -> None:
        self.registrations = 0
        self.unregistrations = 0

    def register(self, callback) -> None:  # type: ignore[no-untyped-def]
        self.registrations += 1

    def unregister(self) -> None:
        self.unregistrations += 1


class _FlatProjection:
    def to_pixels(self, latitude: float, longitude: float) -> tuple[float, float]:
        return longitude, latitude


def _fix(accuracy: float | None = 5.0, latitude: float = 10.0, longitude: float = 10.0) -> LocationFix:
    return LocationFix(latitude=latitude, longitude=longitude, accuracy=accuracy)


def _tracker(timers: ManualTimerFactory, **kwargs) -> tuple[RoughnessTracker, CallbackSensorSource, list[int]]:  # type: ignore[no-untyped-def]
    gyro = CallbackSensorSource(SensorKind.GYROSCOPE)
    repaints: list[int] = []
    tracker = RoughnessTracker(
        kwargs.pop("config", BumpMapConfig()),
        gyroscope=gyro,
        repaint=lambda: repaints.append(1),
        timer_factory=timers,
        **kwargs,
    )
    return tracker, gyro, repaints


def test_qualifying_score_is_stored_at_fix(timers: ManualTimerFactory) -> None:
    tracker, gyro, repaints = _tracker(timers)
    tracker.start()

    gyro.emit(0.0, 0.0, 2.0)
    gyro.emit(0.0, 3.0, 4.0)
    point = tracker.on_location(_fix(latitude=37.5, longitude=127.0))

    assert point is not None
    assert (point.latitude, point.longitude) == (37.5, 127.0)
    assert point.weight == pytest.approx(2.1)
    assert tracker.store.snapshot() == (point,)
    assert tracker.accumulator.pending_score == 0.0

    timers.fire_all()
    assert repaints == [1]


def test_inaccurate_fix_discards_accumulated_score(timers: ManualTimerFactory) -> None:
    tracker, gyro, _ = _tracker(timers)
    tracker.start()

    gyro.emit(10.0, 0.0, 0.0)
    assert tracker.on_location(_fix(accuracy=25.0)) is None

    assert len(tracker.store) == 0
    assert tracker.accumulator.pending_score == 0.0
    assert timers.timers == []


def test_accuracy_equal_to_threshold_is_accepted(timers: ManualTimerFactory) -> None:
    tracker, gyro, _ = _tracker(timers)
    tracker.start()

    gyro.emit(10.0, 0.0, 0.0)

    assert tracker.on_location(_fix(accuracy=20.0)) is not None


def test_unknown_accuracy_is_accepted(timers: ManualTimerFactory) -> None:
    tracker, gyro, _ = _tracker(timers)
    tracker.start()

    gyro.emit(10.0, 0.0, 0.0)

    assert tracker.on_location(_fix(accuracy=None)) is not None


def test_score_at_or_below_threshold_is_dropped(timers: ManualTimerFactory) -> None:
    tracker, gyro, _ = _tracker(timers, config=BumpMapConfig(bump_threshold=0.3))
    tracker.start()

    gyro.emit(1.0, 0.0, 0.0)  # exactly 0.3
    assert tracker.on_location(_fix()) is None
    assert tracker.on_location(_fix()) is None

    assert len(tracker.store) == 0


def test_burst_of_points_triggers_one_repaint(timers: ManualTimerFactory) -> None:
    tracker, gyro, repaints = _tracker(timers)
    tracker.start()

    for _ in range(5):
        gyro.emit(5.0, 0.0, 0.0)
        tracker.on_location(_fix())

    assert len(tracker.store) == 5
    assert len(timers.timers) == 1
    timers.fire_all()
    assert repaints == [1]


def test_first_point_callback_runs_once(timers: ManualTimerFactory) -> None:
    seen: list[WeightedGeoPoint] = []
    tracker, gyro, _ = _tracker(timers, on_first_point=seen.append)
    tracker.start()

    for latitude in (1.0, 2.0):
        gyro.emit(5.0, 0.0, 0.0)
        tracker.on_location(_fix(latitude=latitude))

    assert [p.latitude for p in seen] == [1.0]


def test_stop_unregisters_and_cancels_repaint(timers: ManualTimerFactory) -> None:
    tracker, gyro, repaints = _tracker(timers)
    tracker.start()
    gyro.emit(5.0, 0.0, 0.0)
    tracker.on_location(_fix())

    tracker.stop()

    assert not gyro.is_registered
    assert tracker.scheduler.state == SchedulerState.IDLE
    gyro.emit(5.0, 0.0, 0.0)
    assert tracker.accumulator.pending_score == 0.0
    timers.fire_all()
    assert repaints == []


def test_listener_start_and_stop_are_idempotent(timers: ManualTimerFactory) -> None:
    accel = _CountingSource()
    tracker = RoughnessTracker(accelerometer=accel, timer_factory=timers)

    assert tracker.start() is True
    assert tracker.start() is True
    tracker.stop()
    tracker.stop()

    assert accel.registrations == 1
    assert accel.unregistrations == 1


def test_no_sensors_notifies_host(timers: ManualTimerFactory) -> None:
    notified: list[bool] = []
    tracker = RoughnessTracker(on_sensors_unavailable=lambda: notified.append(True), timer_factory=timers)

    assert tracker.start() is False
    assert notified == [True]
    assert not tracker.listener.is_registered


def test_context_manager_drives_lifecycle(timers: ManualTimerFactory) -> None:
    gyro = CallbackSensorSource(SensorKind.GYROSCOPE)

    with RoughnessTracker(gyroscope=gyro, timer_factory=timers) as tracker:
        assert gyro.is_registered
        tracker.on_sample(SensorSample(kind=SensorKind.GYROSCOPE, x=1.0, y=0.0, z=0.0))
        assert tracker.accumulator.pending_score == pytest.approx(0.3)

    assert not gyro.is_registered


def test_render_reads_store_snapshot(timers: ManualTimerFactory) -> None:
    tracker = RoughnessTracker(timer_factory=timers)
    tracker.load(
        [
            WeightedGeoPoint(latitude=10.0, longitude=10.0, weight=1.0),
            WeightedGeoPoint(latitude=20.0, longitude=20.0, weight=2.0),
        ]
    )

    commands = tracker.render(ScreenRect(left=0, top=0, right=50, bottom=50), _FlatProjection())

    assert [c.weight for c in commands] == [1.0, 2.0]
    tracker.clear()
    assert tracker.render(ScreenRect(left=0, top=0, right=50, bottom=50), _FlatProjection()) == []
