from __future__ import annotations

import asyncio
import json
import math
from collections.abc import Callable
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, cast

import pytest

from pybumpmap import _mqtt
from pybumpmap._mqtt import BumpMqttRuntime, decode_location, decode_sample
from pybumpmap.exceptions import BumpMapPayloadError
from pybumpmap.models.location import LocationFix
from pybumpmap.models.sensor import SensorKind, SensorSample
from pybumpmap.tracker import RoughnessTracker

if TYPE_CHECKING:
    from conftest import ManualTimerFactory


class _ImmediateLoop:
    """Runs ``call_soon_threadsafe`` callbacks inline."""

    def call_soon_threadsafe(self, callback: Callable[..., Any], *args: Any) -> None:
        callback(*args)


def _runtime(fixes: list[LocationFix]) -> BumpMqttRuntime:
    loop = cast(asyncio.AbstractEventLoop, _ImmediateLoop())
    return BumpMqttRuntime(loop=loop, on_location=fixes.append, topic_prefix="car/42")


def test_decode_sample_from_values_array() -> None:
    sample = decode_sample(b'{"values": [0.1, -0.2, 9.7], "timestamp": 1700000000}', SensorKind.ACCELEROMETER)

    assert sample.kind == SensorKind.ACCELEROMETER
    assert (sample.x, sample.y, sample.z) == (0.1, -0.2, 9.7)
    assert sample.timestamp == 1_700_000_000.0


def test_decode_location_with_aliases() -> None:
    fix = decode_location(json.dumps({"lat": 37.5, "lon": 127.0, "horizontalAccuracy": 8}).encode())

    assert (fix.latitude, fix.longitude, fix.accuracy) == (37.5, 127.0, 8.0)


@pytest.mark.parametrize(
    "payload",
    [b"not json", b"[1, 2, 3]", b'{"x": 1}', b"\xff\xfe"],
)
def test_bad_sample_payloads_raise(payload: bytes) -> None:
    with pytest.raises(BumpMapPayloadError) as exc_info:
        decode_sample(payload, SensorKind.GYROSCOPE, topic="car/42/gyroscope")
    assert exc_info.value.topic == "car/42/gyroscope"


def test_bad_location_payload_raises() -> None:
    with pytest.raises(BumpMapPayloadError):
        decode_location(b'{"latitude": 123.0, "longitude": 0}')


def test_runtime_routes_topics_to_sources() -> None:
    fixes: list[LocationFix] = []
    runtime = _runtime(fixes)
    samples: list[SensorSample] = []
    runtime.accelerometer.register(samples.append)
    runtime.gyroscope.register(samples.append)

    runtime.handle_message("car/42/accelerometer", b'{"x": 0, "y": 0, "z": 9.8}')
    runtime.handle_message("car/42/gyroscope", b'{"values": [1, 2, 3]}')
    runtime.handle_message("car/42/location", b'{"latitude": 1.5, "longitude": 2.5, "accuracy": 4}')

    assert [s.kind for s in samples] == [SensorKind.ACCELEROMETER, SensorKind.GYROSCOPE]
    assert fixes == [LocationFix(latitude=1.5, longitude=2.5, accuracy=4.0)]


def test_runtime_drops_bad_and_unknown_messages() -> None:
    fixes: list[LocationFix] = []
    runtime = _runtime(fixes)
    samples: list[SensorSample] = []
    runtime.gyroscope.register(samples.append)

    runtime.handle_message("car/42/gyroscope", b"garbage")
    runtime.handle_message("car/42/magnetometer", b'{"x": 1, "y": 2, "z": 3}')
    runtime.handle_message("car/42/location", b"{}")

    assert samples == []
    assert fixes == []
    assert not runtime.is_running


def test_samples_dropped_while_source_unregistered() -> None:
    runtime = _runtime([])
    samples: list[SensorSample] = []

    runtime.handle_message("car/42/gyroscope", b'{"values": [1, 2, 3]}')
    runtime.gyroscope.register(samples.append)
    runtime.handle_message("car/42/gyroscope", b'{"values": [1, 2, 3]}')

    assert len(samples) == 1


@pytest.mark.parametrize(
    "payload",
    [b'{"x": NaN, "y": 0, "z": 9.8}', b'{"values": [0, Infinity, 0]}', b'{"x": 0, "y": 0, "z": -Infinity}'],
)
def test_non_finite_sample_payloads_raise(payload: bytes) -> None:
    with pytest.raises(BumpMapPayloadError):
        decode_sample(payload, SensorKind.ACCELEROMETER)


def test_non_finite_reading_does_not_poison_tracker(timers: ManualTimerFactory) -> None:
    fixes: list[LocationFix] = []
    runtime = _runtime(fixes)
    tracker = RoughnessTracker(accelerometer=runtime.accelerometer, timer_factory=timers)
    tracker.start()

    runtime.handle_message("car/42/accelerometer", b'{"x": NaN, "y": 0, "z": 9.8}')
    for _ in range(3):
        runtime.handle_message("car/42/accelerometer", b'{"x": 0, "y": 0, "z": 9.8}')
        runtime.handle_message("car/42/location", b'{"latitude": 1.5, "longitude": 2.5, "accuracy": 4}')
        tracker.on_location(fixes.pop())

    gravity = tracker.accumulator.gravity
    assert all(math.isfinite(v) for v in (gravity.x, gravity.y, gravity.z))
    points = tracker.store.snapshot()
    assert points
    assert all(math.isfinite(p.weight) for p in points)


class _FakeClient:
    """Stands in for ``paho.mqtt.client.Client``; records calls instead of networking."""

    created: list[_FakeClient] = []

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.calls: list[str] = []
        self.credentials: tuple[str, str | None] | None = None
        self.subscriptions: list[tuple[str, int]] = []
        _FakeClient.created.append(self)

    def enable_logger(self, _logger: Any) -> None:
        pass

    def username_pw_set(self, username: str, password: str | None) -> None:
        self.credentials = (username, password)

    def tls_set(self) -> None:
        self.calls.append("tls_set")

    def connect(self, host: str, port: int, keepalive: int) -> None:
        self.calls.append(f"connect {host}:{port} keepalive={keepalive}")

    def loop_start(self) -> None:
        self.calls.append("loop_start")

    def disconnect(self) -> None:
        self.calls.append("disconnect")

    def loop_stop(self) -> None:
        self.calls.append("loop_stop")

    def subscribe(self, topics: list[tuple[str, int]]) -> None:
        self.subscriptions.extend(topics)


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> type[_FakeClient]:
    _FakeClient.created = []
    monkeypatch.setattr(_mqtt.mqtt, "Client", _FakeClient)
    return _FakeClient


def test_start_connects_and_subscribes_on_connect(fake_client: type[_FakeClient]) -> None:
    fixes: list[LocationFix] = []
    runtime = _runtime(fixes)

    runtime.start("broker.local", 8883, username="phone", password="pw", tls=True)

    assert runtime.is_running
    client = fake_client.created[-1]
    assert client.calls == ["tls_set", "connect broker.local:8883 keepalive=120", "loop_start"]
    assert client.credentials == ("phone", "pw")
    assert client.subscriptions == []

    client.on_connect(client, None, None, SimpleNamespace(value=0), None)
    assert [topic for topic, _ in client.subscriptions] == [
        "car/42/accelerometer",
        "car/42/gyroscope",
        "car/42/location",
    ]

    message = SimpleNamespace(topic="car/42/location", payload=b'{"latitude": 1, "longitude": 2}')
    client.on_message(client, None, message)
    assert fixes == [LocationFix(latitude=1.0, longitude=2.0)]


def test_failed_connect_subscribes_nothing(fake_client: type[_FakeClient]) -> None:
    runtime = _runtime([])
    runtime.start("broker.local")

    client = fake_client.created[-1]
    client.on_connect(client, None, None, SimpleNamespace(value=5), None)

    assert client.subscriptions == []


def test_stop_is_idempotent_and_restart_replaces_client(fake_client: type[_FakeClient]) -> None:
    runtime = _runtime([])
    runtime.stop()

    runtime.start("broker.local")
    first = fake_client.created[-1]
    runtime.start("broker.local")
    second = fake_client.created[-1]

    assert first is not second
    assert first.calls[-2:] == ["disconnect", "loop_stop"]

    runtime.stop()
    runtime.stop()
    assert not runtime.is_running
    assert second.calls.count("disconnect") == 1
    assert second.calls[-1] == "loop_stop"
