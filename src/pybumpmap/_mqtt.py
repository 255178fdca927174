"""Internal MQTT ingestion runtime.

A phone or logger publishes JSON readings on three topics under a common
prefix::

    <prefix>/accelerometer   {"x": .., "y": .., "z": .., "timestamp": ..}
    <prefix>/gyroscope       {"values": [x, y, z]}
    <prefix>/location        {"latitude": .., "longitude": .., "accuracy": ..}

paho-mqtt delivers messages on its own network thread; every decoded
event is handed to the asyncio loop with ``call_soon_threadsafe`` so the
tracker keeps a single dispatch context.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any, cast

import paho.mqtt.client as mqtt
from pydantic import ValidationError

from pybumpmap._constants import DEFAULT_MQTT_KEEPALIVE, DEFAULT_MQTT_TOPIC_PREFIX
from pybumpmap.exceptions import BumpMapPayloadError
from pybumpmap.models.location import LocationFix
from pybumpmap.models.sensor import SensorKind, SensorSample
from pybumpmap.sensing.listener import CallbackSensorSource

LOCATION_TOPIC = "location"


def decode_json(payload: bytes, *, topic: str = "") -> dict[str, Any]:
    """Parse a UTF-8 JSON object payload."""
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BumpMapPayloadError(f"Payload is not valid JSON: {exc}", topic=topic) from exc
    if not isinstance(parsed, dict):
        raise BumpMapPayloadError("Payload decoded to non-object JSON", topic=topic)
    return parsed


def decode_sample(payload: bytes, kind: SensorKind, *, topic: str = "") -> SensorSample:
    data = decode_json(payload, topic=topic)
    data["kind"] = kind
    try:
        return SensorSample.model_validate(data)
    except ValidationError as exc:
        raise BumpMapPayloadError(f"Invalid {kind.value} sample: {exc}", topic=topic) from exc


def decode_location(payload: bytes, *, topic: str = "") -> LocationFix:
    data = decode_json(payload, topic=topic)
    try:
        return LocationFix.model_validate(data)
    except ValidationError as exc:
        raise BumpMapPayloadError(f"Invalid location fix: {exc}", topic=topic) from exc


class BumpMqttRuntime:
    """Threaded paho-mqtt runtime that emits samples and fixes onto an asyncio loop.

    ``accelerometer`` and ``gyroscope`` are :class:`CallbackSensorSource`
    instances, so they plug straight into a tracker's sensor listener.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_location: Callable[[LocationFix], Any],
        topic_prefix: str = DEFAULT_MQTT_TOPIC_PREFIX,
        keepalive: int = DEFAULT_MQTT_KEEPALIVE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._on_location = on_location
        self._prefix = topic_prefix.strip("/")
        self._keepalive = keepalive
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self.accelerometer = CallbackSensorSource(SensorKind.ACCELEROMETER)
        self.gyroscope = CallbackSensorSource(SensorKind.GYROSCOPE)

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    @property
    def topics(self) -> dict[str, SensorKind | None]:
        """Subscribed topics mapped to their sensor kind (``None`` for location)."""
        return {
            f"{self._prefix}/{SensorKind.ACCELEROMETER.value}": SensorKind.ACCELEROMETER,
            f"{self._prefix}/{SensorKind.GYROSCOPE.value}": SensorKind.GYROSCOPE,
            f"{self._prefix}/{LOCATION_TOPIC}": None,
        }

    def handle_message(self, topic: str, payload: bytes) -> None:
        """Decode one message and schedule its delivery on the loop.

        Malformed payloads and unknown topics are logged and dropped.
        """
        topics = self.topics
        if topic not in topics:
            self._logger.debug("Ignoring message on unexpected topic=%s", topic)
            return
        kind = topics[topic]
        try:
            if kind is None:
                fix = decode_location(payload, topic=topic)
                self._loop.call_soon_threadsafe(self._on_location, fix)
                return
            sample = decode_sample(payload, kind, topic=topic)
        except BumpMapPayloadError:
            self._logger.debug("MQTT payload parse failure topic=%s", topic, exc_info=True)
            return
        source = self.accelerometer if kind == SensorKind.ACCELEROMETER else self.gyroscope
        self._loop.call_soon_threadsafe(source.emit_sample, sample)

    def _build_client(
        self,
        *,
        client_id: str,
        username: str | None,
        password: str | None,
        tls: bool,
    ) -> mqtt.Client:
        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=client_id,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)
        if username is not None:
            client.username_pw_set(username, password)
        if tls:
            client.tls_set()
        client.on_connect = self._on_connect
        client.on_message = self._on_message
        client.on_disconnect = self._on_disconnect
        return client

    def _on_connect(self, client: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _props: Any) -> None:
        if reason_code.value != 0:
            self._logger.warning("MQTT connect failed: %s", reason_code)
            return
        topics = list(self.topics)
        self._logger.debug("MQTT connected, subscribing topics=%s", topics)
        client.subscribe([(topic, 0) for topic in topics])

    def _on_message(self, _client: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        self.handle_message(msg.topic, msg.payload)

    def _on_disconnect(self, _client: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _props: Any) -> None:
        if self._running:
            self._logger.info("MQTT connection lost: %s", reason_code)

    def start(
        self,
        host: str,
        port: int = 1883,
        *,
        client_id: str = "",
        username: str | None = None,
        password: str | None = None,
        tls: bool = False,
    ) -> None:
        """Connect and subscribe to the sensor and location topics.

        A running connection is torn down first, so calling ``start`` again
        reconnects.
        """
        self.stop()
        self._logger.debug("MQTT runtime start host=%s port=%s prefix=%s", host, port, self._prefix)
        client = self._build_client(client_id=client_id, username=username, password=password, tls=tls)
        client.connect(host, port, keepalive=self._keepalive)
        client.loop_start()
        self._client = client
        self._running = True

    def stop(self) -> None:
        """Disconnect and stop the network thread. Safe to call when idle."""
        client, self._client = self._client, None
        was_running, self._running = self._running, False
        if client is None:
            return
        try:
            if was_running:
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
