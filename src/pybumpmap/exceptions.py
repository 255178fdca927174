"""Custom exception hierarchy for pybumpmap."""

from __future__ import annotations


class BumpMapError(Exception):
    """Base exception for all pybumpmap errors."""


class BumpMapConfigError(BumpMapError):
    """Invalid configuration value."""

    def __init__(self, message: str, *, field: str = "") -> None:
        self.field = field
        super().__init__(message)


class BumpMapPayloadError(BumpMapError):
    """Incoming sensor or location payload could not be decoded.

    Raised by the payload decoders; the MQTT runtime catches it, logs the
    offending topic and drops the message.
    """

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)
