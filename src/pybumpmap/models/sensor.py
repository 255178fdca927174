"""Inertial sensor sample models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator, model_validator

from pybumpmap.ingestion.normalize import normalize_timestamp_seconds, unpack_axes
from pybumpmap.models._base import BumpMapModel


class SensorKind(StrEnum):
    ACCELEROMETER = "accelerometer"
    GYROSCOPE = "gyroscope"


@dataclass(frozen=True, slots=True)
class Vec3:
    """Three-axis vector in device coordinates."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)


class SensorSample(BumpMapModel):
    """One reading from an accelerometer or gyroscope.

    Accepts either explicit ``x``/``y``/``z`` keys or a ``values`` array
    of three numbers. Units are whatever the device reports.
    """

    kind: SensorKind
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    z: float = Field(allow_inf_nan=False)
    timestamp: float | None = Field(default=None, description="Epoch seconds, if the source provides one.")

    @model_validator(mode="before")
    @classmethod
    def _spread_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return unpack_axes(values)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> float | None:
        return normalize_timestamp_seconds(value)

    @property
    def vector(self) -> Vec3:
        return Vec3(self.x, self.y, self.z)
