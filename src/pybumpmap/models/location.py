"""Location fix model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pybumpmap.ingestion.normalize import normalize_timestamp_seconds, safe_float
from pybumpmap.models._base import BumpMapModel


class LocationFix(BumpMapModel):
    """A single fix from the location collaborator.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    accuracy : float or None
        Horizontal accuracy radius, in the same distance unit as the
        configured accuracy threshold. ``None`` when the provider does not
        report one.
    timestamp : float or None
        Epoch seconds. Millisecond values are normalized.
    """

    latitude: float = Field(..., ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(
        ...,
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "lng", "lon"),
    )
    accuracy: float | None = Field(
        default=None,
        validation_alias=AliasChoices("accuracy", "acc", "horizontalAccuracy", "horizontal_accuracy"),
    )
    timestamp: float | None = Field(default=None, validation_alias=AliasChoices("timestamp", "time", "ts"))

    @field_validator("accuracy", mode="before")
    @classmethod
    def _coerce_accuracy(cls, value: Any) -> float | None:
        parsed = safe_float(value)
        if parsed is None or parsed < 0:
            return None
        return parsed

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> float | None:
        return normalize_timestamp_seconds(value)

    def is_accurate(self, threshold: float) -> bool:
        """Whether the fix is good enough to tag a bump score.

        Unknown accuracy is accepted; only a reported accuracy worse than
        *threshold* rejects the fix.
        """
        return self.accuracy is None or self.accuracy <= threshold
