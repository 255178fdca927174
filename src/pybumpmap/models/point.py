"""Weighted geo point model."""

from __future__ import annotations

from pydantic import Field

from pybumpmap.models._base import BumpMapModel


class WeightedGeoPoint(BumpMapModel):
    """A location tagged with an accumulated bump score.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    weight : float
        Bump score flushed for this fix. Always positive.
    """

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    weight: float = Field(..., gt=0.0)
