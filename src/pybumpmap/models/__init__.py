"""Data models for sensor samples, location fixes, points and draw commands."""

from pybumpmap.models._base import BumpMapModel
from pybumpmap.models.location import LocationFix
from pybumpmap.models.point import WeightedGeoPoint
from pybumpmap.models.render import DrawCommand, GradientStop, ScreenRect
from pybumpmap.models.sensor import SensorKind, SensorSample, Vec3

__all__ = [
    "BumpMapModel",
    "DrawCommand",
    "GradientStop",
    "LocationFix",
    "ScreenRect",
    "SensorKind",
    "SensorSample",
    "Vec3",
    "WeightedGeoPoint",
]
