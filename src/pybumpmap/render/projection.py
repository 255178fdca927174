"""Geo to pixel projections.

The renderer only needs something with ``to_pixels``; hosts with their
own map widget pass its projection through an adapter. A spherical Web
Mercator implementation is provided for hosts without one.
"""

from __future__ import annotations

import math
from typing import Protocol

from pybumpmap.models.render import ScreenRect

# Web Mercator cuts off the poles at this latitude.
MAX_MERCATOR_LATITUDE = 85.05112878


class Projection(Protocol):
    def to_pixels(self, latitude: float, longitude: float) -> tuple[float, float]: ...


class WebMercatorProjection:
    """Spherical Web Mercator view centred on a coordinate.

    Parameters
    ----------
    center_latitude, center_longitude : float
        Coordinate shown at the middle of the screen.
    zoom : float
        Slippy-map zoom level; world width is ``tile_size * 2**zoom`` px.
    width, height : int
        Screen size in pixels.
    tile_size : int
        Tile edge in pixels.
    """

    def __init__(
        self,
        center_latitude: float,
        center_longitude: float,
        zoom: float,
        *,
        width: int,
        height: int,
        tile_size: int = 256,
    ) -> None:
        self.zoom = zoom
        self.width = width
        self.height = height
        self.tile_size = tile_size
        self._world = tile_size * (2.0**zoom)
        self._cx, self._cy = self._world_pixels(center_latitude, center_longitude)

    @property
    def screen_rect(self) -> ScreenRect:
        return ScreenRect(left=0.0, top=0.0, right=float(self.width), bottom=float(self.height))

    def _world_pixels(self, latitude: float, longitude: float) -> tuple[float, float]:
        lat = max(-MAX_MERCATOR_LATITUDE, min(MAX_MERCATOR_LATITUDE, latitude))
        sin_lat = math.sin(math.radians(lat))
        x = (longitude + 180.0) / 360.0 * self._world
        y = (0.5 - math.log((1.0 + sin_lat) / (1.0 - sin_lat)) / (4.0 * math.pi)) * self._world
        return x, y

    def to_pixels(self, latitude: float, longitude: float) -> tuple[float, float]:
        x, y = self._world_pixels(latitude, longitude)
        return x - self._cx + self.width / 2.0, y - self._cy + self.height / 2.0

    def from_pixels(self, x: float, y: float) -> tuple[float, float]:
        """Inverse of :meth:`to_pixels`; returns ``(latitude, longitude)``."""
        wx = x - self.width / 2.0 + self._cx
        wy = y - self.height / 2.0 + self._cy
        longitude = wx / self._world * 360.0 - 180.0
        n = math.pi - 2.0 * math.pi * wy / self._world
        latitude = math.degrees(math.atan(math.sinh(n)))
        return latitude, longitude
