"""pybumpmap - Road roughness heatmaps from inertial sensor streams."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybumpmap")
except PackageNotFoundError:
    __version__ = "0+local"
from pybumpmap.config import BumpMapConfig, RenderConfig
from pybumpmap.exceptions import BumpMapConfigError, BumpMapError, BumpMapPayloadError
from pybumpmap.models import (
    DrawCommand,
    GradientStop,
    LocationFix,
    ScreenRect,
    SensorKind,
    SensorSample,
    Vec3,
    WeightedGeoPoint,
)
from pybumpmap.render.heatmap import HeatmapRenderer, RenderSurface, paint, render_heatmap
from pybumpmap.render.projection import Projection, WebMercatorProjection
from pybumpmap.sensing.accumulator import BumpAccumulator
from pybumpmap.sensing.filter import FilterState, SensorFusionFilter
from pybumpmap.sensing.listener import CallbackSensorSource, SensorListener, SensorSource
from pybumpmap.state.scheduler import SchedulerState, UpdateScheduler, asyncio_timer, threading_timer
from pybumpmap.state.store import GeoTaggedPointStore
from pybumpmap.tracker import RoughnessTracker

__all__ = [
    "__version__",
    "BumpAccumulator",
    "BumpMapConfig",
    "BumpMapConfigError",
    "BumpMapError",
    "BumpMapPayloadError",
    "CallbackSensorSource",
    "DrawCommand",
    "FilterState",
    "GeoTaggedPointStore",
    "GradientStop",
    "HeatmapRenderer",
    "LocationFix",
    "Projection",
    "RenderConfig",
    "RenderSurface",
    "RoughnessTracker",
    "SchedulerState",
    "ScreenRect",
    "SensorFusionFilter",
    "SensorKind",
    "SensorListener",
    "SensorSample",
    "SensorSource",
    "UpdateScheduler",
    "Vec3",
    "WebMercatorProjection",
    "WeightedGeoPoint",
    "asyncio_timer",
    "paint",
    "render_heatmap",
    "threading_timer",
]
