"""Viewport-aware radial-gradient heatmap renderer.

A render pass is a pure function of its inputs:

1. project every stored point and keep those inside the viewport grown by
   a margin, so circles straddling the edge do not pop in and out;
2. if more points survive than the render budget, keep every
   ``n // budget``-th one, starting at index 0;
3. normalise weights over the rendered subset;
4. scale the radius between half and all of the base radius;
5. emit one draw command per point in store order, so newer points are
   drawn on top.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import NamedTuple, Protocol, TypeVar

from pybumpmap.config import RenderConfig
from pybumpmap.models.point import WeightedGeoPoint
from pybumpmap.models.render import DrawCommand, ScreenRect
from pybumpmap.render.projection import Projection

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProjectedPoint(NamedTuple):
    point: WeightedGeoPoint
    x: float
    y: float


class RenderSurface(Protocol):
    """Host drawing surface."""

    def draw_radial_gradient(self, command: DrawCommand) -> None: ...


def cull(
    points: Iterable[WeightedGeoPoint],
    viewport: ScreenRect,
    projection: Projection,
    margin: float,
) -> list[ProjectedPoint]:
    """Project *points* and keep those inside *viewport* grown by *margin*."""
    bounds = viewport.expanded(margin)
    visible: list[ProjectedPoint] = []
    for point in points:
        x, y = projection.to_pixels(point.latitude, point.longitude)
        if bounds.contains(x, y):
            visible.append(ProjectedPoint(point, x, y))
    return visible


def subsample(items: Sequence[T], budget: int) -> list[T]:
    """Deterministic stride selection.

    With ``n > budget`` keeps indices ``0, s, 2s, ...`` where
    ``s = n // budget``. The result can still exceed *budget* when *n* is
    not a multiple of it.
    """
    n = len(items)
    if n <= budget:
        return list(items)
    stride = n // budget
    return list(items[::stride])


def normalize_weights(weights: Sequence[float], floor: float = 0.1) -> list[float]:
    """Map *weights* onto ``[0, 1]`` relative to their own min and max.

    The range is floored at *floor* so nearly uniform weights do not blow
    up the division.
    """
    if not weights:
        return []
    min_w = min(weights)
    weight_range = max(max(weights) - min_w, floor)
    return [min(1.0, max(0.0, (w - min_w) / weight_range)) for w in weights]


def point_radius(base_radius: float, normalized_weight: float) -> float:
    """Half the base radius for the lightest point, the full radius for the heaviest."""
    return base_radius * (0.5 + 0.5 * normalized_weight)


def render_heatmap(
    snapshot: Sequence[WeightedGeoPoint],
    viewport: ScreenRect,
    projection: Projection,
    config: RenderConfig | None = None,
) -> list[DrawCommand]:
    """Turn a store snapshot into draw commands for the current viewport."""
    config = config or RenderConfig()
    if not snapshot:
        return []

    visible = cull(snapshot, viewport, projection, config.viewport_margin)
    if not visible:
        return []

    rendered = subsample(visible, config.render_budget)
    if len(rendered) != len(visible):
        _logger.debug("Subsampled %d visible points to %d", len(visible), len(rendered))

    normalized = normalize_weights([item.point.weight for item in rendered], config.weight_range_floor)
    return [
        DrawCommand(
            x=item.x,
            y=item.y,
            radius=point_radius(config.radius, nw),
            alpha=config.opacity,
            weight=item.point.weight,
            normalized_weight=nw,
            stops=config.color_ramp,
        )
        for item, nw in zip(rendered, normalized, strict=True)
    ]


def paint(surface: RenderSurface, commands: Iterable[DrawCommand]) -> int:
    """Issue *commands* to *surface* in order; returns the number drawn."""
    count = 0
    for command in commands:
        surface.draw_radial_gradient(command)
        count += 1
    return count


class HeatmapRenderer:
    """Binds a :class:`RenderConfig` to :func:`render_heatmap`.

    Holds nothing between calls besides the immutable config.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig()

    def render(
        self,
        snapshot: Sequence[WeightedGeoPoint],
        viewport: ScreenRect,
        projection: Projection,
    ) -> list[DrawCommand]:
        return render_heatmap(snapshot, viewport, projection, self.config)

    def render_to(
        self,
        surface: RenderSurface,
        snapshot: Sequence[WeightedGeoPoint],
        viewport: ScreenRect,
        projection: Projection,
    ) -> int:
        return paint(surface, self.render(snapshot, viewport, projection))
