"""Render-side value objects: screen rectangles and draw commands."""

from __future__ import annotations

from pydantic import Field, model_validator

from pybumpmap.models._base import BumpMapModel


class ScreenRect(BumpMapModel):
    """Axis-aligned pixel rectangle, y growing downwards.

    ``contains`` treats the left/top edges as inclusive and the
    right/bottom edges as exclusive.
    """

    left: float
    top: float
    right: float
    bottom: float

    @model_validator(mode="after")
    def _check_extent(self) -> ScreenRect:
        if self.right < self.left or self.bottom < self.top:
            raise ValueError("rectangle right/bottom must not be less than left/top")
        return self

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def expanded(self, margin: float) -> ScreenRect:
        """Return a copy grown by *margin* pixels on every side."""
        return ScreenRect(
            left=self.left - margin,
            top=self.top - margin,
            right=self.right + margin,
            bottom=self.bottom + margin,
        )

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom


class GradientStop(BumpMapModel):
    """A colour stop of the radial gradient; offset 0 is the centre."""

    offset: float = Field(..., ge=0.0, le=1.0)
    color: tuple[int, int, int, int] = Field(..., description="RGBA, 0-255 per channel")


class DrawCommand(BumpMapModel):
    """Draw a filled circle shaded with a radial gradient.

    Parameters
    ----------
    x, y : float
        Centre in pixels.
    radius : float
        Circle radius in pixels.
    alpha : float
        Global opacity multiplied into every gradient stop.
    weight : float
        Raw bump score of the source point.
    normalized_weight : float
        Weight mapped into ``[0, 1]`` over the rendered subset.
    stops : tuple of GradientStop
        Gradient colour stops, centre first.
    """

    x: float
    y: float
    radius: float = Field(..., gt=0.0)
    alpha: float = Field(..., ge=0.0, le=1.0)
    weight: float
    normalized_weight: float = Field(..., ge=0.0, le=1.0)
    stops: tuple[GradientStop, ...]

    def stop_colors(self) -> tuple[tuple[int, int, int, int], ...]:
        """Ramp colours with the global alpha folded into each stop."""
        return tuple((r, g, b, round(a * self.alpha)) for r, g, b, a in (stop.color for stop in self.stops))
