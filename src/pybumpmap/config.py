"""Configuration for pybumpmap."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pybumpmap._constants import (
    DEFAULT_ACCURACY_THRESHOLD,
    DEFAULT_BUMP_THRESHOLD,
    DEFAULT_CAPACITY,
    DEFAULT_DEBOUNCE_DELAY,
    DEFAULT_GRAVITY_ALPHA,
    DEFAULT_GYRO_WEIGHT,
    DEFAULT_MQTT_KEEPALIVE,
    DEFAULT_MQTT_TOPIC_PREFIX,
    DEFAULT_OPACITY,
    DEFAULT_RADIUS,
    DEFAULT_RENDER_BUDGET,
    DEFAULT_VIEWPORT_MARGIN,
    HEATMAP_RAMP,
    WEIGHT_RANGE_FLOOR,
)
from pybumpmap.exceptions import BumpMapConfigError
from pybumpmap.models.render import GradientStop


def _default_ramp() -> tuple[GradientStop, ...]:
    return tuple(GradientStop(offset=offset, color=color) for offset, color in HEATMAP_RAMP)


@dataclasses.dataclass(frozen=True)
class RenderConfig:
    """Per-pass heatmap rendering parameters.

    Parameters
    ----------
    radius : float
        Base circle radius in pixels. The lowest-weight visible point is
        drawn at half of it, the highest-weight point at the full radius.
    opacity : float
        Global alpha applied on top of the colour ramp, in ``[0, 1]``.
    render_budget : int
        Culled point count above which stride subsampling kicks in.
    viewport_margin : float
        Pixels added on every side of the viewport before culling.
    color_ramp : tuple of GradientStop
        Radial gradient stops, centre first.
    weight_range_floor : float
        Lower bound on ``maxW - minW`` used for normalisation.
    """

    radius: float = DEFAULT_RADIUS
    opacity: float = DEFAULT_OPACITY
    render_budget: int = DEFAULT_RENDER_BUDGET
    viewport_margin: float = DEFAULT_VIEWPORT_MARGIN
    color_ramp: tuple[GradientStop, ...] = dataclasses.field(default_factory=_default_ramp)
    weight_range_floor: float = WEIGHT_RANGE_FLOOR

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise BumpMapConfigError(f"radius must be positive, got {self.radius}", field="radius")
        if not 0.0 <= self.opacity <= 1.0:
            raise BumpMapConfigError(f"opacity must be within [0, 1], got {self.opacity}", field="opacity")
        if self.render_budget <= 0:
            raise BumpMapConfigError(
                f"render_budget must be positive, got {self.render_budget}",
                field="render_budget",
            )
        if self.viewport_margin < 0:
            raise BumpMapConfigError(
                f"viewport_margin must not be negative, got {self.viewport_margin}",
                field="viewport_margin",
            )
        if self.weight_range_floor <= 0:
            raise BumpMapConfigError(
                f"weight_range_floor must be positive, got {self.weight_range_floor}",
                field="weight_range_floor",
            )


@dataclasses.dataclass(frozen=True)
class BumpMapConfig:
    """Tracker configuration.

    Parameters
    ----------
    radius : float
        Heatmap base radius in pixels.
    opacity : float
        Heatmap global opacity in ``[0, 1]``.
    capacity : int
        Maximum number of stored points; the oldest are evicted first.
    render_budget : int
        Maximum culled points before stride subsampling.
    viewport_margin : float
        Culling margin in pixels around the viewport.
    accuracy_threshold : float
        Location fixes with a reported accuracy worse (greater) than this
        are discarded together with the score accumulated for them.
    bump_threshold : float
        Flushed scores must be strictly greater than this to be stored.
    debounce_delay : float
        Seconds between the first insertion of a burst and the repaint.
    gravity_alpha : float
        Low-pass coefficient of the gravity estimate, in ``[0, 1)``.
    gyro_weight : float
        Scale applied to the angular velocity magnitude.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_topic_prefix : str
        Topic prefix for sensor and location messages.
    """

    radius: float = DEFAULT_RADIUS
    opacity: float = DEFAULT_OPACITY
    capacity: int = DEFAULT_CAPACITY
    render_budget: int = DEFAULT_RENDER_BUDGET
    viewport_margin: float = DEFAULT_VIEWPORT_MARGIN
    accuracy_threshold: float = DEFAULT_ACCURACY_THRESHOLD
    bump_threshold: float = DEFAULT_BUMP_THRESHOLD
    debounce_delay: float = DEFAULT_DEBOUNCE_DELAY
    gravity_alpha: float = DEFAULT_GRAVITY_ALPHA
    gyro_weight: float = DEFAULT_GYRO_WEIGHT
    mqtt_keepalive: int = DEFAULT_MQTT_KEEPALIVE
    mqtt_topic_prefix: str = DEFAULT_MQTT_TOPIC_PREFIX

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise BumpMapConfigError(f"capacity must be positive, got {self.capacity}", field="capacity")
        if not 0.0 <= self.gravity_alpha < 1.0:
            raise BumpMapConfigError(
                f"gravity_alpha must be within [0, 1), got {self.gravity_alpha}",
                field="gravity_alpha",
            )
        if self.gyro_weight < 0:
            raise BumpMapConfigError(f"gyro_weight must not be negative, got {self.gyro_weight}", field="gyro_weight")
        if self.bump_threshold < 0:
            raise BumpMapConfigError(
                f"bump_threshold must not be negative, got {self.bump_threshold}",
                field="bump_threshold",
            )
        if self.debounce_delay < 0:
            raise BumpMapConfigError(
                f"debounce_delay must not be negative, got {self.debounce_delay}",
                field="debounce_delay",
            )
        # Radius, opacity, budget and margin are checked by RenderConfig.
        self.render_config()

    def render_config(self) -> RenderConfig:
        """Build the renderer parameters for this configuration."""
        return RenderConfig(
            radius=self.radius,
            opacity=self.opacity,
            render_budget=self.render_budget,
            viewport_margin=self.viewport_margin,
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> BumpMapConfig:
        """Create configuration from environment variables.

        Reads optional ``BUMPMAP_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        BumpMapConfig
            Populated configuration.

        Raises
        ------
        BumpMapConfigError
            If a variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_FLOAT_MAP = {
            "BUMPMAP_RADIUS": "radius",
            "BUMPMAP_OPACITY": "opacity",
            "BUMPMAP_VIEWPORT_MARGIN": "viewport_margin",
            "BUMPMAP_ACCURACY_THRESHOLD": "accuracy_threshold",
            "BUMPMAP_BUMP_THRESHOLD": "bump_threshold",
            "BUMPMAP_DEBOUNCE_DELAY": "debounce_delay",
            "BUMPMAP_GRAVITY_ALPHA": "gravity_alpha",
            "BUMPMAP_GYRO_WEIGHT": "gyro_weight",
        }
        _ENV_INT_MAP = {
            "BUMPMAP_CAPACITY": "capacity",
            "BUMPMAP_RENDER_BUDGET": "render_budget",
            "BUMPMAP_MQTT_KEEPALIVE": "mqtt_keepalive",
        }

        config_kwargs: dict[str, Any] = {}
        for mapping, parse in ((_ENV_FLOAT_MAP, float), (_ENV_INT_MAP, int)):
            for env_key, field_name in mapping.items():
                val = env.get(env_key)
                if val is None or field_name in overrides:
                    continue
                try:
                    config_kwargs[field_name] = parse(val)
                except ValueError as exc:
                    raise BumpMapConfigError(f"{env_key} is not a valid number: {val!r}", field=field_name) from exc

        prefix_env = env.get("BUMPMAP_MQTT_TOPIC_PREFIX")
        if prefix_env is not None and "mqtt_topic_prefix" not in overrides:
            config_kwargs["mqtt_topic_prefix"] = prefix_env.strip().strip("/")

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
