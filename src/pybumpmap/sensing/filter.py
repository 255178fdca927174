"""Low-pass sensor fusion filter producing a running bump score.

The accelerometer is split into a slowly moving gravity estimate and the
fast linear motion around it; the magnitude of the linear part and a
scaled gyroscope magnitude are both summed into one scalar.

The gravity estimate starts at zero, so the first samples after start
overstate linear acceleration until the estimate has converged. This
transient is kept as-is.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from pybumpmap._constants import DEFAULT_GRAVITY_ALPHA, DEFAULT_GYRO_WEIGHT
from pybumpmap.models.sensor import SensorKind, SensorSample, Vec3

_logger = logging.getLogger(__name__)


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


@dataclass
class FilterState:
    """Mutable filter state.

    ``gravity`` is a long-lived estimate and survives score resets;
    ``running_score`` covers one location interval.
    """

    gravity: Vec3 = field(default_factory=Vec3)
    running_score: float = 0.0


class SensorFusionFilter:
    """Complementary low-pass filter over accelerometer and gyroscope input."""

    def __init__(
        self,
        *,
        alpha: float = DEFAULT_GRAVITY_ALPHA,
        gyro_weight: float = DEFAULT_GYRO_WEIGHT,
    ) -> None:
        self.alpha = alpha
        self.gyro_weight = gyro_weight
        self.state = FilterState()

    @property
    def gravity(self) -> Vec3:
        return self.state.gravity

    @property
    def running_score(self) -> float:
        return self.state.running_score

    def on_accelerometer(self, x: float, y: float, z: float) -> float:
        """Update the gravity estimate and add the linear magnitude.

        Returns the contribution added to the running score. Non-finite
        readings are dropped and leave the state untouched.
        """
        if not _finite(x, y, z):
            _logger.debug("Dropping non-finite accelerometer reading (%s, %s, %s)", x, y, z)
            return 0.0
        a = self.alpha
        g = self.state.gravity
        gravity = Vec3(
            a * g.x + (1.0 - a) * x,
            a * g.y + (1.0 - a) * y,
            a * g.z + (1.0 - a) * z,
        )
        self.state.gravity = gravity
        contribution = (Vec3(x, y, z) - gravity).magnitude()
        self.state.running_score += contribution
        return contribution

    def on_gyroscope(self, x: float, y: float, z: float) -> float:
        """Add the weighted angular velocity magnitude.

        Returns the contribution added to the running score.
        """
        if not _finite(x, y, z):
            _logger.debug("Dropping non-finite gyroscope reading (%s, %s, %s)", x, y, z)
            return 0.0
        contribution = math.sqrt(x * x + y * y + z * z) * self.gyro_weight
        self.state.running_score += contribution
        return contribution

    def on_sample(self, sample: SensorSample) -> float:
        if sample.kind == SensorKind.ACCELEROMETER:
            return self.on_accelerometer(sample.x, sample.y, sample.z)
        return self.on_gyroscope(sample.x, sample.y, sample.z)

    def take_score(self) -> float:
        """Return the running score and reset it; gravity is kept."""
        score = self.state.running_score
        self.state.running_score = 0.0
        return score
