"""Internal constants shared across the library."""

from __future__ import annotations

# ------------------------------------------------------------------
# Sensor fusion
# ------------------------------------------------------------------

DEFAULT_GRAVITY_ALPHA = 0.8
DEFAULT_GYRO_WEIGHT = 0.3

# ------------------------------------------------------------------
# Location tick gating
# ------------------------------------------------------------------

DEFAULT_ACCURACY_THRESHOLD = 20.0
DEFAULT_BUMP_THRESHOLD = 0.1

# ------------------------------------------------------------------
# Point store / repaint
# ------------------------------------------------------------------

DEFAULT_CAPACITY = 5000
DEFAULT_DEBOUNCE_DELAY = 0.2  # seconds

# ------------------------------------------------------------------
# Heatmap rendering
# ------------------------------------------------------------------

DEFAULT_RADIUS = 80.0  # px
DEFAULT_OPACITY = 0.6
DEFAULT_RENDER_BUDGET = 500
DEFAULT_VIEWPORT_MARGIN = 100.0  # px
WEIGHT_RANGE_FLOOR = 0.1

# (offset, (r, g, b, a)) from the centre of a point outwards.
HEATMAP_RAMP: tuple[tuple[float, tuple[int, int, int, int]], ...] = (
    (0.0, (0, 255, 0, 0)),
    (0.3, (0, 255, 0, 100)),
    (0.6, (255, 255, 0, 150)),
    (0.8, (255, 165, 0, 200)),
    (1.0, (255, 0, 0, 255)),
)

# ------------------------------------------------------------------
# MQTT ingestion
# ------------------------------------------------------------------

DEFAULT_MQTT_KEEPALIVE = 120
DEFAULT_MQTT_TOPIC_PREFIX = "bumpmap"
