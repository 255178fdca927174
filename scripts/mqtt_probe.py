#!/usr/bin/env python3
"""Live MQTT probe for bump tracking.

Subscribes to ``<prefix>/accelerometer``, ``<prefix>/gyroscope`` and
``<prefix>/location`` on a broker, feeds a :class:`RoughnessTracker` and
prints every stored point plus a heatmap summary on each repaint.

Use this to check thresholds against a real phone stream before wiring
up a map view.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pybumpmap import (  # noqa: E402
    BumpMapConfig,
    LocationFix,
    RoughnessTracker,
    WebMercatorProjection,
    WeightedGeoPoint,
    asyncio_timer,
)
from pybumpmap._mqtt import BumpMqttRuntime  # noqa: E402

_LOG = logging.getLogger("mqtt_probe")


@dataclass
class ProbeStats:
    started_at: float
    fixes: int = 0
    stored: int = 0
    repaints: int = 0


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Feed a bump tracker from MQTT sensor topics.",
    )
    parser.add_argument("--host", default="localhost", help="MQTT broker host.")
    parser.add_argument("--port", type=int, default=1883, help="MQTT broker port.")
    parser.add_argument("--username", default=None, help="MQTT username.")
    parser.add_argument("--password", default=None, help="MQTT password.")
    parser.add_argument("--tls", action="store_true", help="Connect with TLS.")
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument("--zoom", type=float, default=16.0, help="Zoom level for the heatmap summary.")
    parser.add_argument("--width", type=int, default=1080, help="Virtual screen width in pixels.")
    parser.add_argument("--height", type=int, default=1920, help="Virtual screen height in pixels.")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_summary(stats: ProbeStats, tracker: RoughnessTracker) -> None:
    runtime = time.time() - stats.started_at
    print("[probe] Summary")
    print(f"[probe]   runtime_s : {runtime:.1f}")
    print(f"[probe]   fixes     : {stats.fixes}")
    print(f"[probe]   stored    : {stats.stored}")
    print(f"[probe]   in_store  : {len(tracker.store)}")
    print(f"[probe]   repaints  : {stats.repaints}")


async def _run(args: argparse.Namespace) -> int:
    loop = asyncio.get_running_loop()
    config = BumpMapConfig.from_env()
    stats = ProbeStats(started_at=time.time())
    stop_event = asyncio.Event()
    center: list[WeightedGeoPoint] = []

    def on_first_point(point: WeightedGeoPoint) -> None:
        center.append(point)
        print(f"[probe] First point at {point.latitude:.6f},{point.longitude:.6f}")

    def repaint() -> None:
        stats.repaints += 1
        if not center:
            return
        projection = WebMercatorProjection(
            center[0].latitude,
            center[0].longitude,
            args.zoom,
            width=args.width,
            height=args.height,
        )
        commands = tracker.render(projection.screen_rect, projection)
        biggest = max((c.radius for c in commands), default=0.0)
        print(f"[probe] repaint#{stats.repaints} draw_commands={len(commands)} max_radius={biggest:.1f}px")

    def on_location(fix: LocationFix) -> None:
        stats.fixes += 1
        point = tracker.on_location(fix)
        if point is not None:
            stats.stored += 1
            print(f"[probe] point lat={point.latitude:.6f} lon={point.longitude:.6f} weight={point.weight:.3f}")

    runtime = BumpMqttRuntime(
        loop=loop,
        on_location=on_location,
        topic_prefix=config.mqtt_topic_prefix,
        keepalive=config.mqtt_keepalive,
        logger=_LOG,
    )
    tracker = RoughnessTracker(
        config,
        accelerometer=runtime.accelerometer,
        gyroscope=runtime.gyroscope,
        repaint=repaint,
        on_first_point=on_first_point,
        timer_factory=asyncio_timer(loop),
    )

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop_event.set)

    print(f"[probe] Connecting to {args.host}:{args.port} prefix={config.mqtt_topic_prefix}")
    try:
        runtime.start(args.host, args.port, username=args.username, password=args.password, tls=args.tls)
    except OSError as exc:  # pragma: no cover - network/system interaction
        print(f"[probe] Connect failed: {exc}", file=sys.stderr)
        return 2

    with tracker:
        try:
            timeout = args.duration if args.duration > 0 else None
            await asyncio.wait_for(stop_event.wait(), timeout=timeout)
        except TimeoutError:
            print(f"[probe] Reached --duration={args.duration}s, stopping.")
        finally:
            runtime.stop()

    _print_summary(stats, tracker)
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(_main())
