"""
Inertial "fling" after a drag.

On release the recent center orientations give an angular velocity, which
then decays along a quarter ellipse: fast at first, reaching zero exactly at
the end time.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from panoview.core.geometry_utils import clamp
from panoview.core.spherical import SphericalPoint, wrap_azimuth

logger = logging.getLogger(__name__)

# Samples older than this (seconds) do not contribute to the release velocity.
MAX_SAMPLE_AGE = 0.05
# Angular speed limit in radians per second.
MAX_SPEED = 4.0
HISTORY_SIZE = 4


@dataclass(frozen=True)
class MotionConfig:
    max_sample_age: float = MAX_SAMPLE_AGE
    max_speed: float = MAX_SPEED
    history_size: int = HISTORY_SIZE


@dataclass(frozen=True)
class TimestampedSample:
    """Center orientation at a monotonic timestamp (seconds)."""
    timestamp: float
    position: SphericalPoint


@dataclass(frozen=True)
class ScreenMotion:
    """
    A decaying angular motion.

    :ivar start_time: Monotonic time the motion started
    :ivar end_time: Monotonic time the motion comes to rest
    :ivar origin: Center orientation at the start
    :ivar azimuth_speed: Initial azimuth speed, rad/s
    :ivar polar_speed: Initial polar speed, rad/s
    """
    start_time: float
    end_time: float
    origin: SphericalPoint
    azimuth_speed: float
    polar_speed: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def radius(self) -> float:
        """Half axis of the easing ellipse along the time axis."""
        return math.sqrt(max(abs(self.azimuth_speed), abs(self.polar_speed)))


def _speed(delta: float, seconds: float, max_speed: float) -> float:
    if delta == 0:
        return 0.0
    if seconds <= 0:
        return math.copysign(max_speed, delta)
    return clamp(delta / seconds, -max_speed, max_speed)


def estimate_motion(samples: Iterable[TimestampedSample],
                    now: float,
                    config: MotionConfig | None = None) -> ScreenMotion | None:
    """
    Estimate the release motion from recent center orientations.

    Uses the oldest sample younger than ``config.max_sample_age`` and the
    newest sample, and the time between those two. Speeds are clamped to
    ``config.max_speed``; the motion lasts
    ``sqrt(max(|azimuth_speed|, |polar_speed|))`` seconds.

    :param samples: Samples ordered oldest to newest
    :param now: Release time
    :return: The motion, or None if the pointer was at rest
    """
    config = config or MotionConfig()
    samples = list(samples)
    if not samples:
        return None

    found = next((s for s in samples if now - s.timestamp < config.max_sample_age), None)
    if found is None:
        logger.debug("No recent samples, panning stops.")
        return None

    latest = samples[-1]
    seconds = latest.timestamp - found.timestamp
    # Shortest way round, so crossing the +-pi seam is not a full turn.
    azimuth_speed = _speed(wrap_azimuth(latest.position.azimuth - found.position.azimuth),
                           seconds, config.max_speed)
    polar_speed = _speed(latest.position.polar - found.position.polar,
                         seconds, config.max_speed)

    duration = math.sqrt(max(abs(azimuth_speed), abs(polar_speed)))
    if duration == 0:
        return None

    motion = ScreenMotion(
        start_time=now,
        end_time=now + duration,
        origin=latest.position,
        azimuth_speed=azimuth_speed,
        polar_speed=polar_speed,
    )
    logger.debug(f"Motion: azimuth {azimuth_speed:.3f} rad/s, "
                 f"polar {polar_speed:.3f} rad/s, {duration:.3f} s")
    return motion


def integrate_motion(motion: ScreenMotion, now: float) -> SphericalPoint | None:
    """
    Center orientation at ``now``, or None once the motion has expired.

    The travelled fraction follows the top-left quarter of an ellipse centered
    at (radius, 0) with half axes radius and radius / 4.
    """
    if now >= motion.end_time:
        return None

    elapsed = max(0.0, now - motion.start_time)
    radius = motion.radius
    factor = 0.25 * math.sqrt(max(0.0, elapsed * (2 * radius - elapsed)))
    return SphericalPoint(
        1.0,
        motion.origin.azimuth + motion.azimuth_speed * factor,
        motion.origin.polar + motion.polar_speed * factor,
    )
