"""Core components layer - sphere navigation, independent of Qt and VTK."""

from panoview.core.errors import DegenerateViewError, GeometryError, NoIntersectionError
from panoview.core.motion import (
    MotionConfig,
    ScreenMotion,
    TimestampedSample,
    estimate_motion,
    integrate_motion,
)
from panoview.core.ring_buffer import RingBuffer
from panoview.core.sphere_pos_calculator import Anchor, SpherePosCalculator
from panoview.core.spherical import SphericalPoint, clamp_polar, wrap_azimuth
from panoview.core.view_parameters import Frustum, ViewParameters

__all__ = [
    "Anchor",
    "DegenerateViewError",
    "Frustum",
    "GeometryError",
    "MotionConfig",
    "NoIntersectionError",
    "RingBuffer",
    "ScreenMotion",
    "SpherePosCalculator",
    "SphericalPoint",
    "TimestampedSample",
    "ViewParameters",
    "clamp_polar",
    "estimate_motion",
    "integrate_motion",
    "wrap_azimuth",
]
