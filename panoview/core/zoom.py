"""Zoom levels and their fields of view."""
from __future__ import annotations

import math

# View angle in degrees per zoom level, widest first. Steps are finer near
# wide angle and coarser near telephoto.
ZOOM_VIEW_ANGLES_DEG: tuple[int, ...] = (
    120, 116, 112, 108, 104, 100, 96,
    90, 84, 78, 72, 66, 60,
    52, 44, 36, 28, 20, 12, 4,
)

MIN_ZOOM_LEVEL = 0
MAX_ZOOM_LEVEL = len(ZOOM_VIEW_ANGLES_DEG) - 1
DEFAULT_ZOOM_LEVEL = ZOOM_VIEW_ANGLES_DEG.index(60)


def clamp_zoom_level(level: int) -> int:
    return max(MIN_ZOOM_LEVEL, min(MAX_ZOOM_LEVEL, int(level)))


def view_angle_deg_for_level(level: int) -> float:
    """View angle in degrees for a zoom level; out of range levels are clamped."""
    return float(ZOOM_VIEW_ANGLES_DEG[clamp_zoom_level(level)])


def view_angle_for_level(level: int) -> float:
    """View angle in radians for a zoom level; out of range levels are clamped."""
    return math.radians(view_angle_deg_for_level(level))


def level_for_view_angle(view_angle: float) -> int:
    """
    Zoom level whose view angle is closest to ``view_angle`` (radians).

    Ties go to the wider angle.
    """
    degrees = math.degrees(view_angle)
    return min(range(len(ZOOM_VIEW_ANGLES_DEG)),
               key=lambda i: abs(ZOOM_VIEW_ANGLES_DEG[i] - degrees))
