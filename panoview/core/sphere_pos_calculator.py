"""
Screen <-> sphere mapping for a camera inside the panorama sphere.

The camera sits at ``-eye_dist * forward`` and always looks at the sphere
center. The screen plane passes through the center, perpendicular to the
view direction; its half extents are given by
:meth:`ViewParameters.screen_factors`.

A drag is modelled as an *anchor*: a screen position paired with the sphere
point that must stay under it. The center orientation (the sphere point the
camera looks straight at) is derived from the anchor by an inverse solve and
cached until the anchor or a view parameter changes.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from panoview.core import geometry_utils as gu
from panoview.core.errors import DegenerateViewError, NoIntersectionError
from panoview.core.geometry_utils import Vector3
from panoview.core.spherical import HALF_PI, SphericalPoint, clamp_polar, wrap_azimuth
from panoview.core.view_parameters import Frustum, ViewParameters

logger = logging.getLogger(__name__)

ScreenPosition = Tuple[float, float]

SCREEN_CENTER: ScreenPosition = (0.0, 0.0)
CANONICAL_CENTER = SphericalPoint.on_sphere(0.0, 0.0)

_TILT_TOLERANCE = 1e-12


@dataclass(frozen=True)
class Anchor:
    """A screen position and the sphere point that is kept under it."""
    screen_pos: ScreenPosition
    sphere_pos: SphericalPoint

    @property
    def is_centered(self) -> bool:
        """True if the sphere point is the camera's forward point."""
        return self.screen_pos == SCREEN_CENTER


@dataclass(frozen=True)
class CenterCache:
    """
    Cached center orientation.

    A stale cache keeps the last known center. It is not a usable value;
    the next solve picks the root closest to it.
    """
    valid: bool
    value: SphericalPoint = CANONICAL_CENTER

    @classmethod
    def stale(cls, last: SphericalPoint = CANONICAL_CENTER) -> CenterCache:
        return cls(valid=False, value=last)


@dataclass(frozen=True)
class CalculatorState:
    """Snapshot of everything a SpherePosCalculator mutates."""
    params: ViewParameters
    anchor: Anchor
    cache: CenterCache


def camera_frame(center: SphericalPoint) -> tuple[Vector3, Vector3, Vector3]:
    """
    Unit (forward, right, up) vectors of a camera aimed at ``center``.

    ``up`` is the point a quarter turn further along the polar direction,
    ``right`` completes the frame as ``forward x up``.
    """
    forward = center.to_unit().to_cartesian()
    sin_p, cos_p = math.sin(center.polar), math.cos(center.polar)
    up = (
        -sin_p * math.cos(center.azimuth),
        -sin_p * math.sin(center.azimuth),
        cos_p,
    )
    right = gu.cross_product(forward, up)
    return forward, right, up


def point_on_sphere(params: ViewParameters,
                    center: SphericalPoint,
                    screen_pos: ScreenPosition) -> Vector3:
    """
    Cartesian sphere point seen at ``screen_pos`` by a camera aimed at ``center``.

    :raises DegenerateViewError: if the view parameters are invalid
    :raises NoIntersectionError: if the view ray misses the sphere
    """
    sx, sy = params.screen_factors()
    forward, right, up = camera_frame(center)
    on_screen = gu.add(gu.scale(right, screen_pos[0] * sx),
                       gu.scale(up, screen_pos[1] * sy))
    eye = gu.scale(forward, -params.eye_dist)
    delta = gu.subtract(on_screen, eye)

    a = gu.calculate_norm_squared(delta)
    if a == 0:
        raise DegenerateViewError(f"Degenerate view ray at {screen_pos}")
    b = 2 * gu.dot_product(eye, delta)
    c = gu.calculate_norm_squared(eye) - 1
    roots = gu.solve_real_quadratic(a, b, c)
    if roots is None:
        raise NoIntersectionError(f"Screen position {screen_pos} does not hit the sphere.")

    # The larger root is the intersection in front of an eye inside the sphere.
    t = roots[1]
    return gu.add(eye, gu.scale(delta, t))


def project_point(params: ViewParameters,
                  center: SphericalPoint,
                  point: Vector3) -> ScreenPosition:
    """
    Screen position at which a camera aimed at ``center`` shows ``point``.

    :raises DegenerateViewError: if the view parameters are invalid
    :raises NoIntersectionError: if the point is not in front of the eye
    """
    sx, sy = params.screen_factors()
    forward, right, up = camera_frame(center)
    depth = gu.dot_product(forward, point) + params.eye_dist
    if depth <= 0:
        raise NoIntersectionError(f"Point {point} is behind the eye.")
    eye = gu.scale(forward, -params.eye_dist)
    t = params.eye_dist / depth
    on_screen = gu.add(eye, gu.scale(gu.subtract(point, eye), t))
    return (gu.dot_product(on_screen, right) / sx,
            gu.dot_product(on_screen, up) / sy)


def _tilt_candidates(phi0: float, sin_phi: float) -> list[float]:
    """Tilt angles within the polar range that satisfy the polar equation."""
    base = math.asin(sin_phi)
    candidates = []
    for phi in (base - phi0, math.pi - base - phi0):
        phi = wrap_azimuth(phi)
        if abs(phi) <= HALF_PI + _TILT_TOLERANCE:
            candidates.append(clamp_polar(phi))
    return candidates or [clamp_polar(base - phi0)]


def solve_center(params: ViewParameters,
                 screen_pos: ScreenPosition,
                 sphere_pos: SphericalPoint,
                 previous: SphericalPoint | None = None) -> SphericalPoint:
    """
    Center orientation that puts ``sphere_pos`` at ``screen_pos``.

    The screen position is first evaluated by a camera aimed at the canonical
    orientation (azimuth 0, polar 0). Tilting that camera by ``phi`` around the
    y axis moves the point to the polar angle of ``sphere_pos``; rotating it by
    ``theta`` around the polar axis then lines up the azimuths.

    Two tilts reach the polar angle when the point lies beyond a pole as seen
    from the camera. The one giving the center closest to ``previous`` wins,
    the asin root if ``previous`` is None.

    If ``sphere_pos`` cannot be reached (too close to a pole for this screen
    position) the nearest reachable polar angle is used.

    :raises DegenerateViewError: if the view parameters are invalid
    :raises NoIntersectionError: if the view ray misses the sphere
    """
    x, y, z = point_on_sphere(params, CANONICAL_CENTER, screen_pos)

    radius = math.hypot(x, z)
    if radius == 0:
        raise DegenerateViewError(f"Screen position {screen_pos} lies on the polar axis.")
    phi0 = math.atan2(z, x)
    sin_phi = gu.clamp(math.sin(sphere_pos.polar) / radius, -1.0, 1.0)
    target_x, target_y, _ = sphere_pos.to_unit().to_cartesian()

    centers = []
    for phi in _tilt_candidates(phi0, sin_phi):
        tilted_x = x * math.cos(phi) - z * math.sin(phi)
        theta = gu.signed_angle((tilted_x, y), (target_x, target_y))
        centers.append(SphericalPoint(1.0, theta, phi))

    if previous is None or len(centers) == 1:
        return centers[0]
    reference = previous.to_unit().to_cartesian()
    return max(centers, key=lambda c: gu.dot_product(c.to_cartesian(), reference))


class SpherePosCalculator:
    """
    Maps between screen positions and sphere points for the current view.

    Responsible for:
    - Holding the view parameters and the current anchor.
    - Caching the center orientation, solving it only when stale.
    - Deriving the camera vectors handed to a renderer.
    """

    def __init__(self,
                 params: ViewParameters | None = None,
                 center: SphericalPoint | None = None) -> None:
        center = (center or CANONICAL_CENTER).to_unit()
        self._params: ViewParameters = params or ViewParameters()
        self._anchor = Anchor(SCREEN_CENTER, center)
        self._cache = CenterCache(valid=True, value=center)

    # =====================================================
    # View parameters
    # =====================================================

    @property
    def params(self) -> ViewParameters:
        return self._params

    @property
    def resolution(self) -> tuple[float, float]:
        return self._params.width, self._params.height

    @property
    def view_angle(self) -> float:
        return self._params.view_angle

    @property
    def eye_dist(self) -> float:
        return self._params.eye_dist

    def set_resolution(self, width: float, height: float) -> None:
        self._set_params(self._params.with_resolution(width, height))

    def set_view_angle(self, view_angle: float) -> None:
        self._set_params(self._params.with_view_angle(view_angle))

    def set_eye_distance(self, eye_dist: float) -> None:
        self._set_params(self._params.with_eye_dist(eye_dist))

    def _set_params(self, params: ViewParameters) -> None:
        if params == self._params:
            return
        self._params = params
        self._invalidate()

    # =====================================================
    # Anchor
    # =====================================================

    @property
    def fixed_point(self) -> Anchor:
        """The current anchor."""
        return self._anchor

    def set_fixed_point(self, screen_pos: ScreenPosition, sphere_pos: SphericalPoint) -> None:
        """
        Keep ``sphere_pos`` under ``screen_pos``.

        The center orientation is solved on the next read unless the anchor
        is at the screen center, in which case it is ``sphere_pos`` itself.
        """
        screen_pos = (float(screen_pos[0]), float(screen_pos[1]))
        self._anchor = Anchor(screen_pos, sphere_pos.to_unit())
        self._invalidate()

    def clear_fixed_point(self) -> None:
        """Make the current center the anchor, leaving the view unchanged."""
        center = self.center_orientation()
        self._anchor = Anchor(SCREEN_CENTER, center)

    def _invalidate(self) -> None:
        if self._anchor.is_centered:
            self._cache = CenterCache(valid=True, value=self._anchor.sphere_pos)
        else:
            self._cache = CenterCache.stale(self._cache.value)

    # =====================================================
    # State snapshots
    # =====================================================

    def snapshot(self) -> CalculatorState:
        return CalculatorState(self._params, self._anchor, self._cache)

    def restore(self, state: CalculatorState) -> None:
        self._params = state.params
        self._anchor = state.anchor
        self._cache = state.cache

    # =====================================================
    # Derived camera
    # =====================================================

    def center_orientation(self) -> SphericalPoint:
        """
        The sphere point the camera looks straight at.

        :raises GeometryError: if the anchor cannot be solved for
        """
        if not self._cache.valid:
            center = solve_center(self._params,
                                  self._anchor.screen_pos,
                                  self._anchor.sphere_pos,
                                  self._cache.value)
            self._cache = CenterCache(valid=True, value=center)
            logger.debug("Solved center %s for anchor %s", center, self._anchor.screen_pos)
        return self._cache.value

    def center_position(self) -> Vector3:
        """Cartesian look-at target on the unit sphere."""
        return self.center_orientation().to_cartesian()

    def eye_position(self) -> Vector3:
        return gu.scale(self.center_position(), -self._params.eye_dist)

    def up_vector(self) -> Vector3:
        return camera_frame(self.center_orientation())[2]

    def right_vector(self) -> Vector3:
        return camera_frame(self.center_orientation())[1]

    def frustum(self) -> Frustum:
        return self._params.frustum()

    def unproject(self, screen_pos: ScreenPosition) -> SphericalPoint:
        """
        Sphere point currently shown at ``screen_pos``.

        :raises GeometryError: if the view is degenerate or the ray misses
        """
        center = self.center_orientation()
        if tuple(screen_pos) == SCREEN_CENTER:
            return center
        point = point_on_sphere(self._params, center, screen_pos)
        return SphericalPoint.from_cartesian(point).to_unit()

    def project(self, sphere_pos: SphericalPoint) -> ScreenPosition:
        """
        Screen position at which ``sphere_pos`` is currently shown.

        :raises GeometryError: if the view is degenerate or the point is
            behind the eye
        """
        center = self.center_orientation()
        return project_point(self._params, center, sphere_pos.to_unit().to_cartesian())
