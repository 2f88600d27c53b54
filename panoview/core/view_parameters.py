"""View parameters: viewport, field of view and eye distance."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace

from panoview.core.errors import DegenerateViewError

# Distance from the screen plane to the far clipping plane beyond the sphere.
FAR_PLANE_MARGIN = 1.5


@dataclass(frozen=True)
class Frustum:
    """Perspective frustum bounds, given at the near plane."""
    left: float
    right: float
    bottom: float
    top: float
    near: float
    far: float


@dataclass(frozen=True)
class ViewParameters:
    """
    Immutable view configuration.

    Attributes:
        width: Viewport width in pixels
        height: Viewport height in pixels
        view_angle: Field of view along the larger screen dimension, radians
        eye_dist: Distance from the sphere center to the eye (sphere radius 1)
    """
    width: float = 1.0
    height: float = 1.0
    view_angle: float = math.radians(60)
    eye_dist: float = 0.5

    def __str__(self) -> str:
        return (f"{self.width:g}x{self.height:g}, "
                f"view angle {math.degrees(self.view_angle):.1f}, "
                f"eye distance {self.eye_dist:g}")

    def with_resolution(self, width: float, height: float) -> ViewParameters:
        return replace(self, width=float(width), height=float(height))

    def with_view_angle(self, view_angle: float) -> ViewParameters:
        return replace(self, view_angle=float(view_angle))

    def with_eye_dist(self, eye_dist: float) -> ViewParameters:
        return replace(self, eye_dist=float(eye_dist))

    def validate(self) -> None:
        """
        Check that the parameters describe a usable camera.

        :raises DegenerateViewError: if they do not
        """
        if not (math.isfinite(self.width) and math.isfinite(self.height)) \
                or self.width <= 0 or self.height <= 0:
            raise DegenerateViewError(
                f"Invalid screen resolution: {self.width}x{self.height}")
        if not math.isfinite(self.eye_dist) or self.eye_dist <= 0:
            raise DegenerateViewError(f"Invalid eye distance: {self.eye_dist}")
        if not math.isfinite(self.view_angle) or not 0 < self.view_angle <= math.pi:
            raise DegenerateViewError(f"Invalid view angle: {self.view_angle}")
        if self.eye_dist + math.cos(self.view_angle / 2) <= 0:
            raise DegenerateViewError(
                f"Eye distance {self.eye_dist} too small for view angle {self.view_angle}")

    def view_angles(self) -> tuple[float, float]:
        """
        Split the view angle into (horizontal, vertical) fields of view.

        The view angle applies to the larger screen dimension, the other
        one gets a proportional share.
        """
        if self.width >= self.height:
            return self.view_angle, self.height * self.view_angle / self.width
        return self.width * self.view_angle / self.height, self.view_angle

    def screen_scale(self, angle: float) -> float:
        """Half extent on the screen plane of a field of view ``angle``."""
        half = angle / 2
        return math.sin(half) * self.eye_dist / (self.eye_dist + math.cos(half))

    def screen_factors(self) -> tuple[float, float]:
        """
        Half extents (horizontal, vertical) of the screen plane.

        The screen plane passes through the sphere center, perpendicular to
        the view direction.

        :raises DegenerateViewError: if the parameters are invalid
        """
        self.validate()
        hor_angle, ver_angle = self.view_angles()
        return self.screen_scale(hor_angle), self.screen_scale(ver_angle)

    def frustum(self) -> Frustum:
        """
        Frustum matching the screen plane.

        The near plane is the screen plane, so its half extents are the
        screen factors and ``unproject`` agrees with what is rendered.
        """
        sx, sy = self.screen_factors()
        return Frustum(
            left=-sx, right=sx,
            bottom=-sy, top=sy,
            near=self.eye_dist,
            far=self.eye_dist + FAR_PLANE_MARGIN,
        )
