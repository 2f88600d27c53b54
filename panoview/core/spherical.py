"""Spherical coordinates on the panorama sphere."""
from __future__ import annotations

import math
from dataclasses import dataclass

from panoview.core.geometry_utils import Vector3, calculate_norm, clamp

HALF_PI = math.pi / 2
TWO_PI = 2 * math.pi


def wrap_azimuth(azimuth: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    wrapped = math.fmod(azimuth + math.pi, TWO_PI)
    if wrapped <= 0:
        wrapped += TWO_PI
    return wrapped - math.pi


def clamp_polar(polar: float) -> float:
    """Clamp a latitude-like angle into [-pi/2, pi/2]."""
    return clamp(polar, -HALF_PI, HALF_PI)


@dataclass(frozen=True)
class SphericalPoint:
    """
    Immutable point in spherical coordinates (radians).

    azimuth wraps into (-pi, pi], polar is measured from the equator and is
    clamped into [-pi/2, pi/2]. z is the polar axis.
    """
    radius: float
    azimuth: float
    polar: float

    def __post_init__(self):
        object.__setattr__(self, "azimuth", wrap_azimuth(self.azimuth))
        object.__setattr__(self, "polar", clamp_polar(self.polar))

    def __str__(self) -> str:
        return (f"Azimuth: {math.degrees(self.azimuth):.1f}, "
                f"Polar: {math.degrees(self.polar):.1f}")

    @classmethod
    def on_sphere(cls, azimuth: float, polar: float) -> SphericalPoint:
        """Point on the unit sphere."""
        return cls(1.0, azimuth, polar)

    @classmethod
    def from_degrees(cls, azimuth: float, polar: float) -> SphericalPoint:
        return cls(1.0, math.radians(azimuth), math.radians(polar))

    @classmethod
    def from_cartesian(cls, vector: Vector3) -> SphericalPoint:
        radius = calculate_norm(vector)
        if radius == 0:
            return cls(0.0, 0.0, 0.0)
        x, y, z = vector
        polar = math.asin(clamp(z / radius, -1.0, 1.0))
        return cls(radius, math.atan2(y, x), polar)

    def to_cartesian(self) -> Vector3:
        horizontal = self.radius * math.cos(self.polar)
        return (
            horizontal * math.cos(self.azimuth),
            horizontal * math.sin(self.azimuth),
            self.radius * math.sin(self.polar),
        )

    def to_unit(self) -> SphericalPoint:
        """Same direction on the unit sphere."""
        return SphericalPoint(1.0, self.azimuth, self.polar)

    def to_degrees(self) -> tuple[float, float]:
        """(azimuth, polar) in degrees."""
        return math.degrees(self.azimuth), math.degrees(self.polar)
