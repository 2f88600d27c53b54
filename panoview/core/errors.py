"""Errors raised by the sphere navigation engine."""
from __future__ import annotations


class GeometryError(ValueError):
    """Base class for view/sphere geometry failures."""


class NoIntersectionError(GeometryError):
    """A view ray does not hit the unit sphere."""


class DegenerateViewError(GeometryError):
    """
    The view parameters cannot produce a valid camera.

    Raised when ViewParameters.validate fails or a view ray has no usable
    direction.
    """
