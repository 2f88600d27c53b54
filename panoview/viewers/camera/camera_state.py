"""Camera state management separated from UI concerns."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging

from panoview.core.spherical import SphericalPoint


@dataclass
class CameraAngle:
    "Camera orientation in degrees: azimuth in (-180, 180], polar in [-90, 90]."
    azimuth: float
    polar: float

    def __post_init__(self):
        self.azimuth = -((-self.azimuth + 180) % 360) + 180
        self.polar = max(-90.0, min(90.0, self.polar))

    def __str__(self) -> str:
        return f"Azimuth: {self.azimuth:.1f}, Polar: {self.polar:.1f}"

    @classmethod
    def from_point(cls, point: SphericalPoint) -> CameraAngle:
        azimuth, polar = point.to_degrees()
        return cls(azimuth, polar)


class CameraStateManager:
    """
    Tracks the camera orientation independently.

    Responsible for:
    - Tracking the orientation the camera looks at.
    - Callbacks for orientation changes.
    - Don't have concerns about UI.
    """

    def __init__(self):
        self._angle: CameraAngle = CameraAngle(0.0, 0.0)
        self._on_angle_changed_callbacks: list[Callable[[CameraAngle], None]] = []

    @property
    def angle(self) -> CameraAngle:
        """Get current camera angle."""
        return self._angle

    @property
    def azimuth(self) -> float:
        return self._angle.azimuth

    @property
    def polar(self) -> float:
        return self._angle.polar

    def set_angle(self, angle: CameraAngle) -> None:
        """Set the camera angle, notifying callbacks if it changed."""
        if angle.azimuth != self._angle.azimuth or angle.polar != self._angle.polar:
            self._angle = angle
            self._notify_angle_changed()

    def add_angle_changed_callback(self, callback: Callable[[CameraAngle], None]) -> None:
        """
        Add a callback for camera angle changes.

        Callback signature: callback(angle: CameraAngle)-> None
        """
        self._on_angle_changed_callbacks.append(callback)

    def remove_angle_changed_callback(self, callback: Callable[[CameraAngle], None]) -> None:
        """Remove a callback for camera angle changes."""
        self._on_angle_changed_callbacks.remove(callback)

    def _notify_angle_changed(self) -> None:
        """Notify callbacks of camera angle changes."""
        for callback in self._on_angle_changed_callbacks:
            try:
                callback(self._angle)
            except Exception as e:
                logging.exception(f"Error in callback: {e}")
