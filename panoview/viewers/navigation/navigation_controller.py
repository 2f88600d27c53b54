"""Navigation controller - turns pointer and frame events into a camera orientation."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from panoview.core.errors import GeometryError
from panoview.core.geometry_utils import Vector3
from panoview.core.motion import (
    MotionConfig,
    ScreenMotion,
    TimestampedSample,
    estimate_motion,
    integrate_motion,
)
from panoview.core.ring_buffer import RingBuffer
from panoview.core.sphere_pos_calculator import (
    SCREEN_CENTER,
    CalculatorState,
    ScreenPosition,
    SpherePosCalculator,
)
from panoview.core.spherical import SphericalPoint
from panoview.core.view_parameters import Frustum
from panoview.core.zoom import (
    DEFAULT_ZOOM_LEVEL,
    clamp_zoom_level,
    view_angle_for_level,
)
from panoview.viewers.camera.camera_state import CameraAngle, CameraStateManager

logger = logging.getLogger(__name__)


def pixel_to_screen_pos(x: float, y: float, width: float, height: float,
                        y_up: bool = True) -> ScreenPosition:
    """
    Convert a pixel position to normalized screen coordinates in [-1, 1].

    :param y_up: True if pixel rows count from the bottom (VTK), False if
        they count from the top (Qt)
    """
    if width <= 0 or height <= 0:
        return SCREEN_CENTER
    if not y_up:
        y = height - y
    return 2.0 * x / width - 1.0, 2.0 * y / height - 1.0


@dataclass(frozen=True)
class CameraVectors:
    """Everything a renderer needs to place the camera for one frame."""
    eye: Vector3
    target: Vector3
    up: Vector3
    frustum: Frustum


class NavigationController:
    """
    Owns the navigation state of one panorama view.

    Pointer events move an anchor on the sphere, the recent center
    orientations are kept in a small ring buffer, and releasing the pointer
    may start an inertial motion that ``frame`` advances until it expires.

    All handlers run on the GUI thread. A GeometryError raised while handling
    an event is logged and the previous state is kept.

    Usage:
        nav = NavigationController()
        nav.resize(800, 600)
        nav.pointer_down((0.1, 0.2))
        nav.pointer_move((0.3, 0.2))
        nav.pointer_up()
        while nav.frame():
            render(nav.camera_vectors())
    """

    def __init__(self,
                 calculator: SpherePosCalculator | None = None,
                 config: MotionConfig | None = None,
                 zoom_level: int = DEFAULT_ZOOM_LEVEL,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.calculator = calculator or SpherePosCalculator()
        self.config = config or MotionConfig()
        self.state = CameraStateManager()
        self._clock = clock

        self._history: RingBuffer[TimestampedSample] = RingBuffer(self.config.history_size)
        self._motion: ScreenMotion | None = None
        self._is_panning = False
        self._pointer_pos: ScreenPosition = SCREEN_CENTER

        self._zoom_level = clamp_zoom_level(zoom_level)
        self.calculator.set_view_angle(view_angle_for_level(self._zoom_level))

        center = self.center_orientation()
        if center is not None:
            self._notify_orientation(center)

    # =====================================================
    # Properties
    # =====================================================

    @property
    def is_panning(self) -> bool:
        return self._is_panning

    @property
    def motion(self) -> ScreenMotion | None:
        """The active inertial motion, if any."""
        return self._motion

    @property
    def history(self) -> tuple[TimestampedSample, ...]:
        """Recent center orientations, oldest first."""
        return tuple(self._history)

    @property
    def pointer_pos(self) -> ScreenPosition:
        return self._pointer_pos

    @property
    def zoom_level(self) -> int:
        return self._zoom_level

    @property
    def view_angle(self) -> float:
        return self.calculator.view_angle

    def add_angle_changed_callback(self, callback: Callable[[CameraAngle], None]) -> None:
        """Add a callback for orientation changes."""
        self.state.add_angle_changed_callback(callback)

    # =====================================================
    # Pointer events
    # =====================================================

    def pointer_down(self, pos: ScreenPosition, now: float | None = None) -> bool:
        """
        Start a drag at ``pos``; discards any inertial motion.

        :return: True if the drag started
        """
        now = self._now(now)
        self._motion = None
        self._is_panning = False
        self._pointer_pos = pos

        snapshot = self.calculator.snapshot()
        try:
            center = self.calculator.center_orientation()
            sphere_pos = self.calculator.unproject(pos)
            self.calculator.set_fixed_point(pos, sphere_pos)
        except GeometryError as e:
            self._reject("pointer down", e, snapshot)
            return False

        self._history.clear()
        self._history.push(TimestampedSample(now, center))
        self._is_panning = True
        logger.debug("Drag started at %s on %s", pos, sphere_pos)
        return True

    def pointer_move(self, pos: ScreenPosition, now: float | None = None) -> bool:
        """
        Move the pointer; while dragging, the anchored sphere point follows it.

        :return: True if the view changed and needs a redraw
        """
        now = self._now(now)
        self._pointer_pos = pos
        if not self._is_panning:
            return False

        snapshot = self.calculator.snapshot()
        try:
            self.calculator.set_fixed_point(pos, self.calculator.fixed_point.sphere_pos)
            center = self.calculator.center_orientation()
        except GeometryError as e:
            self._reject("pointer move", e, snapshot)
            return False

        self._history.push(TimestampedSample(now, center))
        self._notify_orientation(center)
        return True

    def pointer_up(self, now: float | None = None) -> bool:
        """
        End a drag and start an inertial motion if the pointer was moving.

        :return: True if a motion started
        """
        now = self._now(now)
        if not self._is_panning:
            return False
        self._is_panning = False

        snapshot = self.calculator.snapshot()
        try:
            self.calculator.clear_fixed_point()
        except GeometryError as e:
            self._reject("pointer up", e, snapshot)
            return False

        self._motion = estimate_motion(self._history, now, self.config)
        return self._motion is not None

    # =====================================================
    # Frames
    # =====================================================

    def frame(self, now: float | None = None) -> bool:
        """
        Advance the inertial motion.

        :return: True if the view changed and needs a redraw
        """
        if self._motion is None:
            return False
        now = self._now(now)

        position = integrate_motion(self._motion, now)
        if position is None:
            logger.debug("Motion expired.")
            self._motion = None
            return False

        self.calculator.set_fixed_point(SCREEN_CENTER, position)
        self._notify_orientation(position)
        return True

    def resize(self, width: float, height: float) -> None:
        self.calculator.set_resolution(width, height)

    # =====================================================
    # Zoom and direction
    # =====================================================

    def set_zoom_level(self, level: int) -> bool:
        """
        Set the zoom level, clamped to the zoom table.

        :return: True if the level changed
        """
        level = clamp_zoom_level(level)
        if level == self._zoom_level:
            return False

        snapshot = self.calculator.snapshot()
        self.calculator.set_view_angle(view_angle_for_level(level))
        try:
            center = self.calculator.center_orientation()
        except GeometryError as e:
            self._reject("zoom", e, snapshot)
            return False

        self._zoom_level = level
        self._notify_orientation(center)
        logger.debug(f"Zoom level {level}, view angle {self.calculator.view_angle:.4f}")
        return True

    def zoom_in(self) -> bool:
        return self.set_zoom_level(self._zoom_level + 1)

    def zoom_out(self) -> bool:
        return self.set_zoom_level(self._zoom_level - 1)

    def set_view_direction(self, azimuth: float, polar: float) -> None:
        """Look at (azimuth, polar) in radians; stops any drag or motion."""
        self._motion = None
        self._is_panning = False
        center = SphericalPoint.on_sphere(azimuth, polar)
        self.calculator.set_fixed_point(SCREEN_CENTER, center)
        self._notify_orientation(center)

    # =====================================================
    # Queries
    # =====================================================

    def center_orientation(self) -> SphericalPoint | None:
        try:
            return self.calculator.center_orientation()
        except GeometryError as e:
            logger.warning("No center orientation: %s", e)
            return None

    def camera_vectors(self) -> CameraVectors | None:
        """Camera placement for the current frame, or None if the view is degenerate."""
        try:
            return CameraVectors(
                eye=self.calculator.eye_position(),
                target=self.calculator.center_position(),
                up=self.calculator.up_vector(),
                frustum=self.calculator.frustum(),
            )
        except GeometryError as e:
            logger.warning("Skipping frame: %s", e)
            return None

    def pick(self, pos: ScreenPosition) -> SphericalPoint | None:
        """Sphere point shown at ``pos``, or None if there is none."""
        try:
            return self.calculator.unproject(pos)
        except GeometryError as e:
            logger.warning("Nothing to pick at %s: %s", pos, e)
            return None

    # =====================================================
    # Internals
    # =====================================================

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def _reject(self, action: str, error: GeometryError, snapshot: CalculatorState) -> None:
        self.calculator.restore(snapshot)
        logger.warning("Ignoring %s: %s", action, error)

    def _notify_orientation(self, center: SphericalPoint) -> None:
        self.state.set_angle(CameraAngle.from_point(center))
