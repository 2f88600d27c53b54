import logging
import math

import pytest

from panoview.core.motion import MAX_SPEED
from panoview.core.sphere_pos_calculator import SpherePosCalculator
from panoview.core.view_parameters import ViewParameters
from panoview.core.zoom import DEFAULT_ZOOM_LEVEL, MAX_ZOOM_LEVEL
from panoview.viewers.navigation.navigation_controller import (
    NavigationController,
    pixel_to_screen_pos,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def nav(clock):
    nav = NavigationController(clock=clock)
    nav.resize(800, 600)
    return nav


def _drag(nav, clock):
    """Drag the point at (0.5, 0) to (0.25, 0) within 10 ms."""
    clock.now = 0.0
    assert nav.pointer_down((0.5, 0.0))
    clock.now = 0.01
    assert nav.pointer_move((0.25, 0.0))


def test_initial_state(nav):
    assert nav.zoom_level == DEFAULT_ZOOM_LEVEL
    assert nav.view_angle == pytest.approx(math.radians(60))
    assert not nav.is_panning
    assert nav.motion is None
    center = nav.center_orientation()
    assert (center.azimuth, center.polar) == (0.0, 0.0)


def test_pixel_to_screen_pos():
    assert pixel_to_screen_pos(400, 300, 800, 600) == (0.0, 0.0)
    assert pixel_to_screen_pos(0, 0, 800, 600) == (-1.0, -1.0)
    assert pixel_to_screen_pos(800, 600, 800, 600) == (1.0, 1.0)
    assert pixel_to_screen_pos(0, 0, 800, 600, y_up=False) == (-1.0, 1.0)
    assert pixel_to_screen_pos(10, 10, 0, 600) == (0.0, 0.0)


def test_drag_moves_center(nav, clock):
    _drag(nav, clock)

    assert nav.is_panning
    assert nav.pointer_pos == (0.25, 0.0)
    center = nav.center_orientation()
    assert center.azimuth == pytest.approx(-0.134312090547773, abs=1e-9)
    assert nav.state.azimuth == pytest.approx(math.degrees(-0.134312090547773), abs=1e-6)
    assert len(nav.history) == 2


def test_move_without_drag_does_nothing(nav):
    assert not nav.pointer_move((0.3, 0.3), now=0.0)
    assert nav.pointer_pos == (0.3, 0.3)
    assert nav.history == ()


def test_history_is_bounded(nav):
    nav.pointer_down((0.0, 0.0), now=0.0)
    for i in range(1, 6):
        nav.pointer_move((0.05 * i, 0.0), now=0.01 * i)
    assert len(nav.history) == nav.config.history_size
    assert nav.history[-1].timestamp == pytest.approx(0.05)


def test_fling_after_fast_release(nav, clock):
    _drag(nav, clock)
    clock.now = 0.02
    assert nav.pointer_up()

    motion = nav.motion
    assert not nav.is_panning
    assert nav.calculator.fixed_point.is_centered
    assert motion.azimuth_speed == -MAX_SPEED
    assert motion.duration == pytest.approx(2.0)

    released = nav.center_orientation().azimuth
    assert nav.frame(now=0.5)
    assert nav.center_orientation().azimuth < released

    assert not nav.frame(now=2.1)
    assert nav.motion is None
    assert not nav.frame(now=2.2)


def test_slow_release_stops(nav, clock):
    _drag(nav, clock)
    assert not nav.pointer_up(now=1.0)
    assert nav.motion is None
    assert not nav.frame(now=1.1)


def test_release_without_drag(nav):
    assert not nav.pointer_up(now=0.0)


def test_pointer_down_cancels_motion(nav, clock):
    _drag(nav, clock)
    nav.pointer_up(now=0.02)
    assert nav.motion is not None

    stopped_at = nav.center_orientation()
    assert nav.pointer_down((0.0, 0.0), now=0.03)
    assert nav.motion is None
    assert nav.center_orientation().azimuth == pytest.approx(stopped_at.azimuth)


def test_drag_near_pole_does_not_flip(nav, clock):
    nav.set_view_direction(0.0, math.radians(80))
    clock.now = 0.0
    assert nav.pointer_down((0.0, 0.9))
    clock.now = 0.01
    assert nav.pointer_move((0.0, 0.9))

    center = nav.center_orientation()
    assert center.azimuth == pytest.approx(0.0, abs=1e-9)
    assert center.polar == pytest.approx(math.radians(80), abs=1e-9)


def test_rejected_event_keeps_state(clock, caplog):
    params = ViewParameters(width=800, height=600, eye_dist=3.0)
    nav = NavigationController(SpherePosCalculator(params), clock=clock)
    before = nav.calculator.snapshot()

    with caplog.at_level(logging.WARNING):
        assert not nav.pointer_down((3.0, 0.0))

    assert not nav.is_panning
    assert nav.calculator.snapshot() == before
    assert "Ignoring pointer down" in caplog.text


def test_degenerate_view_skips_frame(nav, caplog):
    nav.resize(0, 0)
    with caplog.at_level(logging.WARNING):
        assert nav.camera_vectors() is None
        assert nav.pick((0.5, 0.0)) is None


def test_camera_vectors(nav):
    vectors = nav.camera_vectors()
    assert vectors.eye == pytest.approx((-0.5, 0.0, 0.0))
    assert vectors.target == pytest.approx((1.0, 0.0, 0.0))
    assert vectors.up == pytest.approx((0.0, 0.0, 1.0))
    assert vectors.frustum == nav.calculator.frustum()


def test_pick(nav):
    assert nav.pick((0.5, 0.0)).azimuth == pytest.approx(-0.271142904513528, abs=1e-9)


def test_zoom_levels(nav):
    assert nav.zoom_in()
    assert nav.zoom_level == DEFAULT_ZOOM_LEVEL + 1
    assert nav.view_angle == pytest.approx(math.radians(52))

    assert nav.zoom_out()
    assert nav.zoom_out()
    assert nav.zoom_level == DEFAULT_ZOOM_LEVEL - 1

    assert nav.set_zoom_level(100)
    assert nav.zoom_level == MAX_ZOOM_LEVEL
    assert not nav.zoom_in()
    assert not nav.set_zoom_level(MAX_ZOOM_LEVEL)


def test_zoom_keeps_dragged_point_under_pointer(nav, clock):
    _drag(nav, clock)
    anchor = nav.calculator.fixed_point

    assert nav.zoom_in()
    seen = nav.pick(anchor.screen_pos)
    assert seen.azimuth == pytest.approx(anchor.sphere_pos.azimuth, abs=1e-9)
    assert seen.polar == pytest.approx(anchor.sphere_pos.polar, abs=1e-9)


def test_set_view_direction_notifies(nav):
    angles = []
    nav.add_angle_changed_callback(angles.append)

    nav.set_view_direction(math.radians(30), math.radians(10))

    assert angles[-1].azimuth == pytest.approx(30.0)
    assert angles[-1].polar == pytest.approx(10.0)
    assert nav.calculator.fixed_point.is_centered


def test_initial_direction_is_published(clock):
    from panoview.core.spherical import SphericalPoint

    calc = SpherePosCalculator(center=SphericalPoint.from_degrees(45.0, -20.0))
    nav = NavigationController(calc, clock=clock)
    assert nav.state.azimuth == pytest.approx(45.0)
    assert nav.state.polar == pytest.approx(-20.0)
