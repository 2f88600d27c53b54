import math

import pytest

from panoview.core import sphere_pos_calculator as spc
from panoview.core.errors import DegenerateViewError, NoIntersectionError
from panoview.core.spherical import HALF_PI, SphericalPoint
from panoview.core.view_parameters import ViewParameters
from panoview.core.sphere_pos_calculator import SCREEN_CENTER, SpherePosCalculator


@pytest.fixture
def params():
    return ViewParameters(width=800, height=600, view_angle=math.radians(60), eye_dist=0.5)


@pytest.fixture
def calc(params):
    return SpherePosCalculator(params)


@pytest.fixture
def solve_calls(monkeypatch):
    """Count calls of the center solver."""
    calls = []
    solve = spc.solve_center

    def counting(*args):
        calls.append(args)
        return solve(*args)

    monkeypatch.setattr(spc, "solve_center", counting)
    return calls


def _assert_same_point(p, q, abs=1e-9):
    assert p.azimuth == pytest.approx(q.azimuth, abs=abs)
    assert p.polar == pytest.approx(q.polar, abs=abs)


def test_default_center(calc):
    center = calc.center_orientation()
    assert (center.azimuth, center.polar) == (0.0, 0.0)
    assert calc.fixed_point.is_centered


def test_unproject_screen_center_is_center(calc):
    assert calc.unproject(SCREEN_CENTER) == calc.center_orientation()


def test_unproject_right_of_center(calc):
    p = calc.unproject((0.5, 0.0))
    assert p.azimuth == pytest.approx(-0.271142904513528, abs=1e-9)
    assert p.polar == pytest.approx(0.0, abs=1e-12)
    assert p.to_cartesian() == pytest.approx((0.963465418415855, -0.267832760350113, 0.0), abs=1e-9)

    q = calc.unproject((0.25, 0.0))
    assert q.azimuth == pytest.approx(-0.136830813965755, abs=1e-9)


def test_unproject_above_center_has_positive_polar(calc):
    p = calc.unproject((0.0, 0.5))
    assert p.polar > 0
    assert p.azimuth == pytest.approx(0.0, abs=1e-12)


def test_drag_solves_center(calc):
    s = calc.unproject((0.5, 0.0))
    calc.set_fixed_point((0.25, 0.0), s)

    center = calc.center_orientation()
    assert center.azimuth == pytest.approx(-0.134312090547773, abs=1e-9)
    assert center.polar == pytest.approx(0.0, abs=1e-9)
    _assert_same_point(calc.unproject((0.25, 0.0)), s)


def test_diagonal_anchor_recovers_center(params):
    center = SphericalPoint.on_sphere(0.3, 0.2)
    seen = SpherePosCalculator(params, center).unproject((0.4, -0.3))
    assert seen.azimuth == pytest.approx(0.082526960417, abs=1e-6)
    assert seen.polar == pytest.approx(0.076547825057, abs=1e-6)

    calc = SpherePosCalculator(params)
    calc.set_fixed_point((0.4, -0.3), seen)
    _assert_same_point(calc.center_orientation(), center)


@pytest.mark.parametrize("screen_pos, sphere_pos", [
    ((0.3, 0.4), SphericalPoint.on_sphere(1.0, 0.5)),
    ((-0.8, -0.2), SphericalPoint.on_sphere(-2.5, -0.3)),
    ((0.9, 0.9), SphericalPoint.on_sphere(3.0, 0.1)),
    ((-0.1, 0.6), SphericalPoint.on_sphere(0.0, -0.6)),
])
def test_anchor_stays_under_pointer(calc, screen_pos, sphere_pos):
    calc.set_fixed_point(screen_pos, sphere_pos)
    _assert_same_point(calc.unproject(screen_pos), sphere_pos, abs=1e-7)


def test_unreachable_anchor_clamps_polar(calc):
    calc.set_fixed_point((0.0, -0.9), SphericalPoint.on_sphere(0.0, HALF_PI))
    assert calc.center_orientation().polar == pytest.approx(HALF_PI)


def test_anchor_beyond_pole_keeps_view(params):
    center = SphericalPoint.on_sphere(0.0, math.radians(80))
    calc = SpherePosCalculator(params, center)
    seen = calc.unproject((0.0, 0.9))
    # The point lies beyond the north pole, on the far meridian.
    assert abs(seen.azimuth) == pytest.approx(math.pi, abs=1e-9)

    calc.set_fixed_point((0.0, 0.9), seen)
    _assert_same_point(calc.center_orientation(), center)
    assert calc.unproject((0.0, 0.9)).to_cartesian() == pytest.approx(seen.to_cartesian(), abs=1e-9)


def test_solve_center_prefers_previous_center(params):
    center = SphericalPoint.on_sphere(0.0, math.radians(80))
    seen = SpherePosCalculator(params, center).unproject((0.0, 0.9))

    near = spc.solve_center(params, (0.0, 0.9), seen, center)
    _assert_same_point(near, center)

    flipped = spc.solve_center(params, (0.0, 0.9), seen, SphericalPoint.on_sphere(math.pi, 1.0))
    assert abs(flipped.azimuth) == pytest.approx(math.pi, abs=1e-9)
    assert flipped.polar < math.radians(70)
    calc = SpherePosCalculator(params, flipped)
    assert calc.unproject((0.0, 0.9)).to_cartesian() == pytest.approx(seen.to_cartesian(), abs=1e-7)


@pytest.mark.parametrize("screen_pos", [(0.5, 0.0), (-0.7, 0.3), (0.95, -0.95), (0.0, 1.0)])
def test_project_inverts_unproject(params, screen_pos):
    calc = SpherePosCalculator(params, SphericalPoint.on_sphere(0.3, 0.2))
    assert calc.project(calc.unproject(screen_pos)) == pytest.approx(screen_pos, abs=1e-6)


def test_project_behind_eye_raises(calc):
    with pytest.raises(NoIntersectionError):
        calc.project(SphericalPoint.on_sphere(math.pi, 0.0))


def test_ray_missing_sphere_raises(params):
    calc = SpherePosCalculator(params.with_eye_dist(3.0))
    calc.unproject((1.0, 0.0))
    with pytest.raises(NoIntersectionError):
        calc.unproject((3.0, 0.0))


def test_degenerate_resolution(calc):
    calc.set_resolution(0, 600)
    # A centered anchor needs no solve.
    assert calc.center_orientation() == SphericalPoint.on_sphere(0.0, 0.0)
    with pytest.raises(DegenerateViewError):
        calc.unproject((0.5, 0.0))

    calc.set_fixed_point((0.2, 0.0), SphericalPoint.on_sphere(0.1, 0.0))
    with pytest.raises(DegenerateViewError):
        calc.center_orientation()


def test_center_is_solved_once(calc, solve_calls):
    calc.set_fixed_point((0.3, 0.1), SphericalPoint.on_sphere(0.5, 0.2))
    first = calc.center_orientation()
    second = calc.center_orientation()
    calc.unproject((0.1, 0.1))
    assert first == second
    assert len(solve_calls) == 1


def test_unchanged_parameters_keep_cache(calc, solve_calls):
    calc.set_fixed_point((0.3, 0.1), SphericalPoint.on_sphere(0.5, 0.2))
    calc.center_orientation()

    calc.set_resolution(800, 600)
    calc.set_view_angle(math.radians(60))
    calc.set_eye_distance(0.5)
    calc.center_orientation()
    assert len(solve_calls) == 1

    calc.set_resolution(1024, 768)
    calc.center_orientation()
    assert len(solve_calls) == 2

    calc.set_view_angle(math.radians(90))
    calc.center_orientation()
    assert len(solve_calls) == 3


def test_centered_anchor_needs_no_solve(calc, solve_calls):
    target = SphericalPoint.on_sphere(1.0, -0.4)
    calc.set_fixed_point(SCREEN_CENTER, target)
    center = calc.center_orientation()
    assert (center.azimuth, center.polar) == pytest.approx((target.azimuth, target.polar))
    assert solve_calls == []


def test_clear_fixed_point_keeps_view(calc):
    calc.set_fixed_point((0.5, 0.5), SphericalPoint.on_sphere(0.2, 0.1))
    center = calc.center_orientation()

    calc.clear_fixed_point()
    assert calc.fixed_point.is_centered
    assert calc.fixed_point.sphere_pos == center
    assert calc.center_orientation() == center


def test_snapshot_restore(calc):
    state = calc.snapshot()
    calc.set_resolution(1, 1)
    calc.set_fixed_point((0.5, 0.5), SphericalPoint.on_sphere(0.2, 0.1))

    calc.restore(state)
    assert calc.resolution == (800, 600)
    assert calc.fixed_point.is_centered
    assert calc.center_orientation() == SphericalPoint.on_sphere(0.0, 0.0)


def test_camera_vectors_at_default_center(calc):
    assert calc.center_position() == pytest.approx((1.0, 0.0, 0.0))
    assert calc.eye_position() == pytest.approx((-0.5, 0.0, 0.0))
    assert calc.up_vector() == pytest.approx((0.0, 0.0, 1.0))
    assert calc.right_vector() == pytest.approx((0.0, -1.0, 0.0))


def test_camera_frame_at_pole():
    forward, right, up = spc.camera_frame(SphericalPoint.on_sphere(0.0, HALF_PI))
    assert forward == pytest.approx((0.0, 0.0, 1.0), abs=1e-12)
    assert up == pytest.approx((-1.0, 0.0, 0.0), abs=1e-12)
    assert right == pytest.approx((0.0, -1.0, 0.0), abs=1e-12)


def test_frustum_matches_screen_factors(calc, params):
    assert calc.frustum() == params.frustum()
