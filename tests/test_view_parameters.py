import math

import pytest

from panoview.core.errors import DegenerateViewError, GeometryError
from panoview.core.view_parameters import FAR_PLANE_MARGIN, ViewParameters


@pytest.fixture
def params():
    return ViewParameters(width=800, height=600, view_angle=math.radians(60), eye_dist=0.5)


def test_screen_factors_landscape(params):
    sx, sy = params.screen_factors()
    assert sx == pytest.approx(0.183012701892219, abs=1e-12)
    assert sy == pytest.approx(0.134380551032345, abs=1e-12)


def test_view_angle_applies_to_larger_dimension(params):
    hor, ver = params.view_angles()
    assert hor == pytest.approx(math.radians(60))
    assert ver == pytest.approx(math.radians(45))

    hor, ver = params.with_resolution(600, 800).view_angles()
    assert hor == pytest.approx(math.radians(45))
    assert ver == pytest.approx(math.radians(60))


def test_screen_scale_grows_with_eye_distance(params):
    angle = math.radians(90)
    near = params.with_eye_dist(0.2).screen_scale(angle)
    far = params.with_eye_dist(0.9).screen_scale(angle)
    assert 0 < near < far < math.sin(angle / 2)


def test_frustum(params):
    sx, sy = params.screen_factors()
    f = params.frustum()
    assert (f.left, f.right) == pytest.approx((-sx, sx))
    assert (f.bottom, f.top) == pytest.approx((-sy, sy))
    assert f.near == 0.5
    assert f.far == pytest.approx(0.5 + FAR_PLANE_MARGIN)


def test_with_helpers_do_not_mutate(params):
    other = params.with_view_angle(math.radians(90))
    assert params.view_angle == pytest.approx(math.radians(60))
    assert other.view_angle == pytest.approx(math.radians(90))
    assert other.width == params.width


def test_eye_inside_and_outside_sphere_are_valid(params):
    params.with_eye_dist(0.01).validate()
    params.with_eye_dist(3.0).validate()
    params.with_view_angle(math.pi).validate()


@pytest.mark.parametrize("change", [
    dict(width=0),
    dict(height=-1),
    dict(width=float("nan")),
    dict(height=float("inf")),
    dict(eye_dist=0.0),
    dict(eye_dist=-0.5),
    dict(view_angle=0.0),
    dict(view_angle=math.pi + 0.01),
])
def test_invalid_parameters(params, change):
    bad = ViewParameters(**{**params.__dict__, **change})
    with pytest.raises(DegenerateViewError):
        bad.validate()
    with pytest.raises(GeometryError):
        bad.screen_factors()


def test_geometry_errors_are_value_errors():
    assert issubclass(GeometryError, ValueError)
    assert issubclass(DegenerateViewError, GeometryError)
