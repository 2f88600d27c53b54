import math

import pytest

from panoview.core import zoom


def test_table():
    assert len(zoom.ZOOM_VIEW_ANGLES_DEG) == 20
    assert zoom.MIN_ZOOM_LEVEL == 0
    assert zoom.MAX_ZOOM_LEVEL == 19
    assert list(zoom.ZOOM_VIEW_ANGLES_DEG) == sorted(zoom.ZOOM_VIEW_ANGLES_DEG, reverse=True)


def test_default_level_is_60_degrees():
    assert zoom.DEFAULT_ZOOM_LEVEL == 12
    assert zoom.view_angle_deg_for_level(zoom.DEFAULT_ZOOM_LEVEL) == 60.0


@pytest.mark.parametrize("level, expected", [(-5, 0), (0, 0), (7, 7), (19, 19), (25, 19)])
def test_clamp_zoom_level(level, expected):
    assert zoom.clamp_zoom_level(level) == expected


def test_view_angle_for_level():
    assert zoom.view_angle_for_level(0) == pytest.approx(math.radians(120))
    assert zoom.view_angle_for_level(19) == pytest.approx(math.radians(4))
    assert zoom.view_angle_for_level(-1) == pytest.approx(math.radians(120))


def test_level_for_view_angle():
    assert zoom.level_for_view_angle(math.radians(60)) == 12
    assert zoom.level_for_view_angle(math.radians(58)) == 12
    assert zoom.level_for_view_angle(math.radians(170)) == 0
    assert zoom.level_for_view_angle(math.radians(1)) == 19
