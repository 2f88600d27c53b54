import pytest

from panoview.core.spherical import SphericalPoint
from panoview.viewers.camera.camera_state import CameraAngle, CameraStateManager


@pytest.mark.parametrize("azimuth, expected", [
    (0.0, 0.0), (180.0, 180.0), (-180.0, 180.0), (190.0, -170.0), (-190.0, 170.0), (720.0, 0.0),
])
def test_camera_angle_wraps_azimuth(azimuth, expected):
    assert CameraAngle(azimuth, 0.0).azimuth == pytest.approx(expected)


def test_camera_angle_clamps_polar():
    assert CameraAngle(0.0, 100.0).polar == 90.0
    assert CameraAngle(0.0, -100.0).polar == -90.0


def test_camera_angle_from_point():
    angle = CameraAngle.from_point(SphericalPoint.from_degrees(-45.0, 30.0))
    assert angle.azimuth == pytest.approx(-45.0)
    assert angle.polar == pytest.approx(30.0)
    assert str(angle) == "Azimuth: -45.0, Polar: 30.0"


def test_set_angle_notifies_on_change_only():
    state = CameraStateManager()
    received = []
    state.add_angle_changed_callback(received.append)

    state.set_angle(CameraAngle(0.0, 0.0))
    assert received == []

    state.set_angle(CameraAngle(10.0, 5.0))
    assert received == [CameraAngle(10.0, 5.0)]
    assert (state.azimuth, state.polar) == (10.0, 5.0)

    state.remove_angle_changed_callback(received.append)
    state.set_angle(CameraAngle(20.0, 5.0))
    assert len(received) == 1


def test_failing_callback_does_not_stop_others(caplog):
    state = CameraStateManager()
    received = []

    def broken(angle):
        raise RuntimeError("boom")

    state.add_angle_changed_callback(broken)
    state.add_angle_changed_callback(received.append)
    state.set_angle(CameraAngle(1.0, 2.0))

    assert received == [CameraAngle(1.0, 2.0)]
    assert "boom" in caplog.text
