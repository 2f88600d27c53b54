from __future__ import annotations

import logging
import math

import vtk

from panoview.core import geometry_utils
from panoview.core.projection import frustum_matrix
from panoview.utils import vtk_helpers
from panoview.viewers.camera.camera_state import CameraAngle
from panoview.viewers.navigation.navigation_controller import CameraVectors, NavigationController

logger = logging.getLogger(__name__)


def vertical_view_angle(vectors: CameraVectors) -> float:
    """
    Vertical view angle in degrees as seen from the eye.

    vtkCamera measures the field of view at the eye, while the navigation
    engine measures it at the sphere center.
    """
    frustum = vectors.frustum
    return math.degrees(2 * math.atan2(frustum.top, frustum.near))


class CameraController:
    """Places a VTK camera where the navigation controller says it is."""

    def __init__(self, camera: vtk.vtkCamera, navigation: NavigationController,
                 renderer: vtk.vtkRenderer | None = None) -> None:
        self.camera = camera
        self.navigation = navigation
        self.renderer = renderer

    @property
    def azimuth(self) -> float:
        """Current azimuth angle in degrees."""
        return self.navigation.state.azimuth

    @property
    def polar(self) -> float:
        """Current polar angle in degrees."""
        return self.navigation.state.polar

    @property
    def angle(self) -> CameraAngle:
        return self.navigation.state.angle

    def update(self) -> bool:
        """
        Copy the current camera vectors to the VTK camera.

        :return: False if the frame was skipped and the camera left unchanged
        """
        vectors = self.navigation.camera_vectors()
        if vectors is None:
            return False
        return self.apply(vectors)

    def apply(self, vectors: CameraVectors) -> bool:
        direction = geometry_utils.subtract(vectors.target, vectors.eye)
        if geometry_utils.calculate_norm(direction) == 0:
            logger.warning("Camera direction vector has zero length. Skipping camera update.")
            return False
        if geometry_utils.calculate_norm(vectors.up) == 0:
            logger.warning("Camera view-up vector has zero length. Skipping camera update.")
            return False

        self.camera.SetPosition(*vectors.eye)
        self.camera.SetFocalPoint(*vectors.target)
        self.camera.SetViewUp(*vectors.up)
        self.camera.SetViewAngle(vertical_view_angle(vectors))
        self.camera.SetClippingRange(vectors.frustum.near, vectors.frustum.far)
        # The screen factors are not proportional to the viewport aspect ratio,
        # so the projection is given explicitly.
        self.camera.SetExplicitProjectionTransformMatrix(
            vtk_helpers.numpy_to_vtk_matrix(frustum_matrix(vectors.frustum)))
        self.camera.SetUseExplicitProjectionTransformMatrix(True)
        return True
