"""Panorama viewer widget: a textured sphere seen from inside."""
from __future__ import annotations

import logging
import math
from typing import Callable

import vtk
from PySide6 import QtWidgets, QtCore

from panoview.app.app_settings_manager import AppSettingsManager
from panoview.core.sphere_pos_calculator import SpherePosCalculator
from panoview.core.spherical import SphericalPoint
from panoview.core.view_parameters import ViewParameters
from panoview.utils import vtk_helpers
from panoview.utils.log_util import log_io
from panoview.viewers.camera.camera_controller import CameraController
from panoview.viewers.camera.camera_state import CameraAngle
from panoview.viewers.interactor_styles.panorama_interactor_style import PanoramaInteractorStyle
from panoview.viewers.navigation.navigation_controller import (
    NavigationController,
    pixel_to_screen_pos,
)
from panoview.viewers.overlays.mesh_overlay import MeshOverlay

logger = logging.getLogger(__name__)


class PanoramaViewer(QtWidgets.QWidget):
    """
    VTK-based panorama viewer.

    Provides:
    - A unit sphere textured with an equirectangular image
    - NavigationController (self.navigation) driven by mouse input
    - CameraController (self.camera_controller) syncing the VTK camera
      before every render
    - A frame timer running while an inertial motion is active
    - A mesh view (wireframe sphere and center cross), see set_mesh_visible
    """

    # Signals
    cameraAngleChanged = QtCore.Signal(object)
    viewAngleChanged = QtCore.Signal(float)
    dataLoaded = QtCore.Signal()
    meshVisibilityChanged = QtCore.Signal(bool)

    FRAME_INTERVAL_MS = 16

    def __init__(
            self,
            settings_manager: AppSettingsManager | None = None,
            parent: QtWidgets.QWidget | None = None,
            navigation: NavigationController | None = None,
    ) -> None:
        """
        Initialize the viewer.
        :param settings_manager: Application settings manager
        :param parent: Parent widget
        :param navigation: Navigation state; built from the settings if None
        """
        super().__init__(parent)
        self.setting = settings_manager or AppSettingsManager()
        self.navigation = navigation or self._create_navigation(self.setting)
        self.navigation.add_angle_changed_callback(self._on_camera_angle_changed)

        self._setup_ui()
        self._setup_vtk_rendering()

        self.camera_controller = CameraController(
            self.renderer.GetActiveCamera(),
            self.navigation,
            self.renderer)

        self._frame_timer = QtCore.QTimer(self)
        self._frame_timer.setInterval(self.FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)

        self.setup_interactor_style()
        self.interactor.Initialize()

    @staticmethod
    def _create_navigation(setting: AppSettingsManager) -> NavigationController:
        params = ViewParameters(eye_dist=setting.eye_distance)
        azimuth, polar = setting.initial_direction_deg
        calculator = SpherePosCalculator(params, SphericalPoint.from_degrees(azimuth, polar))
        return NavigationController(
            calculator=calculator,
            config=setting.motion_config(),
            zoom_level=setting.zoom_level,
        )

    def _setup_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        from vtkmodules.qt.QVTKRenderWindowInteractor import QVTKRenderWindowInteractor
        self.vtk_widget = QVTKRenderWindowInteractor(self)
        layout.addWidget(self.vtk_widget)

        self.setLayout(layout)

    def _setup_vtk_rendering(self) -> None:
        render_window = self.vtk_widget.GetRenderWindow()

        self.renderer = vtk.vtkRenderer()
        self.renderer.SetBackground(0.0, 0.0, 0.0)
        render_window.AddRenderer(self.renderer)

        self.sphere_actor, self.texture = vtk_helpers.make_sphere_actor()
        self.renderer.AddActor(self.sphere_actor)
        self.mesh_overlay = MeshOverlay(self.sphere_actor)
        self.renderer.AddActor2D(self.mesh_overlay.cross_actor)

        # Sync the camera right before each render, whoever triggered it.
        self.renderer.AddObserver("StartEvent", self._before_render)

        self.interactor = render_window.GetInteractor()
        logger.debug("VTK rendering components initialized.")

    def setup_interactor_style(self) -> None:
        self.interactor_style = PanoramaInteractorStyle(self)
        self.interactor.SetInteractorStyle(self.interactor_style)

    # =====================================================
    # Data
    # =====================================================

    @log_io(level=logging.INFO)
    def load_data(self, path: str) -> None:
        """
        Show the equirectangular image at ``path``.

        :raises ValueError: if the image cannot be read
        """
        image = vtk_helpers.load_image(path)
        self.texture.SetInputData(image)
        self.dataLoaded.emit()
        self.update_view()

    def set_view_direction(self, azimuth_deg: float, polar_deg: float) -> None:
        """Look at the given direction, in degrees."""
        self._frame_timer.stop()
        self.navigation.set_view_direction(math.radians(azimuth_deg), math.radians(polar_deg))
        self.update_view()

    def reset_view(self) -> None:
        """Return to the configured initial direction and zoom."""
        self.navigation.set_zoom_level(self.setting.zoom_level)
        self.set_view_direction(*self.setting.initial_direction_deg)
        self.viewAngleChanged.emit(math.degrees(self.navigation.view_angle))

    # =====================================================
    # Input (called by the interactor style, pixel coordinates, y up)
    # =====================================================

    def _screen_pos(self, x: float, y: float) -> tuple[float, float]:
        width, height = self.vtk_widget.GetRenderWindow().GetSize()
        return pixel_to_screen_pos(x, y, width, height)

    def pointer_pressed(self, x: float, y: float) -> None:
        self._frame_timer.stop()
        self.navigation.pointer_down(self._screen_pos(x, y))

    def pointer_moved(self, x: float, y: float) -> None:
        if self.navigation.pointer_move(self._screen_pos(x, y)):
            self.update_view()

    def pointer_released(self) -> None:
        if self.navigation.pointer_up():
            self._frame_timer.start()

    def pick(self, x: float, y: float) -> SphericalPoint | None:
        pos = self._screen_pos(x, y)
        point = self.navigation.pick(pos)
        if point is not None:
            logger.info("%s -> %s (center: %s)", pos, point,
                        self.navigation.center_orientation())
        return point

    def zoom_in(self) -> None:
        self._zoom(self.navigation.zoom_in)

    def zoom_out(self) -> None:
        self._zoom(self.navigation.zoom_out)

    def _zoom(self, step: Callable[[], bool]) -> None:
        if step():
            self.viewAngleChanged.emit(math.degrees(self.navigation.view_angle))
            self.update_view()

    # =====================================================
    # Mesh view
    # =====================================================

    @property
    def mesh_visible(self) -> bool:
        return self.mesh_overlay.visible

    def set_mesh_visible(self, visible: bool) -> None:
        if self.mesh_overlay.set_visible(visible):
            self.meshVisibilityChanged.emit(self.mesh_overlay.visible)
            self.update_view()

    # =====================================================
    # Rendering
    # =====================================================

    def _before_render(self, obj, event) -> None:
        width, height = self.vtk_widget.GetRenderWindow().GetSize()
        if width > 0 and height > 0:
            self.navigation.resize(width, height)
        self.camera_controller.update()

    def _on_frame(self) -> None:
        if self.navigation.frame():
            self.update_view()
        elif self.navigation.motion is None:
            self._frame_timer.stop()

    def update_view(self) -> None:
        """Trigger a render."""
        self.vtk_widget.GetRenderWindow().Render()

    # =====================================================
    # Camera Callbacks
    # =====================================================

    def _on_camera_angle_changed(self, angle: CameraAngle) -> None:
        self.cameraAngleChanged.emit(angle)

    # =====================================================
    # Lifecycle
    # =====================================================

    def closeEvent(self, event) -> None:
        """Handle close event."""
        self._frame_timer.stop()
        if hasattr(self, "interactor") and self.interactor:
            self.interactor.TerminateApp()
        super().closeEvent(event)
