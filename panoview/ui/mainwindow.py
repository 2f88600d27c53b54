import copy
import logging
import math

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QLabel, QMainWindow, QMessageBox

from panoview.app.app_settings_manager import AppSettingsManager
from panoview.status import STATUS_FIELDS, StatusField
from panoview.utils import vtk_helpers
from panoview.utils.log_util import log_io
from panoview.viewers.camera.camera_state import CameraAngle
from panoview.viewers.panorama_viewer import PanoramaViewer

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window hosting the panorama viewer."""

    def __init__(self, settings_mgr: AppSettingsManager | None = None):
        """
        Initialize the main window.

        :param settings_mgr: Application settings manager.
        """
        super().__init__()

        self.setting = settings_mgr or AppSettingsManager()

        self.status_fields: dict[str, StatusField] = {
            k: copy.deepcopy(v) for k, v in STATUS_FIELDS.items()
        }
        self._status_label: dict[str, QLabel | None] = {}

        self.setWindowTitle("PanoView - 360° Image Viewer")
        self._setup_ui()
        self._setup_menus()
        self._setup_status_bar()

    def _setup_ui(self) -> None:
        """Setup the main UI layout"""
        self.viewer = PanoramaViewer(settings_manager=self.setting, parent=self)
        self.setCentralWidget(self.viewer)
        self.setGeometry(100, 100, 1200, 800)

        self.viewer.cameraAngleChanged.connect(self._on_camera_angle_changed)
        self.viewer.viewAngleChanged.connect(self._on_view_angle_changed)

    def _setup_menus(self) -> None:
        """Create the menus for the main window."""
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        self._add_action(file_menu, "&Open", self.open_file, QKeySequence.Open)
        file_menu.addSeparator()
        self._add_action(file_menu, "&Quit", self.close, QKeySequence.Quit)

        view_menu = menubar.addMenu("&View")
        self._add_action(view_menu, "Zoom &In", self.viewer.zoom_in, QKeySequence.ZoomIn)
        self._add_action(view_menu, "Zoom &Out", self.viewer.zoom_out, QKeySequence.ZoomOut)
        view_menu.addSeparator()
        self.mesh_action = self._add_action(view_menu, "Show &Mesh", self.viewer.set_mesh_visible,
                                            QKeySequence("M"))
        self.mesh_action.setCheckable(True)
        self.viewer.meshVisibilityChanged.connect(self.mesh_action.setChecked)
        view_menu.addSeparator()
        self._add_action(view_menu, "&Reset View", self.viewer.reset_view)
        self._add_action(view_menu, "&Full Screen", self._toggle_full_screen, QKeySequence("F"))

    def _add_action(self, menu, text: str, slot, shortcut=None) -> QAction:
        action = QAction(text, self)
        if shortcut is not None:
            action.setShortcut(shortcut)
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def _setup_status_bar(self) -> None:
        """Setup the status bar."""
        status_bar = self.statusBar()

        for key, field in self.status_fields.items():
            if not field.visible:
                self._status_label[key] = None
                continue
            label = QLabel("", self)
            status_bar.addPermanentWidget(label)
            self._status_label[key] = label

        angle = self.viewer.navigation.state.angle
        self._on_camera_angle_changed(angle)
        self._on_view_angle_changed(math.degrees(self.viewer.navigation.view_angle))

    # =====================================================
    # Menu Actions
    # =====================================================

    @log_io(level=logging.INFO)
    def open_file(self) -> None:
        path = vtk_helpers.select_image_file()
        if path is None:
            return
        self.load_image(path)

    def load_image(self, path: str, azimuth_deg: float | None = None,
                   polar_deg: float | None = None) -> bool:
        """
        Load an image and optionally turn to a direction.

        :return: True if the image was loaded
        """
        try:
            self.viewer.load_data(path)
        except ValueError as e:
            logger.error("Failed to open %s: %s", path, e)
            QMessageBox.warning(self, "Open failed", str(e))
            return False

        if azimuth_deg is not None or polar_deg is not None:
            self.viewer.set_view_direction(azimuth_deg or 0.0, polar_deg or 0.0)
        self.setWindowTitle(f"PanoView - {path}")
        return True

    def _toggle_full_screen(self) -> None:
        if self.isFullScreen():
            self.showNormal()
        else:
            self.showFullScreen()

    # =====================================================
    # Signal Handlers
    # =====================================================

    def _on_camera_angle_changed(self, angle: CameraAngle) -> None:
        self._update_status("azimuth", angle.azimuth)
        self._update_status("polar", angle.polar)

    def _on_view_angle_changed(self, view_angle_deg: float) -> None:
        self._update_status("view_angle", view_angle_deg)
        self._update_status("zoom_level", self.viewer.navigation.zoom_level)

    def _update_status(self, key: str, value) -> None:
        """Update status bar label."""
        field = self.status_fields.get(key)
        if field is None:
            return
        field.value = value

        label = self._status_label.get(key)
        if label is None:
            return
        try:
            label.setText(field.formatter(value))
        except (TypeError, ValueError) as e:
            logger.warning(f"Error formatting status field {key}: {e}")
            label.setText(str(value))
