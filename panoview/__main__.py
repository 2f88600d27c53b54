# NOTE:
# Startup diagnostics (logging / Qt message handler) must be set up
#  before creating the QApplication instance.
import argparse
import logging
import sys

from PySide6 import QtWidgets

from panoview.app.app_settings_manager import AppSettingsManager
from panoview.app.logging_setup import (
    LogSystem,
    apply_logging_policy,
    install_qt_message_handler,
    setup_startup_logging,
)

APP_NAME = "panoview"

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="360° panorama image viewer.")
    parser.add_argument("image", nargs="?", help="An equirectangular image file (PNG or JPEG).")
    parser.add_argument("--azimuth", type=float, default=None,
                        help="Initial view azimuth in degrees.")
    parser.add_argument("--polar", type=float, default=None,
                        help="Initial view polar angle in degrees.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    setup_startup_logging(app_name=APP_NAME)
    install_qt_message_handler()
    logs = LogSystem(APP_NAME)

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv)

    # Imported after QApplication exists; the viewer pulls in the VTK Qt widget.
    from panoview.ui.mainwindow import MainWindow

    logger.info("App start")
    settings_mgr = AppSettingsManager()
    apply_logging_policy(logs, settings_mgr)

    main_window = MainWindow(settings_mgr)
    main_window.show()
    if args.image:
        main_window.load_image(args.image, args.azimuth, args.polar)

    app.aboutToQuit.connect(logs.stop)
    try:
        rc = app.exec()
        logger.info("App exit (rc=%s)", rc)
        return rc
    finally:
        logs.stop()


if __name__ == "__main__":
    sys.exit(main())
