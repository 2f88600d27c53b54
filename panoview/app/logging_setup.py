from __future__ import annotations

import faulthandler
import logging
import logging.config
import os
import queue
import sys
import traceback
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from typing import Iterator

from panoview.app.app_settings_manager import AppSettingsManager, RunMode
from panoview.utils.log_util import level_from_name

STARTUP_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
RUNTIME_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(process)d %(threadName)s %(name)s %(message)s"
RUNTIME_DATEFMT = "%Y-%m-%dT%H:%M:%S"

LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5

ENV_LOG_LEVEL = "PANOVIEW_LOG_LEVEL"
ENV_LOG_BACKUP_COUNT = "PANOVIEW_LOG_BACKUP_COUNT"


@dataclass(frozen=True)
class LogPaths:
    log_file: Path
    crash_file: Path
    log_dir: Path


def _app_base_dir() -> Path:
    """
    Directory next to the executable when frozen, the project root
    (the parent of the ``panoview`` package) otherwise.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def _log_dir_candidates(app_name: str) -> Iterator[Path]:
    yield _app_base_dir() / "logs"
    yield Path.home() / f".{app_name.lower()}" / "logs"


def _is_writable(directory: Path) -> bool:
    probe = directory / ".write_test"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
    except OSError:
        return False
    return True


def _find_writable_log_dir(app_name: str) -> Path:
    """First writable candidate, else ./logs."""
    for directory in _log_dir_candidates(app_name):
        if _is_writable(directory):
            return directory
    fallback = Path.cwd() / "logs"
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def _install_excepthook() -> None:
    previous = sys.excepthook

    def _excepthook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            previous(exc_type, exc, tb)
            return
        logging.critical("Uncaught exception: \n%s",
                         "".join(traceback.format_exception(exc_type, exc, tb)))

    sys.excepthook = _excepthook


def _open_crash_log(crash_file: Path) -> None:
    """Send faulthandler tracebacks (segfaults in VTK/Qt) to ``crash_file``."""
    root = logging.getLogger()
    try:
        stream = open(crash_file, "w", encoding="utf-8")
    except OSError:
        logging.warning("Crash log unavailable: %s", crash_file, exc_info=True)
        return
    faulthandler.enable(file=stream)
    # faulthandler does not keep the file object alive.
    root._panoview_crash_fh = stream


def setup_startup_logging(
        app_name: str,
        *,
        level_file: int = logging.DEBUG,
        level_console: int = logging.INFO,
        max_bytes: int = 2_000_000,
        backup_count: int = LOG_BACKUP_COUNT,
        log_dir: Path | None = None,
    ) -> LogPaths:
    """
    Logging for the time before the QApplication exists.

    Installs a rotating file handler and a console handler on the root
    logger (replacing existing ones), a crash log fed by faulthandler, and an
    excepthook that logs uncaught exceptions.
    """
    log_dir = log_dir or _find_writable_log_dir(app_name)
    paths = LogPaths(log_file=log_dir / f"{app_name}.log",
                     crash_file=log_dir / f"{app_name}.crash.log",
                     log_dir=log_dir)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    formatter = logging.Formatter(STARTUP_FORMAT)
    file_handler = RotatingFileHandler(paths.log_file, maxBytes=max_bytes,
                                       backupCount=backup_count, encoding="utf-8")
    console_handler = logging.StreamHandler(sys.stdout)
    for handler, level in ((file_handler, level_file), (console_handler, level_console)):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _open_crash_log(paths.crash_file)
    _install_excepthook()

    logging.info("%s starting... (frozen=%s, executable=%s, cwd=%s)",
                 app_name, getattr(sys, "frozen", False), sys.executable, os.getcwd())
    logging.info("log_file=%s crash_file=%s", paths.log_file, paths.crash_file)
    return paths


def default_log_dir(app_name: str) -> Path:
    return _find_writable_log_dir(app_name)


def build_config(app_name: str, level: str | None = None, log_dir: Path | None = None) -> dict:
    """
    dictConfig for the running application.

    Records reach the root logger's QueueHandler and console handler; the
    file is written by the LogSystem's listener from the ``_file_settings``
    entry, which dictConfig ignores.
    """
    level = (level or os.getenv(ENV_LOG_LEVEL, "INFO")).upper()
    log_dir = log_dir or default_log_dir(app_name)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": RUNTIME_FORMAT, "datefmt": RUNTIME_DATEFMT},
        },
        "handlers": {
            "queue": {"class": "logging.handlers.QueueHandler", "queue": queue.Queue(-1)},
            "console": {"class": "logging.StreamHandler", "formatter": "standard", "level": "INFO"},
        },
        "root": {"level": level, "handlers": ["queue", "console"]},
        "_file_settings": {
            "filename": str(log_dir / f"{app_name}.log"),
            "maxBytes": LOG_MAX_BYTES,
            "backupCount": int(os.getenv(ENV_LOG_BACKUP_COUNT, LOG_BACKUP_COUNT)),
            "encoding": "utf-8",
        },
    }


def _root_handler(kind: type[logging.Handler]) -> logging.Handler | None:
    return next((h for h in logging.getLogger().handlers if isinstance(h, kind)), None)


class LogSystem:
    """Owns the QueueListener that writes the log file off the GUI thread."""

    def __init__(self, app_name: str, level: str | None = None, log_dir: Path | None = None):
        cfg = build_config(app_name, level, log_dir)
        logging.config.dictConfig(cfg)

        queue_handler = _root_handler(QueueHandler)
        if queue_handler is None:
            raise RuntimeError("QueueHandler not found.")
        self._console_handler = _root_handler(logging.StreamHandler)

        self._file_handler = RotatingFileHandler(**cfg["_file_settings"])
        self._file_handler.setFormatter(logging.Formatter(RUNTIME_FORMAT, RUNTIME_DATEFMT))

        self.listener = QueueListener(queue_handler.queue, self._file_handler,
                                      respect_handler_level=True)
        self.listener.start()
        self._stopped = False

    @classmethod
    def from_levels(cls,
                    app_name: str,
                    root_level: int,
                    console_level: int | None = None,
                    file_level: int | None = None,
                    log_dir: Path | None = None) -> LogSystem:
        logs = cls(app_name, logging.getLevelName(root_level), log_dir)
        logs.apply_levels(root_level, console_level, file_level)
        return logs

    def apply_levels(self, root_level: int, console_level: int | None = None, file_level: int | None = None) -> None:
        """Change log levels after startup."""
        logging.getLogger().setLevel(root_level)
        if self._console_handler is not None and console_level is not None:
            self._console_handler.setLevel(console_level)
        if file_level is not None:
            self._file_handler.setLevel(file_level)

    def stop(self):
        """Flush and stop the listener. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True
        self.listener.stop()
        self._file_handler.close()


def apply_logging_policy(logs: LogSystem, settings: AppSettingsManager) -> None:
    """
    Everything goes to the file. The console shows everything in development
    and verbose mode, and ``settings.logging_level`` and up in production.
    """
    mode = getattr(settings, "run_mode", RunMode.PRODUCTION)
    if mode in (RunMode.DEVELOPMENT, RunMode.VERBOSE):
        console = logging.DEBUG
    else:
        console = level_from_name(getattr(settings, "logging_level", "INFO"))
    logs.apply_levels(root_level=logging.DEBUG, console_level=console, file_level=logging.DEBUG)


def install_qt_message_handler():
    """Route qDebug/qWarning/... output of Qt and VTK's Qt widget into the "Qt" logger."""
    try:
        from PySide6.QtCore import QtMsgType, qInstallMessageHandler
    except ImportError:
        logging.getLogger(__name__).exception("Failed to install Qt message handler.")
        return

    levels = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }
    qt_logger = logging.getLogger("Qt")

    def handler(msg_type, context, message):
        qt_logger.log(levels.get(msg_type, logging.ERROR), message)

    qInstallMessageHandler(handler)
    qt_logger.info("Qt message handler installed.")
