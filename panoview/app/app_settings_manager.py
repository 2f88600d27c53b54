from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Callable, Dict
from PySide6.QtCore import QSettings
import logging

from panoview.core.motion import MAX_SAMPLE_AGE, MAX_SPEED, MotionConfig
from panoview.core.zoom import DEFAULT_ZOOM_LEVEL, MAX_ZOOM_LEVEL, MIN_ZOOM_LEVEL

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value
    def __repr__(self):
        return self.value


# ----------------------
# Defaults
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.PRODUCTION.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "view": {
        "eye_distance": 0.5,
        "zoom_level": DEFAULT_ZOOM_LEVEL,
        "initial_azimuth_deg": 0.0,
        "initial_polar_deg": 0.0,
    },
    "navigation": {
        "max_speed": MAX_SPEED,
        "max_sample_age": MAX_SAMPLE_AGE,
    },
}

SECTIONS = tuple(DEFAULTS)

# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"

@dataclass
class ViewConfig:
    eye_distance: float = 0.5
    zoom_level: int = DEFAULT_ZOOM_LEVEL
    initial_azimuth_deg: float = 0.0
    initial_polar_deg: float = 0.0

@dataclass
class NavigationConfig:
    max_speed: float = MAX_SPEED
    max_sample_age: float = MAX_SAMPLE_AGE

@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    navigation: NavigationConfig = field(default_factory=NavigationConfig)

# ----------------------
# Validation
# ----------------------
def _validate_run_mode(v: Any) -> RunMode:
    if isinstance(v, RunMode):
        return v
    mode = str(v).strip().lower()
    try:
        return RunMode(mode)
    except ValueError:
        return RunMode(DEFAULTS["general"]["run_mode"])

def _validate_logging_level(v: Any) -> str:
    v = str(v).upper()
    return v if v in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"

def _float_in_range(v: Any, default: float, lower: float, upper: float,
                    include_lower: bool = True) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return default
    above = f >= lower if include_lower else f > lower
    return f if (above and f <= upper) else default

def _validate_eye_distance(v: Any) -> float:
    # The eye stays strictly inside the sphere.
    return _float_in_range(v, DEFAULTS["view"]["eye_distance"], 0.0, 0.95, include_lower=False)

def _validate_zoom_level(v: Any) -> int:
    try:
        level = int(v)
    except (TypeError, ValueError):
        return DEFAULT_ZOOM_LEVEL
    return level if MIN_ZOOM_LEVEL <= level <= MAX_ZOOM_LEVEL else DEFAULT_ZOOM_LEVEL

def _validate_azimuth_deg(v: Any) -> float:
    return _float_in_range(v, 0.0, -180.0, 180.0)

def _validate_polar_deg(v: Any) -> float:
    return _float_in_range(v, 0.0, -90.0, 90.0)

def _validate_max_speed(v: Any) -> float:
    return _float_in_range(v, MAX_SPEED, 0.0, 20.0, include_lower=False)

def _validate_max_sample_age(v: Any) -> float:
    return _float_in_range(v, MAX_SAMPLE_AGE, 0.0, 1.0, include_lower=False)


VALIDATORS: Dict[str, Dict[str, Callable[[Any], Any]]] = {
    "general": {
        "run_mode": lambda v: _validate_run_mode(v).value,
        "logging_level": _validate_logging_level,
    },
    "view": {
        "eye_distance": _validate_eye_distance,
        "zoom_level": _validate_zoom_level,
        "initial_azimuth_deg": _validate_azimuth_deg,
        "initial_polar_deg": _validate_polar_deg,
    },
    "navigation": {
        "max_speed": _validate_max_speed,
        "max_sample_age": _validate_max_sample_age,
    },
}


# ---------------------
# AppSettingManager
# ---------------------
class AppSettingsManager:
    """
    Manages the general application settings.

    Code defaults come from DEFAULTS, overridden by values stored in QSettings.
    Values are validated on load; out of range values fall back to defaults.
    set_* methods persist to QSettings immediately.
    """
    def __init__(self, org_domain: str = "panoview.org", app_name: str = "PanoView"):
        self._settings = QSettings(org_domain, app_name)
        self._data = self._load_effective()

    # Read
    @property
    def data(self) -> AppSettingsData:
        return self._data

    @property
    def run_mode(self) -> RunMode:
        return self._data.general.run_mode

    @property
    def dev_mode(self) -> bool:
        return self.run_mode is RunMode.DEVELOPMENT

    @property
    def logging_level(self) -> str:
        return self._data.general.logging_level

    @property
    def eye_distance(self) -> float:
        return self._data.view.eye_distance

    @property
    def zoom_level(self) -> int:
        return self._data.view.zoom_level

    @property
    def initial_direction_deg(self) -> tuple[float, float]:
        return self._data.view.initial_azimuth_deg, self._data.view.initial_polar_deg

    def motion_config(self) -> MotionConfig:
        nav = self._data.navigation
        return MotionConfig(max_sample_age=nav.max_sample_age, max_speed=nav.max_speed)

    # Write
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_eye_distance(self, v: float) -> None:
        d = _validate_eye_distance(v)
        self._settings.setValue("view/eye_distance", d)
        self._data.view.eye_distance = d

    def set_zoom_level(self, v: int) -> None:
        level = _validate_zoom_level(v)
        self._settings.setValue("view/zoom_level", level)
        self._data.view.zoom_level = level

    def set_initial_direction_deg(self, azimuth: float, polar: float) -> None:
        azimuth = _validate_azimuth_deg(azimuth)
        polar = _validate_polar_deg(polar)
        self._settings.setValue("view/initial_azimuth_deg", azimuth)
        self._settings.setValue("view/initial_polar_deg", polar)
        self._data.view.initial_azimuth_deg = azimuth
        self._data.view.initial_polar_deg = polar

    def set_max_speed(self, v: float) -> None:
        speed = _validate_max_speed(v)
        self._settings.setValue("navigation/max_speed", speed)
        self._data.navigation.max_speed = speed

    def set_max_sample_age(self, v: float) -> None:
        age = _validate_max_sample_age(v)
        self._settings.setValue("navigation/max_sample_age", age)
        self._data.navigation.max_sample_age = age

    # Reset
    def reset_all_to_default(self) -> None:
        """Remove all user settings."""
        for section in SECTIONS:
            self._settings.remove(section)
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """Reset one section to its defaults."""
        if section not in SECTIONS:
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()

    def to_dict(self) -> dict[str, Any]:
        data = {
            "general": asdict(self._data.general),
            "view": asdict(self._data.view),
            "navigation": asdict(self._data.navigation),
        }
        data["general"]["run_mode"] = self._data.general.run_mode.value
        return data

    # ---------- internals ---------------
    def _load_effective(self) -> AppSettingsData:
        """Apply QSettings overrides to DEFAULTS, validate, and build the model."""
        merged = self._apply_qsettings_overrides(DEFAULTS)
        return self._make_model_from(merged)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        """
        Read the dict based settings and apply QSettings overrides.
        :param base:
        :return: apply QSettings overrides
        """
        merged: dict[str, Any] = {}
        for section, validators in VALIDATORS.items():
            values = dict(base.get(section, {}))
            for key, validate in validators.items():
                v = self._settings.value(f"{section}/{key}", None)
                if v is not None:
                    values[key] = validate(v)
            merged[section] = values
        return merged

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        """
        making model from merged dict and returning merged AppSettingsData
        :param merged:
        :return: merged AppSettingsData
        """
        g = merged.get("general", {})
        vw = merged.get("view", {})
        nav = merged.get("navigation", {})
        return AppSettingsData(
            general=GeneralConfig(
                run_mode=_validate_run_mode(g.get("run_mode", DEFAULTS["general"]["run_mode"])),
                logging_level=_validate_logging_level(g.get("logging_level", DEFAULTS["general"]["logging_level"])),
            ),
            view=ViewConfig(
                eye_distance=_validate_eye_distance(vw.get("eye_distance", DEFAULTS["view"]["eye_distance"])),
                zoom_level=_validate_zoom_level(vw.get("zoom_level", DEFAULTS["view"]["zoom_level"])),
                initial_azimuth_deg=_validate_azimuth_deg(
                    vw.get("initial_azimuth_deg", DEFAULTS["view"]["initial_azimuth_deg"])),
                initial_polar_deg=_validate_polar_deg(
                    vw.get("initial_polar_deg", DEFAULTS["view"]["initial_polar_deg"])),
            ),
            navigation=NavigationConfig(
                max_speed=_validate_max_speed(nav.get("max_speed", DEFAULTS["navigation"]["max_speed"])),
                max_sample_age=_validate_max_sample_age(
                    nav.get("max_sample_age", DEFAULTS["navigation"]["max_sample_age"])),
            ),
        )
