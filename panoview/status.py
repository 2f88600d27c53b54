from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class StatusField:
    """
    Represents a status field containing a label, format, formatter function, and a value.

    :ivar label: The label/name of the status field.
    :type label: str
    :ivar fmt: The format string used for formatting the field's value.
    :type fmt: str
    :ivar formatter: Callable function to format the field value. Defaults to a formatter
        using the provided `fmt` string, unless explicitly specified.
    :type formatter: Callable[[Any], str]
    :ivar value: The numerical value associated with the status field.
    :type value: float | int
    :ivar visible: Whether the field gets a label in the status bar.
    :type visible: bool
    """
    label: str
    fmt: str = "{}"
    formatter: Callable[[Any], str] = None
    value: float | int = 0.0
    visible: bool = True

    def __post_init__(self):
        if self.formatter is None:
            self.formatter = lambda v, label=self.label, fmt=self.fmt: f"{label}: {fmt.format(v)}"


def format_azimuth(azimuth: float) -> str:
    """
    Format the azimuth in degrees as a compass-like longitude.
    + -> E
    - -> W
    """
    angle = abs(azimuth)
    if azimuth >= 0:
        return f"{angle:.1f}° E"
    else:
        return f"{angle:.1f}° W"


def format_polar(polar: float) -> str:
    """
    Format the polar angle in degrees as a latitude.
    + -> N
    - -> S
    """
    angle = abs(polar)
    if polar >= 0:
        return f"{angle:.1f}° N"
    else:
        return f"{angle:.1f}° S"


# If you want to add a new value, add a field here and update it
# from MainWindow._update_status.
STATUS_FIELDS = {
    "azimuth": StatusField(label="Azimuth", formatter=format_azimuth),
    "polar": StatusField(label="Polar", formatter=format_polar),
    "view_angle": StatusField(label="FOV", fmt="{:.0f}°"),
    "zoom_level": StatusField(label="Zoom", fmt="{}", visible=False),
}
