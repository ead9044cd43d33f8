"""Colours and the visual style of connections."""

from __future__ import annotations

import colorsys
import json
import random
import zlib
from dataclasses import dataclass, field
from typing import Any

_NAMED_COLORS: dict[str, tuple[int, int, int]] = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "lime": (0, 255, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "cyan": (0, 255, 255),
    "magenta": (255, 0, 255),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "darkgray": (169, 169, 169),
    "darkgrey": (169, 169, 169),
    "lightgray": (211, 211, 211),
    "lightgrey": (211, 211, 211),
    "darkcyan": (0, 139, 139),
    "lightcyan": (224, 255, 255),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "brown": (165, 42, 42),
    "navy": (0, 0, 128),
    "teal": (0, 128, 128),
    "silver": (192, 192, 192),
    "maroon": (128, 0, 0),
    "olive": (128, 128, 0),
}


@dataclass(frozen=True)
class Color:
    """An RGB colour with 8-bit channels."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")

    @classmethod
    def from_hsl(cls, hue: int, saturation: int, lightness: int) -> "Color":
        """Build a colour from hue (0-359) and saturation and lightness (0-255)."""
        r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness / 255.0, saturation / 255.0)
        return cls(round(r * 255), round(g * 255), round(b * 255))

    @classmethod
    def from_name(cls, name: str) -> "Color":
        """Parse '#rgb', '#rrggbb' or a known colour name."""
        text = name.strip().lower()
        if text.startswith("#"):
            digits = text[1:]
            if len(digits) == 3:
                digits = "".join(d * 2 for d in digits)
            if len(digits) != 6:
                raise ValueError(f"invalid colour: {name!r}")
            try:
                return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
            except ValueError:
                raise ValueError(f"invalid colour: {name!r}") from None
        try:
            return cls(*_NAMED_COLORS[text])
        except KeyError:
            raise ValueError(f"unknown colour name: {name!r}") from None

    def name(self) -> str:
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    def darker(self, factor: int = 200) -> "Color":
        """Divide the HSV value by factor/100."""
        if factor <= 0:
            return self
        h, s, v = colorsys.rgb_to_hsv(self.red / 255.0, self.green / 255.0, self.blue / 255.0)
        v = min(1.0, v * 100.0 / factor)
        r, g, b = colorsys.hsv_to_rgb(h, s, v)
        return Color(round(r * 255), round(g * 255), round(b * 255))


_COLOR_KEYS = {
    "ConstructionColor": "construction_color",
    "NormalColor": "normal_color",
    "SelectedColor": "selected_color",
    "SelectedHaloColor": "selected_halo_color",
    "HoveredColor": "hovered_color",
}
_FLOAT_KEYS = {
    "LineWidth": "line_width",
    "ConstructionLineWidth": "construction_line_width",
    "PointDiameter": "point_diameter",
}
_BOOL_KEYS = {
    "UseDataDefinedColors": "use_data_defined_colors",
    "InArrow": "in_arrow",
    "OutArrow": "out_arrow",
}


def _read_color(value: Any) -> Color:
    if isinstance(value, list):
        red, green, blue = (int(v) if isinstance(v, (int, float)) else 0 for v in value[:3])
        return Color(red, green, blue)
    return Color.from_name(str(value))


@dataclass
class ConnectionStyle:
    """How connections are drawn."""

    construction_color: Color = field(default_factory=lambda: Color.from_name("gray"))
    normal_color: Color = field(default_factory=lambda: Color.from_name("darkcyan"))
    selected_color: Color = field(default_factory=lambda: Color(100, 100, 100))
    selected_halo_color: Color = field(default_factory=lambda: Color.from_name("orange"))
    hovered_color: Color = field(default_factory=lambda: Color.from_name("lightcyan"))
    line_width: float = 3.0
    construction_line_width: float = 2.0
    point_diameter: float = 10.0
    use_data_defined_colors: bool = False
    in_arrow: bool = False
    out_arrow: bool = False

    def load_json(self, data: dict[str, Any]) -> None:
        """Override fields present under the 'ConnectionStyle' key."""
        values = data.get("ConnectionStyle")
        if not isinstance(values, dict):
            return
        for key, attr in _COLOR_KEYS.items():
            if values.get(key) is not None:
                setattr(self, attr, _read_color(values[key]))
        for key, attr in _FLOAT_KEYS.items():
            value = values.get(key)
            if value is not None:
                number = isinstance(value, (int, float)) and not isinstance(value, bool)
                setattr(self, attr, float(value) if number else 0.0)
        for key, attr in _BOOL_KEYS.items():
            value = values.get(key)
            if value is not None:
                setattr(self, attr, value is True)

    def load_json_text(self, text: str) -> None:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("style document must be a JSON object")
        self.load_json(data)

    def to_json(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key, attr in _COLOR_KEYS.items():
            values[key] = getattr(self, attr).name()
        for key, attr in _FLOAT_KEYS.items():
            values[key] = getattr(self, attr)
        for key, attr in _BOOL_KEYS.items():
            values[key] = getattr(self, attr)
        return {"ConnectionStyle": values}

    def normal_color_for(self, type_id: str) -> Color:
        """A stable colour derived from a data type id."""
        digest = zlib.crc32(type_id.encode("utf-8"))
        hue = random.Random(digest).randint(0, 0xFF)
        saturation = 120 + digest % 129
        return Color.from_hsl(hue, saturation, 160)


_current_style = ConnectionStyle()


def current_connection_style() -> ConnectionStyle:
    return _current_style


def set_connection_style(json_text: str) -> ConnectionStyle:
    """Replace the shared style with defaults overridden by json_text."""
    global _current_style
    style = ConnectionStyle()
    style.load_json_text(json_text)
    _current_style = style
    return style