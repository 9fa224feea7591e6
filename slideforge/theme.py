from __future__ import annotations

from dataclasses import dataclass


def _hex_to_rgb(value: str) -> tuple[int, int, int]:
    v = value.strip().lstrip("#")
    if len(v) != 6:
        raise ValueError(f"Invalid hex color: {value}")
    return (int(v[0:2], 16), int(v[2:4], 16), int(v[4:6], 16))


@dataclass(frozen=True)
class Theme:
    name: str = "Default"
    accent: str = "#3B82F6"

    @property
    def accent_rgb(self) -> tuple[int, int, int]:
        return _hex_to_rgb(self.accent)


DEFAULT_THEME = "Default"

# Fixed palette offered when creating a deck. Order is the display order.
THEME_PRESETS: dict[str, Theme] = {
    "Default": Theme(name="Default", accent="#3B82F6"),
    "Black": Theme(name="Black", accent="#000000"),
    "Corporate Blue": Theme(name="Corporate Blue", accent="#1E40AF"),
    "Modern Dark": Theme(name="Modern Dark", accent="#1F2937"),
    "Creative": Theme(name="Creative", accent="#F97316"),
    "Minimalist": Theme(name="Minimalist", accent="#E5E7EB"),
    "Tech Startup": Theme(name="Tech Startup", accent="#0EA5E9"),
    "Bold & Bright": Theme(name="Bold & Bright", accent="#DB2777"),
    "Nature": Theme(name="Nature", accent="#16A34A"),
}


def is_theme(name: object) -> bool:
    return isinstance(name, str) and name.strip() in THEME_PRESETS


def get_theme(name: str | None) -> Theme:
    if not name:
        return THEME_PRESETS[DEFAULT_THEME]
    key = name.strip()
    return THEME_PRESETS.get(key, THEME_PRESETS[DEFAULT_THEME])


def available_themes() -> list[str]:
    return list(THEME_PRESETS.keys())
