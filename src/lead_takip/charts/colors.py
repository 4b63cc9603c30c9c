# src/lead_takip/charts/colors.py
from __future__ import annotations

import math
import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple, Tuple

# Fixed pie palette, cycled by index
DEFAULT_PALETTE: Tuple[str, ...] = (
    "#9b51e0",  # Instagram
    "#2ecc71",  # Referans
    "#3498db",  # Facebook
    "#e74c3c",
    "#f39c12",
    "#1abc9c",
    "#34495e",
    "#9b59b6",
    "#e67e22",
    "#95a5a6",
)

GLOBAL_DEFAULT_COLOR = "#6b7280"
CATEGORY_DEFAULT_KEYS = ("Default", "Diğer")


class Rgb(NamedTuple):
    """RGB triple; channels that could not be parsed are NaN."""

    r: float
    g: float
    b: float

    @property
    def is_valid(self) -> bool:
        return not any(math.isnan(c) for c in self)

    def __str__(self) -> str:
        parts = ["NaN" if math.isnan(c) else str(int(c)) for c in self]
        return f"rgb({parts[0]}, {parts[1]}, {parts[2]})"


def _channel(part: str) -> float:
    if len(part) != 2 or any(ch not in string.hexdigits for ch in part):
        return math.nan
    return int(part, 16)


def _floor(value: float) -> float:
    return value if math.isnan(value) else math.floor(value)


def _clamp(value: float, lo: float = 0.0, hi: float = 255.0) -> float:
    if math.isnan(value):
        return value
    return max(lo, min(hi, value))


def hex_to_rgb(color: str) -> Rgb:
    """'#rrggbb' / 'rrggbb' → Rgb. Malformed input yields NaN channels, never an exception."""
    hex_color = str(color).lstrip("#")
    return Rgb(*(_channel(hex_color[i : i + 2]) for i in (0, 2, 4)))


def darken(color: str, amount: float) -> Rgb:
    """Scale every channel by (1 - amount)."""
    return Rgb(*(_floor(_clamp(c * (1 - amount))) for c in hex_to_rgb(color)))


def lighten(color: str, amount: float) -> Rgb:
    """Move every channel towards 255 by amount * 255."""
    return Rgb(*(_floor(_clamp(c + 255 * amount)) for c in hex_to_rgb(color)))


def to_mpl(rgb: Rgb, alpha: float = 1.0) -> Tuple[float, float, float, float]:
    """Matplotlib RGBA; invalid colours turn fully transparent."""
    if not rgb.is_valid:
        return (0.0, 0.0, 0.0, 0.0)
    return (rgb.r / 255.0, rgb.g / 255.0, rgb.b / 255.0, alpha)


def to_hex(rgb: Rgb) -> str:
    if not rgb.is_valid:
        return "transparent"
    return "#{:02x}{:02x}{:02x}".format(int(rgb.r), int(rgb.g), int(rgb.b))


@dataclass(frozen=True)
class ColorScheme:
    """category → value → colour, with fallback exact → category default → global default."""

    categories: Mapping[str, Mapping[str, str]]
    default: str = GLOBAL_DEFAULT_COLOR
    default_keys: Tuple[str, ...] = field(default=CATEGORY_DEFAULT_KEYS)

    def __post_init__(self) -> None:
        frozen = {name: MappingProxyType(dict(values)) for name, values in self.categories.items()}
        object.__setattr__(self, "categories", MappingProxyType(frozen))

    def color_for(self, category: str, value: str | None) -> str:
        colors = self.categories.get(category)
        if colors is None or not value or not isinstance(value, str):
            return self.default
        if value in colors:
            return colors[value]
        for key in self.default_keys:
            if key in colors:
                return colors[key]
        return self.default

    def palette(self, *categories: str) -> Tuple[str, ...]:
        out = []
        for name in categories:
            out.extend(self.categories.get(name, {}).values())
        return tuple(out)


STANDARD_COLORS = ColorScheme(
    categories={
        "PERSONNEL": {
            "Alperen Yerlikaya": "#3b82f6",
            "Ahmet Kaya": "#10b981",
            "Mehmet Özkan": "#f59e0b",
            "Ayşe Demir": "#8b5cf6",
            "Fatma Yılmaz": "#ef4444",
            "Murat Şen": "#06b6d4",
            "Zeynep Aktaş": "#ec4899",
            "Ali Vural": "#84cc16",
            "Elif Koç": "#f97316",
            "Burak Çelik": "#6366f1",
            "Seda Polat": "#14b8a6",
            "Emre Kara": "#a855f7",
            "Default": "#6b7280",
        },
        "STATUS": {
            "Takipte": "#fbbf24",
            "Takipde": "#fbbf24",
            "Bilgi Verildi": "#8b5cf6",
            "Olumsuz": "#ef4444",
            "Ulaşılamıyor": "#f97316",
            "Ulaşılamıyor - Cevap Vermiyor": "#f97316",
            "Toplantı/Birebir Görüşme": "#3b82f6",
            "Potansiyel Takipte": "#10b981",
            "Satış": "#22c55e",
            "Yeni": "#06b6d4",
            "Tanımsız": "#6b7280",
            "Bilinmiyor": "#9ca3af",
            "Arandı - Geri Dönecek": "#f59e0b",
            "Tamamlandı": "#22c55e",
            "İptal": "#ef4444",
        },
        "LEAD_TYPE": {
            "satis": "#3b82f6",
            "kiralama": "#ef4444",
            "kira": "#ef4444",
            "satılık": "#3b82f6",
            "kiralık": "#ef4444",
        },
        "CUSTOMER_SOURCE": {
            "Instagram": "#9b51e0",
            "Facebook": "#3498db",
            "Referans": "#2ecc71",
            "Website": "#e74c3c",
            "Google": "#4285f4",
            "Whatsapp": "#25d366",
            "Telefon": "#f39c12",
            "Email": "#95a5a6",
            "Diğer": "#34495e",
        },
        "PRIORITY": {
            "Yüksek": "#ef4444",
            "Orta": "#f59e0b",
            "Düşük": "#10b981",
        },
        "OFFICE": {
            "Merkez": "#3b82f6",
            "Şube 1": "#10b981",
            "Şube 2": "#f59e0b",
            "Şube 3": "#8b5cf6",
            "Kapaklı": "#22c55e",
            "Diğer": "#6b7280",
        },
        "MEETING_TYPE": {
            "Giden Arama": "#3b82f6",
            "Gelen Arama": "#10b981",
            "WhatsApp": "#25d366",
            "Email": "#95a5a6",
            "Yüz Yüze": "#8b5cf6",
            "Diğer": "#6b7280",
        },
    }
)


def generate_chart_colors(count: int, scheme: ColorScheme = STANDARD_COLORS) -> list[str]:
    """Mixes personnel/status/source/priority colours for generic charts."""
    pool = scheme.palette("PERSONNEL", "STATUS", "CUSTOMER_SOURCE", "PRIORITY")
    return [pool[i % len(pool)] for i in range(count)]


def colors_for(category: str, values, scheme: ColorScheme = STANDARD_COLORS) -> list[str]:
    return [scheme.color_for(category, v) for v in values]
