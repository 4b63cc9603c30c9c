"""Unit tests for colour parsing, blending and the colour scheme."""

from __future__ import annotations

import math

import pytest

from lead_takip.charts.colors import (
    GLOBAL_DEFAULT_COLOR,
    STANDARD_COLORS,
    ColorScheme,
    Rgb,
    colors_for,
    darken,
    generate_chart_colors,
    hex_to_rgb,
    lighten,
    to_hex,
    to_mpl,
)

pytestmark = pytest.mark.unit


def test_hex_to_rgb_accepts_with_and_without_hash() -> None:
    """Both '#rrggbb' and 'rrggbb' parse to the same triple."""

    assert hex_to_rgb("#9b51e0") == Rgb(155, 81, 224)
    assert hex_to_rgb("2ecc71") == Rgb(46, 204, 113)


def test_darken_zero_is_identity() -> None:
    """Darkening by 0 keeps every channel."""

    assert darken("#3498db", 0) == Rgb(52, 152, 219)


def test_darken_floors_and_scales() -> None:
    """Channels are multiplied by (1 - amount) and floored."""

    assert darken("#ffffff", 0.3) == Rgb(178, 178, 178)
    assert darken("#ffffff", 1) == Rgb(0, 0, 0)


def test_lighten_one_is_white() -> None:
    """Lightening by 1 saturates every channel at 255."""

    assert lighten("#000000", 1) == Rgb(255, 255, 255)
    assert lighten("#9b51e0", 1) == Rgb(255, 255, 255)


def test_lighten_adds_fraction_of_255() -> None:
    """Lightening by 0.1 adds floor(25.5) per channel."""

    assert lighten("#000000", 0.1) == Rgb(25, 25, 25)
    assert lighten("#f0f0f0", 0.1) == Rgb(255, 255, 255)


def test_malformed_colour_never_raises() -> None:
    """Broken hex gives NaN channels that render transparent."""

    rgb = darken("not-a-colour", 0.3)
    assert not rgb.is_valid
    assert math.isnan(rgb.r)
    assert to_mpl(rgb) == (0.0, 0.0, 0.0, 0.0)
    assert to_hex(rgb) == "transparent"
    assert "NaN" in str(rgb)


def test_partially_valid_colour_keeps_good_channels() -> None:
    """A short hex string only loses the missing channels."""

    rgb = hex_to_rgb("#ff00")
    assert rgb.r == 255 and rgb.g == 0
    assert math.isnan(rgb.b)


def test_rgb_str_formats_like_css() -> None:
    """str(Rgb) is a CSS rgb() expression."""

    assert str(Rgb(1, 2, 3)) == "rgb(1, 2, 3)"


def test_color_scheme_fallbacks() -> None:
    """Exact value, then category default, then global default."""

    assert STANDARD_COLORS.color_for("CUSTOMER_SOURCE", "Instagram") == "#9b51e0"
    assert STANDARD_COLORS.color_for("CUSTOMER_SOURCE", "TikTok") == "#34495e"
    assert STANDARD_COLORS.color_for("PERSONNEL", "Unknown Person") == "#6b7280"
    assert STANDARD_COLORS.color_for("PRIORITY", "Acil") == GLOBAL_DEFAULT_COLOR
    assert STANDARD_COLORS.color_for("NOPE", "x") == GLOBAL_DEFAULT_COLOR
    assert STANDARD_COLORS.color_for("STATUS", None) == GLOBAL_DEFAULT_COLOR


def test_color_scheme_is_read_only() -> None:
    """The mappings of a scheme cannot be changed after creation."""

    scheme = ColorScheme({"A": {"x": "#000000"}})
    with pytest.raises(TypeError):
        scheme.categories["A"]["x"] = "#ffffff"  # type: ignore[index]


def test_generate_chart_colors_cycles() -> None:
    """The generic palette repeats once exhausted."""

    colors = generate_chart_colors(200)
    assert len(colors) == 200
    pool_size = len(STANDARD_COLORS.palette("PERSONNEL", "STATUS", "CUSTOMER_SOURCE", "PRIORITY"))
    assert colors[0] == colors[pool_size]


def test_colors_for_maps_each_value() -> None:
    """colors_for looks every value up in one category."""

    assert colors_for("LEAD_TYPE", ["satis", "kiralama"]) == ["#3b82f6", "#ef4444"]
