# src/lead_takip/charts/pie3d.py
"""
Pseudo-3-D pie chart.

Segments are sorted by count (descending, stable), every wedge is drawn with
matplotlib's ``Wedge`` primitive and six progressively darker copies are
painted beneath it, shifted downwards, which fakes an extruded disc. Legend
and tooltip texts come from the same sorted segment list as the wedges, so
they can never get out of step with the chart.

Bad input (zero total, negative counts, broken hex colours) never raises –
the chart just degrades visually.
"""
from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from matplotlib import patheffects
from matplotlib.figure import Figure
from matplotlib.patches import Wedge

from .colors import DEFAULT_PALETTE, Rgb, darken, lighten, to_mpl

logger = logging.getLogger(__name__)

# geometry in pixels; data coordinates are pixels
CANVAS_PX = 400
PADDING_PX = 40
RADIUS_PX = CANVAS_PX // 2 - PADDING_PX
DPI = 100

DEPTH_LAYERS = 6          # layer i = 5 … 0
LAYER_OFFSET_PX = 2       # vertical shift per layer
MIN_OUTER_RADIUS_PX = 10
BASE_DARKEN = 0.3
DARKEN_STEP = 0.1
OUTLINE_DARKEN = 0.5
START_ANGLE = 90.0        # 12 o'clock, clockwise

HOVER_BORDER = "#ffffff"


@dataclass(frozen=True)
class SegmentStyle:
    fill: Rgb
    border: Rgb
    hover_fill: Rgb
    hover_border: str = HOVER_BORDER


@dataclass(frozen=True)
class DerivedSegment:
    """One wedge after sorting; ``percentage`` is NaN when the total is zero."""

    index: int
    label: str
    count: float
    percentage: float
    color: str

    @property
    def style(self) -> SegmentStyle:
        return SegmentStyle(
            fill=lighten(self.color, 0.1),
            border=lighten(self.color, 0.2),
            hover_fill=lighten(self.color, 0.2),
        )


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str
    text: str
    tooltip: str


def round_half_up(value: float) -> float:
    if not math.isfinite(value):
        return math.nan
    return int(math.floor(value + 0.5))


def format_number(value) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer():
            return str(int(value))
        return f"{value:g}"
    return str(value)


def derive_segments(
    labels: Sequence[str],
    counts: Sequence[float],
    colors: Optional[Sequence[str]] = None,
) -> List[DerivedSegment]:
    """Percentages per label, coloured by input index, stable-sorted by count (desc)."""
    palette = list(colors) if colors else list(DEFAULT_PALETTE)
    # missing counts (shorter list) count as zero
    values = [counts[i] if i < len(counts) else 0 for i in range(len(labels))]
    total = sum(counts)

    segments = []
    for i, label in enumerate(labels):
        count = values[i]
        pct = round_half_up(count / total * 100) if total else math.nan
        segments.append(DerivedSegment(i, label, count, pct, palette[i % len(palette)]))

    if not total:
        logger.debug("pie '%s': total is zero, percentages undefined", labels)
    return sorted(segments, key=lambda s: -s.count)


def tooltip_text(segment: DerivedSegment) -> str:
    return (
        f"{format_number(segment.count)} leads from {segment.label} "
        f"({format_number(segment.percentage)}%)"
    )


def legend_entries(segments: Sequence[DerivedSegment]) -> List[LegendEntry]:
    return [
        LegendEntry(
            label=s.label,
            color=s.color,
            text=f"{format_number(s.count)} ({format_number(s.percentage)}%)",
            tooltip=tooltip_text(s),
        )
        for s in segments
    ]


@dataclass
class Pie3D:
    """Rendered chart: owns the figure until ``close()``."""

    title: str
    segments: List[DerivedSegment]
    figure: Optional[Figure]
    style_class: str = ""
    wedges: List[Wedge] = field(default_factory=list)

    @property
    def legend(self) -> List[LegendEntry]:
        return legend_entries(self.segments)

    def to_png(self) -> bytes:
        if self.figure is None:
            raise RuntimeError("figure already closed")
        buf = io.BytesIO()
        self.figure.savefig(buf, format="png", dpi=DPI, transparent=True)
        return buf.getvalue()

    def close(self) -> None:
        if self.figure is not None:
            self.figure.clear()
            self.figure = None
            self.wedges = []


def _sweeps(segments: Sequence[DerivedSegment], total: float) -> List[float]:
    if not total:
        return [0.0] * len(segments)
    return [360.0 * s.count / total for s in segments]


def _wedge(center, outer: float, inner: float, theta1: float, theta2: float, **kw) -> Wedge:
    width = outer - inner if inner > 0 else None
    return Wedge(center, outer, theta1, theta2, width=width, **kw)


def _paint_depth_layers(ax, wedge: Wedge, base_color: str) -> None:
    """Six darker copies beneath ``wedge``, farthest/darkest first."""
    cx, cy = wedge.center
    outer = wedge.r
    inner = wedge.r - wedge.width if wedge.width else 0.0
    outline = to_mpl(darken(base_color, OUTLINE_DARKEN))
    for i in range(DEPTH_LAYERS - 1, -1, -1):
        layer = _wedge(
            (cx, cy - i * LAYER_OFFSET_PX),
            max(MIN_OUTER_RADIUS_PX, outer - i),
            max(0.0, inner - i),
            wedge.theta1,
            wedge.theta2,
            facecolor=to_mpl(darken(base_color, BASE_DARKEN + i * DARKEN_STEP)),
            edgecolor=outline,
            linewidth=0.5,
            zorder=1,
        )
        ax.add_patch(layer)


def render_pie3d(
    title: str,
    labels: Sequence[str],
    counts: Sequence[float],
    colors: Optional[Sequence[str]] = None,
    style_class: str = "",
    inner_radius: float = 0.0,
) -> Pie3D:
    """Draw the pseudo-3-D pie; see module docstring."""
    segments = derive_segments(labels, counts, colors)

    fig = Figure(figsize=(CANVAS_PX / DPI, CANVAS_PX / DPI), dpi=DPI)
    fig.patch.set_alpha(0.0)
    ax = fig.add_axes((0, 0, 1, 1))
    half = CANVAS_PX / 2
    ax.set_xlim(-half, half)
    ax.set_ylim(-half, half)
    ax.set_aspect("equal")
    ax.axis("off")
    if title:
        ax.text(0, half - PADDING_PX / 2, title, ha="center", va="center",
                fontsize=13, fontweight="semibold", color="#1f2937")

    shadow = [
        patheffects.SimplePatchShadow(offset=(2, -2), shadow_rgbFace="black", alpha=0.2),
        patheffects.Normal(),
    ]

    drawn = []
    start = START_ANGLE
    for seg, sweep in zip(segments, _sweeps(segments, sum(counts))):
        if not math.isfinite(sweep) or sweep <= 0:
            continue
        style = seg.style
        wedge = _wedge(
            (0.0, 0.0), RADIUS_PX, inner_radius, start - sweep, start,
            facecolor=to_mpl(style.fill),
            edgecolor=to_mpl(style.border),
            linewidth=2,
            zorder=2,
        )
        wedge.set_gid(seg.label)
        wedge.set_path_effects(shadow)
        start -= sweep
        drawn.append((seg, wedge))

    # depth first, then the real wedges on top
    for seg, wedge in drawn:
        _paint_depth_layers(ax, wedge, seg.color)
    wedges = [wedge for _, wedge in drawn]
    for wedge in wedges:
        ax.add_patch(wedge)

    if not wedges:
        ax.text(0, 0, "Veri yok", ha="center", va="center", fontsize=11, color="#6b7280")

    return Pie3D(title=title, segments=segments, figure=fig, style_class=style_class, wedges=wedges)
