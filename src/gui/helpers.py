# src/gui/helpers.py
from __future__ import annotations

import html
from typing import Optional, Sequence

import pandas as pd
import streamlit as st

from lead_takip.charts.colors import to_hex
from lead_takip.charts.pie3d import LegendEntry, render_pie3d
from lead_takip.db import get_session
from lead_takip.services.leads import LeadFilter, leads_frame, list_leads, list_sales_reps

LEGEND_CSS = """
<style>
.pie3d-legend { display:flex; flex-direction:column; gap:4px; margin-top:6px; }
.pie3d-legend-item { display:flex; align-items:center; gap:8px; padding:3px 6px;
                     border-radius:6px; cursor:default; font-size:0.9rem; }
.pie3d-legend-item:hover { background: rgba(0,0,0,0.06); }
.pie3d-swatch { width:12px; height:12px; border-radius:3px; flex:0 0 12px; }
.pie3d-label { flex:1 1 auto; }
.pie3d-value { color:#6b7280; white-space:nowrap; }
</style>
"""


# --------------------------- Data ---------------------------

@st.cache_data(ttl=60, show_spinner=False)
def load_leads_frame(flt: Optional[LeadFilter] = None) -> pd.DataFrame:
    with get_session() as sess:
        return leads_frame(list_leads(sess, flt))


@st.cache_data(ttl=60, show_spinner=False)
def load_rep_names() -> list[str]:
    with get_session() as sess:
        return [r.name for r in list_sales_reps(sess)]


def invalidate_caches() -> None:
    """After every write, so the next rerun reads fresh rows."""
    load_leads_frame.clear()
    load_rep_names.clear()


def distinct_values(df: pd.DataFrame, column: str) -> list[str]:
    if column not in df.columns:
        return []
    vals = df[column].dropna().astype(str).str.strip()
    return sorted(v for v in vals.unique() if v)


# --------------------------- Charts ---------------------------

def legend_html(entries: Sequence[LegendEntry], style_class: str = "") -> str:
    """Legend rows: swatch, label, 'count (pct%)', hover tooltip and hover colour."""
    items = []
    for e in entries:
        items.append(
            f'<div class="pie3d-legend-item" title="{html.escape(e.tooltip)}">'
            f'<span class="pie3d-swatch" style="background:{html.escape(e.color)}"></span>'
            f'<span class="pie3d-label">{html.escape(e.label)}</span>'
            f'<span class="pie3d-value">{html.escape(e.text)}</span>'
            f"</div>"
        )
    cls = f"pie3d-legend {html.escape(style_class)}".strip()
    return f'<div class="{cls}">{"".join(items)}</div>'


def show_pie3d(
    title: str,
    labels: Sequence[str],
    counts: Sequence[float],
    colors: Optional[Sequence[str]] = None,
    style_class: str = "",
) -> None:
    """Render the 3-D pie with its legend into the current container, then free the figure."""
    pie = render_pie3d(title, labels, counts, colors=colors, style_class=style_class)
    try:
        st.image(pie.to_png(), use_container_width=True)
        st.markdown(LEGEND_CSS + legend_html(pie.legend, style_class), unsafe_allow_html=True)
        hover = {s.label: to_hex(s.style.hover_fill) for s in pie.segments}
        st.session_state.setdefault("pie_hover_colors", {})[title] = hover
    finally:
        pie.close()
