# ================================
# file: src/gui/board.py
# ================================
from __future__ import annotations

import logging
from datetime import date

import altair as alt
import pandas as pd
import streamlit as st

from gui.helpers import distinct_values, load_leads_frame, load_rep_names, show_pie3d
from lead_takip.charts.colors import colors_for
from lead_takip.db import get_session
from lead_takip.services.fx import ExchangeRateService
from lead_takip.services.leads import LeadFilter, list_sales_reps
from lead_takip.services.stats import counts_for, enhanced_stats, monthly_counts, personnel_performance

logger = logging.getLogger(__name__)

ALL = "Tümü"
MONTHS = ["Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
          "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık"]


@st.cache_resource
def _fx_service() -> ExchangeRateService:
    return ExchangeRateService()


# --------- filters ---------
def _sidebar_filters(all_leads: pd.DataFrame) -> LeadFilter:
    with st.sidebar:
        st.header("Filtreler")
        use_range = st.checkbox("Tarih aralığı", value=False)
        start = end = None
        if use_range:
            start = st.date_input("Başlangıç", value=date(date.today().year, 1, 1))
            end = st.date_input("Bitiş", value=date.today())

        years = sorted({int(d[:4]) for d in all_leads.get("request_date", pd.Series(dtype=str)) if d and d[:4].isdigit()})
        year = st.selectbox("Yıl", [ALL] + years)
        month = st.selectbox("Ay", [ALL] + MONTHS)

        rep = st.selectbox("Satış temsilcisi", [ALL] + load_rep_names())
        lead_type = st.selectbox("Lead tipi", [ALL, "satis", "kiralama", "Tanımsız"])
        status = st.selectbox("Durum", [ALL] + distinct_values(all_leads, "status"))
        project = st.selectbox("Proje", [ALL] + distinct_values(all_leads, "project_name"))

    return LeadFilter(
        start_date=start,
        end_date=end,
        year=None if year == ALL else int(year),
        month=None if month == ALL else MONTHS.index(month) + 1,
        sales_rep=None if rep == ALL else rep,
        lead_type=None if lead_type == ALL else lead_type,
        status=None if status == ALL else status,
        project=None if project == ALL else project,
    )


# --------- tiles ---------
def _tile_kpis(stats: dict) -> None:
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Toplam lead", stats["total"])
    c2.metric("Satış lead", stats["by_type"].get("satis", 0))
    c3.metric("Kiralama lead", stats["by_type"].get("kiralama", 0))
    c4.metric("Satış yapılan", stats["sales"])

    fx = _fx_service().usd_try()
    st.caption(f"USD/TRY (TCMB satış): {fx.selling:.4f}" + (" · yedek kur" if fx.source != "tcmb" else ""))


def _tile_pies(df: pd.DataFrame) -> None:
    c1, c2, c3 = st.columns(3)
    with c1:
        labels, counts = counts_for(df, "source")
        show_pie3d("Müşteri Kaynağı", labels, counts, colors_for("CUSTOMER_SOURCE", labels), "pie-source")
    with c2:
        labels, counts = counts_for(df, "status")
        show_pie3d("Durum", labels, counts, colors_for("STATUS", labels), "pie-status")
    with c3:
        labels, counts = counts_for(df, "lead_type")
        show_pie3d("Lead Tipi", labels, counts, colors_for("LEAD_TYPE", labels), "pie-type")


def _tile_personnel(df: pd.DataFrame) -> None:
    st.markdown("#### Personel bazında lead")
    with get_session() as sess:
        perf = personnel_performance(df, list_sales_reps(sess))
    if perf.empty:
        st.info("Henüz satış temsilcisi yok.")
        return
    chart = (
        alt.Chart(perf)
        .mark_bar()
        .encode(
            x=alt.X("Lead:Q", title="Lead"),
            y=alt.Y("Personel:N", sort="-x", title=""),
            color=alt.Color("Personel:N", legend=None,
                            scale=alt.Scale(domain=list(perf["Personel"]),
                                            range=colors_for("PERSONNEL", perf["Personel"]))),
            tooltip=["Personel", "Lead", "Satış", "Aylık Hedef", "Hedef %"],
        )
        .properties(height=max(120, 32 * len(perf)))
    )
    st.altair_chart(chart, use_container_width=True)
    st.dataframe(perf, use_container_width=True, hide_index=True)


def _tile_trend(df: pd.DataFrame) -> None:
    trend = monthly_counts(df)
    if trend.empty:
        return
    st.markdown("#### Aylık lead trendi")
    chart = (
        alt.Chart(trend)
        .mark_line(point=True)
        .encode(x=alt.X("Ay:N", title=""), y=alt.Y("Lead:Q", title="Lead"), tooltip=["Ay", "Lead"])
        .properties(height=260)
    )
    st.altair_chart(chart, use_container_width=True)


# --------- public ---------
def render_dashboard() -> None:
    st.subheader("Genel Bakış")
    try:
        all_leads = load_leads_frame()
        flt = _sidebar_filters(all_leads)
        df = load_leads_frame(flt)
    except Exception as e:
        st.error(f"Lead verisi yüklenemedi: {e}")
        logger.exception("loading leads failed")
        return

    if df.empty:
        st.info("Filtreye uyan lead yok. 'Dosya İçe Aktarma' sayfasından veri yükleyebilirsiniz.")
        return

    stats = enhanced_stats(df)
    _tile_kpis(stats)
    _tile_pies(df)
    _tile_personnel(df)
    _tile_trend(df)

    with st.expander("Proje dağılımı", expanded=False):
        st.dataframe(
            pd.DataFrame(list(stats["by_project"].items()), columns=["Proje", "Lead"]),
            use_container_width=True, hide_index=True,
        )
