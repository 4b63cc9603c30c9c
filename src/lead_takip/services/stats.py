# src/lead_takip/services/stats.py
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd

from ..charts.pie3d import round_half_up

NO_STATUS = "yeni"
NO_PERSONNEL = "Belirtilmemiş"
NO_SOURCE = "Bilinmiyor"
NO_PROJECT = "Belirtilmemiş"
NO_TYPE = "Tanımsız"

SALE_STATUSES = {"satış", "satis", "satildi", "satıldı"}
YES_VALUES = {"evet", "yes", "var", "1", "true"}


def _column(df: pd.DataFrame, name: str, fallback: str) -> pd.Series:
    """Column with empty/missing values replaced by ``fallback``."""
    if name not in df.columns:
        return pd.Series([fallback] * len(df), index=df.index, dtype=object)
    s = df[name].astype(object).where(df[name].notna(), "")
    s = s.map(lambda v: str(v).strip())
    return s.where(s != "", fallback)


def _value_counts(s: pd.Series) -> Dict[str, int]:
    # stable: first appearance decides the order of ties
    counts = s.value_counts(sort=False)
    order = sorted(range(len(counts)), key=lambda i: -counts.iloc[i])
    return {str(counts.index[i]): int(counts.iloc[i]) for i in order}


def source_column(df: pd.DataFrame) -> pd.Series:
    """First customer source, else the form source, else ``Bilinmiyor``."""
    first = _column(df, "first_customer_source", "")
    form = _column(df, "form_customer_source", "")
    merged = first.where(first != "", form)
    return merged.where(merged != "", NO_SOURCE)


def is_sale(df: pd.DataFrame) -> pd.Series:
    if df.empty:
        return pd.Series([], dtype=bool)
    status = _column(df, "status", "").str.lower()
    made = _column(df, "was_sale_made", "").str.lower()
    return status.isin(SALE_STATUSES) | made.isin(YES_VALUES)


def enhanced_stats(df: pd.DataFrame) -> dict:
    """Totals and breakdowns for the overview page."""
    return {
        "total": int(len(df)),
        "sales": int(is_sale(df).sum()),
        "by_status": _value_counts(_column(df, "status", NO_STATUS)),
        "by_type": _value_counts(_column(df, "lead_type", NO_TYPE)),
        "by_personnel": _value_counts(_column(df, "assigned_personnel", NO_PERSONNEL)),
        "by_source": _value_counts(source_column(df)),
        "by_project": _value_counts(_column(df, "project_name", NO_PROJECT)),
    }


COUNT_COLUMNS = {
    "status": NO_STATUS,
    "lead_type": NO_TYPE,
    "assigned_personnel": NO_PERSONNEL,
    "project_name": NO_PROJECT,
}


def counts_for(df: pd.DataFrame, column: str) -> Tuple[List[str], List[int]]:
    """(labels, counts) of one column, ready for ``render_pie3d``."""
    if column == "source":
        s = source_column(df)
    else:
        s = _column(df, column, COUNT_COLUMNS.get(column, NO_SOURCE))
    counts = _value_counts(s)
    return list(counts.keys()), list(counts.values())


def personnel_performance(df: pd.DataFrame, reps: Iterable) -> pd.DataFrame:
    """One row per rep: leads, sales, rentals, monthly target and % of target reached."""
    names = _column(df, "assigned_personnel", NO_PERSONNEL)
    sales = is_sale(df)
    types = _column(df, "lead_type", NO_TYPE)

    rows = []
    for rep in reps:
        mine = names == rep.name
        n_sales = int((sales & mine).sum()) if len(df) else 0
        target = int(rep.monthly_target or 0)
        ratio = round_half_up(n_sales / target * 100) if target > 0 else 0
        rows.append({
            "Personel": rep.name,
            "Lead": int(mine.sum()),
            "Satış Lead": int((mine & (types == "satis")).sum()),
            "Kiralama Lead": int((mine & (types == "kiralama")).sum()),
            "Satış": n_sales,
            "Aylık Hedef": target,
            "Hedef %": ratio,
        })
    out = pd.DataFrame(rows, columns=["Personel", "Lead", "Satış Lead", "Kiralama Lead", "Satış", "Aylık Hedef", "Hedef %"])
    return out.sort_values("Lead", ascending=False, kind="stable").reset_index(drop=True)


def monthly_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Leads per month (YYYY-MM) for the trend chart; undated leads are left out."""
    if df.empty or "request_date" not in df.columns:
        return pd.DataFrame(columns=["Ay", "Lead"])
    d = pd.to_datetime(df["request_date"].replace("", np.nan), errors="coerce", format="%Y-%m-%d")
    months = d.dropna().dt.strftime("%Y-%m")
    out = months.value_counts().sort_index().rename_axis("Ay").reset_index(name="Lead")
    return out
