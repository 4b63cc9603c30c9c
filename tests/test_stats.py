"""Unit tests for the dashboard statistics."""

from __future__ import annotations

from types import SimpleNamespace

import pandas as pd
import pytest

from lead_takip.services.stats import counts_for, enhanced_stats, monthly_counts, personnel_performance

pytestmark = pytest.mark.unit


@pytest.fixture
def frame() -> pd.DataFrame:
    """Return a small lead frame with gaps in every column."""

    return pd.DataFrame(
        [
            {"status": "Takipte", "lead_type": "satis", "assigned_personnel": "Ayşe", "first_customer_source": "Instagram",
             "form_customer_source": None, "project_name": "A", "was_sale_made": None, "request_date": "2025-01-02"},
            {"status": "Satış", "lead_type": "satis", "assigned_personnel": "Ayşe", "first_customer_source": "",
             "form_customer_source": "Facebook", "project_name": "A", "was_sale_made": "Evet", "request_date": "2025-01-20"},
            {"status": "", "lead_type": "kiralama", "assigned_personnel": "", "first_customer_source": None,
             "form_customer_source": None, "project_name": None, "was_sale_made": None, "request_date": "2025-02-01"},
            {"status": "Takipte", "lead_type": "kiralama", "assigned_personnel": "Murat", "first_customer_source": "Instagram",
             "form_customer_source": None, "project_name": "B", "was_sale_made": "evet", "request_date": ""},
        ]
    )


def test_enhanced_stats_defaults(frame: pd.DataFrame) -> None:
    """Empty values fall back to 'yeni', 'Belirtilmemiş' and 'Bilinmiyor'."""

    stats = enhanced_stats(frame)
    assert stats["total"] == 4
    assert stats["sales"] == 2
    assert stats["by_status"] == {"Takipte": 2, "Satış": 1, "yeni": 1}
    assert stats["by_type"] == {"satis": 2, "kiralama": 2}
    assert stats["by_personnel"] == {"Ayşe": 2, "Belirtilmemiş": 1, "Murat": 1}
    assert stats["by_source"] == {"Instagram": 2, "Facebook": 1, "Bilinmiyor": 1}
    assert stats["by_project"]["A"] == 2


def test_enhanced_stats_empty_frame() -> None:
    """An empty frame yields zero totals and empty breakdowns."""

    stats = enhanced_stats(pd.DataFrame())
    assert stats["total"] == 0
    assert stats["sales"] == 0
    assert stats["by_status"] == {}


def test_counts_for_is_sorted(frame: pd.DataFrame) -> None:
    """Labels come sorted by count, ties in order of appearance."""

    labels, counts = counts_for(frame, "source")
    assert labels == ["Instagram", "Facebook", "Bilinmiyor"]
    assert counts == [2, 1, 1]


def test_personnel_performance(frame: pd.DataFrame) -> None:
    """Sales, split by type and target percentage per rep."""

    reps = [SimpleNamespace(name="Murat", monthly_target=4), SimpleNamespace(name="Ayşe", monthly_target=0)]
    perf = personnel_performance(frame, reps)
    assert list(perf["Personel"]) == ["Ayşe", "Murat"]
    ayse = perf.iloc[0]
    assert ayse["Lead"] == 2
    assert ayse["Satış"] == 1
    assert ayse["Satış Lead"] == 2
    assert ayse["Hedef %"] == 0
    murat = perf.iloc[1]
    assert murat["Satış"] == 1
    assert murat["Hedef %"] == 25


def test_monthly_counts_skips_undated(frame: pd.DataFrame) -> None:
    """Months are counted from ISO dates only."""

    trend = monthly_counts(frame)
    assert list(trend["Ay"]) == ["2025-01", "2025-02"]
    assert list(trend["Lead"]) == [2, 1]
