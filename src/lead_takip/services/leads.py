# src/lead_takip/services/leads.py
"""CRUD for leads, sales reps and settings on top of a SQLModel session."""
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Union

import pandas as pd
from pydantic import ValidationError
from sqlalchemy import delete
from sqlmodel import Session, select

from ..errors import LeadValidationError
from ..models import (
    UNDEFINED,
    Lead,
    LeadCreate,
    LeadUpdate,
    SalesRep,
    SalesRepCreate,
    SalesRepUpdate,
    Setting,
)
from .webform import detect_project, extract_from_web_form, normalize_project_name, parse_iso_date

logger = logging.getLogger(__name__)

AUTO_REP_TARGET = 50

# column order of the lead table in the UI
FRAME_COLUMNS = [
    "id",
    "customer_name",
    "request_date",
    "lead_type",
    "assigned_personnel",
    "status",
    "project_name",
    "first_customer_source",
    "form_customer_source",
    "web_form_note",
    "was_sale_made",
    "sale_count",
    "last_meeting_result",
    "negative_reason",
    "created_at",
]


@dataclass
class LeadFilter:
    """Empty fields do not filter. ``month`` is 1-12."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month: Optional[int] = None
    year: Optional[int] = None
    sales_rep: Optional[str] = None
    lead_type: Optional[str] = None
    status: Optional[str] = None
    project: Optional[str] = None

    def date_range(self) -> tuple[Optional[date], Optional[date]]:
        start, end = self.start_date, self.end_date
        if self.month and self.year:
            last_day = calendar.monthrange(self.year, self.month)[1]
            start = date(self.year, self.month, 1)
            end = date(self.year, self.month, last_day)
        return start, end

    def matches_date(self, request_date: Optional[str]) -> bool:
        d = parse_iso_date(request_date)
        if d is None:
            return True  # undated leads are never filtered out
        start, end = self.date_range()
        if start and d < start:
            return False
        if end and d > end:
            return False
        if self.year and not self.month and d.year != self.year:
            return False
        if self.month and not self.year and d.month != self.month:
            return False
        return True

    def matches_project(self, lead: Lead) -> bool:
        if not self.project:
            return True
        wanted = normalize_project_name(self.project)
        if normalize_project_name(lead.project_name) == wanted:
            return True
        detected = detect_project(lead.web_form_note)
        return detected is not None and normalize_project_name(detected) == wanted


def _validate(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise LeadValidationError(str(e)) from e


# ---------- Leads ----------

def list_leads(session: Session, flt: Optional[LeadFilter] = None) -> List[Lead]:
    stmt = select(Lead).order_by(Lead.id)
    if flt:
        if flt.sales_rep:
            stmt = stmt.where(Lead.assigned_personnel == flt.sales_rep)
        if flt.lead_type:
            stmt = stmt.where(Lead.lead_type == flt.lead_type)
        if flt.status:
            stmt = stmt.where(Lead.status == flt.status)
    leads = session.exec(stmt).all()
    if flt:
        leads = [l for l in leads if flt.matches_date(l.request_date) and flt.matches_project(l)]
    return list(leads)


def get_lead(session: Session, lead_id: int) -> Optional[Lead]:
    return session.get(Lead, lead_id)


def _apply_web_form(values: dict) -> dict:
    data = extract_from_web_form(values.get("web_form_note"))
    if data.project_name:
        values["project_name"] = data.project_name
    if data.lead_type != UNDEFINED:
        values["lead_type"] = data.lead_type
    return values


def create_lead(session: Session, data: Union[LeadCreate, dict], commit: bool = True) -> Lead:
    """Validate, let the web-form note override project/type, store."""
    payload = _validate(LeadCreate, data)
    values = _apply_web_form(payload.model_dump())
    lead = Lead(**values)
    session.add(lead)
    if commit:
        session.commit()
        session.refresh(lead)
    return lead


def update_lead(session: Session, lead_id: int, data: Union[LeadUpdate, dict]) -> Optional[Lead]:
    lead = session.get(Lead, lead_id)
    if lead is None:
        return None
    changes = _validate(LeadUpdate, data).model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(lead, key, value)
    session.add(lead)
    session.commit()
    session.refresh(lead)
    return lead


def delete_lead(session: Session, lead_id: int) -> bool:
    lead = session.get(Lead, lead_id)
    if lead is None:
        return False
    session.delete(lead)
    session.commit()
    return True


def clear_leads(session: Session) -> int:
    n = len(session.exec(select(Lead.id)).all())
    session.exec(delete(Lead))
    session.commit()
    logger.info("deleted %d leads", n)
    return n


def leads_frame(leads: Iterable[Lead]) -> pd.DataFrame:
    rows = [l.model_dump() for l in leads]
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    df = pd.DataFrame(rows)
    ordered = [c for c in FRAME_COLUMNS if c in df.columns]
    rest = [c for c in df.columns if c not in ordered]
    return df[ordered + rest]


# ---------- Sales reps ----------

def list_sales_reps(session: Session, include_inactive: bool = False) -> List[SalesRep]:
    stmt = select(SalesRep).order_by(SalesRep.name)
    if not include_inactive:
        stmt = stmt.where(SalesRep.is_active == True)  # noqa: E712
    return list(session.exec(stmt).all())


def get_sales_rep(session: Session, rep_id: int) -> Optional[SalesRep]:
    return session.get(SalesRep, rep_id)


def create_sales_rep(session: Session, data: Union[SalesRepCreate, dict]) -> SalesRep:
    payload = _validate(SalesRepCreate, data)
    if not payload.name.strip():
        raise LeadValidationError("sales rep name must not be empty")
    rep = SalesRep(**{**payload.model_dump(), "name": payload.name.strip()})
    session.add(rep)
    session.commit()
    session.refresh(rep)
    return rep


def ensure_sales_rep(session: Session, name: str, monthly_target: int = AUTO_REP_TARGET) -> SalesRep:
    """Rep with this name, created (active, default target) if unknown."""
    name = name.strip()
    rep = session.exec(select(SalesRep).where(SalesRep.name == name)).first()
    if rep is not None:
        return rep
    rep = create_sales_rep(session, {"name": name, "monthly_target": monthly_target, "is_active": True})
    logger.info("auto-created sales rep %r", name)
    return rep


def update_sales_rep(session: Session, rep_id: int, data: Union[SalesRepUpdate, dict]) -> Optional[SalesRep]:
    rep = session.get(SalesRep, rep_id)
    if rep is None:
        return None
    for key, value in _validate(SalesRepUpdate, data).model_dump(exclude_unset=True).items():
        setattr(rep, key, value)
    session.add(rep)
    session.commit()
    session.refresh(rep)
    return rep


def deactivate_sales_rep(session: Session, rep_id: int) -> bool:
    rep = session.get(SalesRep, rep_id)
    if rep is None:
        return False
    rep.is_active = False
    session.add(rep)
    session.commit()
    return True


# ---------- Settings ----------

def list_settings(session: Session) -> dict:
    return {s.key: s.value for s in session.exec(select(Setting).order_by(Setting.key)).all()}


def get_setting(session: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    s = session.exec(select(Setting).where(Setting.key == key)).first()
    return s.value if s else default


def upsert_setting(session: Session, key: str, value: str) -> Setting:
    s = session.exec(select(Setting).where(Setting.key == key)).first()
    if s is None:
        s = Setting(key=key, value=str(value))
    else:
        s.value = str(value)
    session.add(s)
    session.commit()
    session.refresh(s)
    return s


# ---------- Sample data ----------

def load_sample_data(session: Session) -> int:
    """Replace every lead with the built-in demo set; returns the number loaded."""
    from .sample_data import SAMPLE_LEADS

    clear_leads(session)
    for row in SAMPLE_LEADS:
        if row.get("assigned_personnel"):
            ensure_sales_rep(session, row["assigned_personnel"])
        create_lead(session, row, commit=False)
    session.commit()
    logger.info("loaded %d sample leads", len(SAMPLE_LEADS))
    return len(SAMPLE_LEADS)
