import io
import json
import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd
import xlrd
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..errors import LeadTakipError, UnsupportedFileError
from ..models import UNDEFINED, Lead, SalesRep
from .leads import create_lead, ensure_sales_rep
from .webform import DEFAULT_PROJECT, extract_from_web_form, parse_date, tr_lower

logger = logging.getLogger(__name__)

# Column aliases of the CRM export (Turkish headers) and of JSON/camelCase payloads
COLUMN_MAP_CANDIDATES = {
    "customer_name": ["Müşteri Adı Soyadı", "Müşteri Adı", "customerName", "name", "Name"],
    "request_date": ["Talep Geliş Tarihi", "Talep Tarihi", "requestDate", "date"],
    "assigned_personnel": ["Atanan Personel", "Satış Temsilcisi", "assignedPersonnel", "salesRep"],
    "lead_type": ["Lead Tipi", "leadType"],
    "project_name": ["Proje Adı", "Project Name", "projectName"],
    "last_meeting_result": ["SON GORUSME SONUCU", "SON GÖRÜŞME SONUCU", "Son Görüşme Sonucu", "lastMeetingResult"],
    "customer_id": ["Müşteri ID", "customerId"],
    "contact_id": ["İletişim ID", "contactId"],
    "first_customer_source": ["İlk Müşteri Kaynağı", "firstCustomerSource"],
    "form_customer_source": ["Form Müşteri Kaynağı", "formCustomerSource"],
    "web_form_note": ["WebForm Notu", "Web Form Notu", "webFormNote"],
    "info_form_location1": ["İnfo Form Geliş Yeri", "infoFormLocation1"],
    "info_form_location2": ["İnfo Form Geliş Yeri 2", "infoFormLocation2"],
    "info_form_location3": ["İnfo Form Geliş Yeri 3", "infoFormLocation3"],
    "info_form_location4": ["İnfo Form Geliş Yeri 4", "infoFormLocation4"],
    "reminder_personnel": ["Hatıırlatma Personeli", "Hatırlatma Personeli", "reminderPersonnel"],
    "was_called_back": ["GERİ DÖNÜŞ YAPILDI MI? (Müşteri Arandı mı?)", "wasCalledBack"],
    "web_form_pool_date": ["Web Form Havuz Oluşturma Tarihi", "webFormPoolDate"],
    "form_system_date": ["Form Sistem Olusturma Tarihi", "formSystemDate"],
    "assignment_time_diff": ["Atama Saat Farkı", "assignmentTimeDiff"],
    "response_time_diff": ["Dönüş Saat Farkı", "responseTimeDiff"],
    "outgoing_call_system_date": ["Giden Arama Sistem Oluşturma Tarihi", "outgoingCallSystemDate"],
    "customer_response_date": ["Müşteri Geri Dönüş Tarihi (Giden Arama)", "customerResponseDate"],
    "was_email_sent": ["GERİ DÖNÜŞ YAPILDI MI? (Müşteriye Mail Gönderildi mi?)", "wasEmailSent"],
    "customer_email_response_date": ["Müşteri Mail Geri Dönüş Tarihi", "customerEmailResponseDate"],
    "unreachable_by_phone": ["Telefonla Ulaşılamayan Müşteriler", "unreachableByPhone"],
    "days_waiting_response": ["Kaç Gündür Geri Dönüş Bekliyor", "daysWaitingResponse"],
    "days_to_response": ["Kaç Günde Geri Dönüş Yapılmış (Süre)", "daysToResponse"],
    "call_note": ["GERİ DÖNÜŞ NOTU (Giden Arama Notu)", "Arama Notu", "callNote"],
    "email_note": ["GERİ DÖNÜŞ NOTU (Giden Mail Notu)", "emailNote"],
    "one_on_one_meeting": ["Birebir Görüşme Yapıldı mı ?", "Birebir Görüşme Yapıldı mı?", "oneOnOneMeeting"],
    "meeting_date": ["Birebir Görüşme Tarihi", "meetingDate"],
    "response_result": ["Dönüş Görüşme Sonucu", "responseResult"],
    "negative_reason": ["Dönüş Olumsuzluk Nedeni", "negativeReason"],
    "was_sale_made": ["Müşteriye Satış Yapıldı Mı ?", "Müşteriye Satış Yapıldı Mı?", "wasSaleMade"],
    "sale_count": ["Satış Adedi", "saleCount"],
    "appointment_date": ["Randevu Tarihi", "appointmentDate"],
    "last_meeting_note": ["SON GORUSME NOTU", "Son Görüşme Notu", "lastMeetingNote"],
}

INT_FIELDS = ["days_waiting_response", "days_to_response", "sale_count"]
SUPPORTED_DATE_FORMATS = ["DD.MM.YYYY", "DD/MM/YYYY", "YYYY-MM-DD"]
SUPPORTED_SUFFIXES = (".xlsx", ".xls", ".csv", ".json")

_LEADING_INT = re.compile(r"^\s*(-?\d+)")
SQLITE_INT_MIN, SQLITE_INT_MAX = -(2**63), 2**63 - 1


@dataclass
class RowError:
    row: int          # 1-based row of the uploaded sheet
    message: str


@dataclass
class DuplicateInfo:
    by_customer_id: int = 0
    by_contact_id: int = 0
    by_name: int = 0

    @property
    def total(self) -> int:
        return self.by_customer_id + self.by_contact_id + self.by_name


@dataclass
class ValidationWarnings:
    date_format_issues: int = 0
    missing_status_count: int = 0
    total_records: int = 0
    date_column_present: bool = False
    status_column_present: bool = False
    supported_date_formats: List[str] = field(default_factory=lambda: list(SUPPORTED_DATE_FORMATS))


@dataclass
class ImportReport:
    imported: int = 0
    skipped_empty: int = 0
    duplicates: DuplicateInfo = field(default_factory=DuplicateInfo)
    errors: List[RowError] = field(default_factory=list)
    warnings: ValidationWarnings = field(default_factory=ValidationWarnings)
    created_reps: List[str] = field(default_factory=list)
    lead_ids: List[int] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return self.duplicates.total

    @property
    def message(self) -> str:
        msg = f"{self.imported} lead içe aktarıldı"
        if self.skipped:
            msg += f", {self.skipped} tekrar atlandı"
        if self.errors:
            msg += f", {len(self.errors)} satır hatalı"
        return msg


# ---------- Reading ----------

def _parse(suffix: str, content: bytes):
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(io.BytesIO(content), sheet_name=0)
    if suffix == ".csv":
        return pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
    return json.loads(content.decode("utf-8-sig"))


def read_upload(filename: str, content: bytes) -> pd.DataFrame:
    """First sheet of an Excel file, a CSV, or a JSON list/object as DataFrame."""
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileError(f"unsupported file format: {suffix or filename!r}")
    try:
        data = _parse(suffix, content)
    except (ValueError, zipfile.BadZipFile, xlrd.XLRDError) as e:
        raise UnsupportedFileError(f"cannot read {filename}: {e}") from e
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise UnsupportedFileError("JSON must contain an object or a list of objects")
    return pd.DataFrame(data)


def _pick(series_like, names):
    return [n for n in names if n in series_like]


def _text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float):
        if pd.isna(value):
            return None
        if value.is_integer():
            return str(int(value))      # Excel turns ids into floats
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.strftime("%Y-%m-%d")
    s = str(value).strip()
    return s or None


def _int(value) -> Optional[int]:
    s = _text(value)
    if s is None:
        return None
    m = _LEADING_INT.match(s)
    if not m:
        return None
    n = int(m.group(1))
    if not SQLITE_INT_MIN <= n <= SQLITE_INT_MAX:
        raise ValueError(f"number out of range: {s}")
    return n


def _standardize_columns(df: pd.DataFrame) -> Tuple[pd.DataFrame, Dict[str, List[str]]]:
    """Fixed record shape; several present aliases are merged, first non-empty wins."""
    cols = {key: _pick(df.columns, cand) for key, cand in COLUMN_MAP_CANDIDATES.items()}
    out = pd.DataFrame(index=df.index)
    for key, sources in cols.items():
        if not sources:
            out[key] = None
            continue
        values = df[sources].apply(lambda s: s.map(_text))
        out[key] = values.bfill(axis=1).iloc[:, 0] if len(sources) > 1 else values.iloc[:, 0]
    out = out.astype(object).where(out.notna(), None)
    return out, cols


# ---------- Mapping ----------

def _lead_type_from_column(value: Optional[str]) -> str:
    normalized = tr_lower(value or "").strip()
    if any(k in normalized for k in ("satış", "satis", "sale")):
        return "satis"
    if any(k in normalized for k in ("kiralık", "kiralik", "kiralama")):
        return "kiralama"
    return UNDEFINED


def map_row(record: dict) -> dict:
    """Standardized record → LeadCreate payload."""
    rec = {k: _text(record.get(k)) for k in COLUMN_MAP_CANDIDATES}

    web = extract_from_web_form(rec["web_form_note"])
    lead_type = _lead_type_from_column(rec["lead_type"])
    if web.lead_type != UNDEFINED:
        lead_type = web.lead_type

    project = web.project_name or rec["project_name"] or DEFAULT_PROJECT
    status = rec["last_meeting_result"] or UNDEFINED

    mapped = {k: v for k, v in rec.items() if k not in INT_FIELDS}
    mapped.update(
        customer_name=rec["customer_name"] or "",
        request_date=parse_date(rec["request_date"]),
        assigned_personnel=rec["assigned_personnel"] or "",
        lead_type=lead_type,
        project_name=project,
        status=status,
    )
    for key in INT_FIELDS:
        mapped[key] = _int(record.get(key))
    return mapped


# ---------- Import ----------

def _norm_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


class _DuplicateIndex:
    """customer id → contact id → normalised name (> 3 chars)."""

    def __init__(self, leads):
        self.customer_ids, self.contact_ids, self.names = set(), set(), set()
        for lead in leads:
            self.add(lead)

    def add(self, lead) -> None:
        get = lead.get if isinstance(lead, dict) else lambda k: getattr(lead, k)
        if get("customer_id"):
            self.customer_ids.add(get("customer_id"))
        if get("contact_id"):
            self.contact_ids.add(get("contact_id"))
        name = _norm_name(get("customer_name"))
        if len(name) > 3:
            self.names.add(name)

    def match(self, row: dict) -> Optional[str]:
        if row.get("customer_id") and row["customer_id"] in self.customer_ids:
            return "by_customer_id"
        if row.get("contact_id") and row["contact_id"] in self.contact_ids:
            return "by_contact_id"
        name = _norm_name(row.get("customer_name"))
        if len(name) > 3 and name in self.names:
            return "by_name"
        return None


def import_leads(session: Session, df: pd.DataFrame) -> ImportReport:
    """Store every usable row of ``df``; bad rows are reported, never fatal."""
    report = ImportReport()
    report.warnings.total_records = len(df)
    std, used_map = _standardize_columns(df)
    report.warnings.date_column_present = bool(used_map["request_date"])
    report.warnings.status_column_present = bool(used_map["last_meeting_result"])

    known = _DuplicateIndex(session.exec(select(Lead)).all())
    reps_before = {r.name for r in session.exec(select(SalesRep)).all()}

    for i, record in enumerate(std.to_dict(orient="records"), start=1):
        try:
            mapped = map_row(record)
            if not mapped["customer_name"] and not mapped["assigned_personnel"]:
                report.skipped_empty += 1
                continue

            dup = known.match(mapped)
            if dup:
                setattr(report.duplicates, dup, getattr(report.duplicates, dup) + 1)
                logger.warning("duplicate skipped: %s (id %s)", mapped["customer_name"], mapped.get("customer_id"))
                continue

            if not mapped["request_date"]:
                report.warnings.date_format_issues += 1
            if mapped["status"] == UNDEFINED:
                report.warnings.missing_status_count += 1

            if mapped["assigned_personnel"]:
                rep = ensure_sales_rep(session, mapped["assigned_personnel"])
                if rep.name not in reps_before:
                    reps_before.add(rep.name)
                    report.created_reps.append(rep.name)

            lead = create_lead(session, mapped)
            known.add(lead)
            report.lead_ids.append(lead.id)
            report.imported += 1
        except (LeadTakipError, SQLAlchemyError, OverflowError, ValueError) as e:
            session.rollback()
            report.errors.append(RowError(row=i, message=str(e)))
            logger.warning("row %d rejected: %s", i, e)

    logger.info(
        "import finished: %d imported, %d duplicates, %d errors",
        report.imported, report.skipped, len(report.errors),
    )
    return report


def import_file(session: Session, filename: str, content: bytes) -> ImportReport:
    df = read_upload(filename, content)
    logger.info("processing %s: %d rows", filename, len(df))
    return import_leads(session, df)
