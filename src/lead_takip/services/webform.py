# src/lead_takip/services/webform.py
"""
Parsing of the free-text "WebForm Notu" column and of the date formats found
in exported lead spreadsheets.

A typical note looks like::

    Ad Soyad : ... / Ilgilendigi Gayrimenkul Tipi :Satılık / Model Sanayi Merkezi

The value after ``Ilgilendigi Gayrimenkul Tipi`` gives the lead type, the
part after the last slash usually names the project.
"""
from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd

from ..models import UNDEFINED

logger = logging.getLogger(__name__)

DEFAULT_PROJECT = "Model Sanayi Merkezi"

_LETTER = "A-Za-zÇĞIŞÖÜİçğışöüi"

LEAD_TYPE_RE = re.compile(r"Ilgilendigi\s+Gayrimenkul\s+Tipi\s*:\s*([^/\n]*)", re.IGNORECASE)

# order matters – first hit wins
PROJECT_PATTERNS = [
    re.compile(r"/\s*(Model\s+Sanayi\s+Merkezi)\s*$", re.IGNORECASE),
    re.compile(rf"/\s*([{_LETTER}]+\s+Sanayi\s+Merkezi)\s*$", re.IGNORECASE),
    re.compile(
        rf"/\s*([{_LETTER}][{_LETTER}\s]*(?:Merkezi|Center|Residence|Plaza|Tower|City|Park|Proje|Konut|Sitesi|Complex|Mall|AVM))\s*$",
        re.IGNORECASE,
    ),
    re.compile(rf"/\s*([{_LETTER}][{_LETTER}\s]{{2,40}})\s*$", re.IGNORECASE),
    re.compile(r"\b(Vadi\s+İstanbul\s+Residence)\b", re.IGNORECASE),
    re.compile(r"\b(İstanbul\s+Park\s+Residence)\b", re.IGNORECASE),
    re.compile(r"\b(Beşiktaş\s+Tower)\b", re.IGNORECASE),
]

NOISE_WORDS_RE = re.compile(r"\b(?:için|hakkında|ile|ilgili|ve|or|and)\b", re.IGNORECASE)

FALLBACK_KEYWORDS = ["proje", "konut", "residence", "plaza", "tower", "city", "park", "sitesi", "daire", "ev", "villa"]

# keyword → canonical project (simple detector used by the project filter)
PROJECT_KEYWORDS = [
    ("sanayi", "Model Sanayi Merkezi"),
    ("kuyum", "Model Kuyum Merkezi"),
    ("vadi istanbul", "Vadi İstanbul"),
]


@dataclass(frozen=True)
class WebFormData:
    project_name: Optional[str] = None
    lead_type: str = UNDEFINED


def tr_lower(s: str) -> str:
    """Turkish-aware lower case (İ → i, I → ı)."""
    return s.replace("İ", "i").replace("I", "ı").lower()


def _fold(s: str) -> str:
    """All i-variants → 'i', accents stripped, lower case."""
    s = s.replace("İ", "i").replace("ı", "i").replace("I", "i")
    s = unicodedata.normalize("NFD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return s.lower()


def _lead_type_from_note(note: str) -> str:
    m = LEAD_TYPE_RE.search(note)
    if not m:
        return UNDEFINED
    extracted = _fold(m.group(1).strip())
    if extracted == "kiralik":
        return "kiralama"
    if extracted == "satilik":
        return "satis"
    return UNDEFINED


def _project_from_note(note: str) -> Optional[str]:
    for pattern in PROJECT_PATTERNS:
        m = pattern.search(note)
        if not m:
            continue
        candidate = NOISE_WORDS_RE.sub("", m.group(1)).strip()
        candidate = re.sub(r"\s+", " ", candidate)
        if len(candidate) > 2:
            return candidate

    for keyword in FALLBACK_KEYWORDS:
        m = re.search(rf"\b[A-ZÇĞIŞÖÜİ][{_LETTER}]+\s+{keyword}\b", note, re.IGNORECASE)
        if m:
            return m.group(0).strip()
        m = re.search(rf"\b{keyword}\s+[A-ZÇĞIŞÖÜİ][{_LETTER}]+\b", note, re.IGNORECASE)
        if m:
            return m.group(0).strip()
    return None


def extract_from_web_form(note: Optional[str]) -> WebFormData:
    """Lead type and project name from a web-form note (empty note → defaults)."""
    if not note or not isinstance(note, str):
        return WebFormData()
    original = note.strip()
    data = WebFormData(project_name=_project_from_note(original), lead_type=_lead_type_from_note(original))
    logger.debug("web form %r → %s", original[:60], data)
    return data


def detect_project(note: Optional[str]) -> Optional[str]:
    if not note:
        return None
    text = tr_lower(str(note))
    for keyword, project in PROJECT_KEYWORDS:
        if keyword in text:
            return project
    return None


def normalize_project_name(name: Optional[str]) -> str:
    return re.sub(r"\s+", " ", tr_lower(name or "")).strip()


_DMY_DOT = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_DMY_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_YMD = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def _iso(year: str, month: str, day: str) -> str:
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def parse_date(value) -> str:
    """DD.MM.YYYY / DD/MM/YYYY / YYYY-M-D / anything pandas understands → 'YYYY-MM-DD'; else ''."""
    if value is None:
        return ""
    if isinstance(value, (pd.Timestamp, date)):
        return value.strftime("%Y-%m-%d") if not pd.isna(value) else ""
    s = str(value).strip()
    if not s or s.lower() in ("nan", "nat", "none"):
        return ""

    m = _DMY_DOT.match(s) or _DMY_SLASH.match(s)
    if m:
        day, month, year = m.groups()
        return _iso(year, month, day)
    m = _YMD.match(s)
    if m:
        return _iso(*m.groups())

    parsed = pd.to_datetime(s, errors="coerce", dayfirst=True)
    if pd.isna(parsed):
        return ""
    return parsed.strftime("%Y-%m-%d")


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """'YYYY-MM-DD' → date, None when empty or invalid."""
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None
