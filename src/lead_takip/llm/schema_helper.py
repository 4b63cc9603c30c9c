# src/lead_takip/llm/schema_helper.py
"""Schema context handed to the model together with the user's question."""
from __future__ import annotations

from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateTable
from sqlmodel import SQLModel

from .. import models  # noqa: F401  (registers the tables)

VALUE_HINTS = {
    "leads": """\
-- Sample data patterns:
-- lead_type: 'satis' = satılık/sales, 'kiralama' = kiralık/rental, 'Tanımsız' = unknown
-- first_customer_source: 'Instagram', 'Facebook', 'Referans', 'Website', 'Google', etc.
-- status: value of the last meeting result, e.g. 'Takipte', 'Bilgi Verildi', 'Olumsuz',
--         'Ulaşılamıyor', 'Toplantı/Birebir Görüşme', 'Satış', 'Tanımsız'
-- request_date: 'YYYY-MM-DD' text, '' when unknown
-- was_sale_made / one_on_one_meeting: 'Evet' or 'Hayır'
-- project_name: e.g. 'Model Sanayi Merkezi', 'Model Kuyum Merkezi'""",
    "sales_reps": """\
-- monthly_target: monthly sales target, is_active: 0/1 (inactive reps are soft-deleted)""",
}


def table_schema(name: str) -> str:
    table = SQLModel.metadata.tables[name]
    ddl = str(CreateTable(table).compile(dialect=sqlite.dialect())).strip()
    hint = VALUE_HINTS.get(name, "")
    return f"{ddl};\n{hint}".strip()


def leads_table_schema() -> str:
    return table_schema("leads")


def sales_reps_table_schema() -> str:
    return table_schema("sales_reps")


COMMON_QUERIES = """\
-- Common Query Patterns:

-- 1. Lead count by source
SELECT first_customer_source, COUNT(*) AS count
FROM leads
GROUP BY first_customer_source
ORDER BY count DESC;

-- 2. Sales vs rental distribution
SELECT
  CASE
    WHEN lead_type = 'satis' THEN 'Satılık'
    WHEN lead_type = 'kiralama' THEN 'Kiralık'
    ELSE 'Bilinmiyor'
  END AS type,
  COUNT(*) AS count
FROM leads
GROUP BY lead_type;

-- 3. Status distribution
SELECT status, COUNT(*) AS count
FROM leads
GROUP BY status
ORDER BY count DESC;

-- 4. Personnel performance
SELECT assigned_personnel, COUNT(*) AS total_leads,
  SUM(CASE WHEN status = 'Satış' OR was_sale_made = 'Evet' THEN 1 ELSE 0 END) AS sales_made
FROM leads
WHERE assigned_personnel <> ''
GROUP BY assigned_personnel
ORDER BY total_leads DESC;

-- 5. Monthly trends
SELECT strftime('%Y-%m', request_date) AS month, COUNT(*) AS leads_count
FROM leads
WHERE request_date <> ''
GROUP BY month
ORDER BY month;
"""


def common_queries() -> str:
    return COMMON_QUERIES


def table_summary() -> str:
    return """\
Database: Real Estate Lead Tracking System

Tables:
1. leads - Main lead tracking table with customer info, sources, status, and sales data
2. sales_reps - Sales representative information and targets
3. settings - Application settings (key/value)

Key Turkish Terms:
- satılık/satis = sales/for sale
- kiralık/kiralama = rental/for rent
- personel = personnel/sales rep
- durum/status = lead status
- kaynak = source
- proje = project
- müşteri = customer
- randevu = appointment
- takip = follow-up
- olumsuz = negative/rejected"""


def full_schema_context() -> str:
    return "\n\n".join([table_summary(), leads_table_schema(), sales_reps_table_schema(), common_queries()])
