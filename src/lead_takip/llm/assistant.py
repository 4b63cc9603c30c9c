# src/lead_takip/llm/assistant.py
"""Question → SQL → rows → Turkish summary, with a read-only guard on the SQL."""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd
from sqlalchemy.engine import Engine

from ..charts.pie3d import Pie3D, render_pie3d
from ..errors import UnsafeQueryError
from .ollama import OllamaService, chart_values
from .schema_helper import full_schema_context

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100

_FORBIDDEN = re.compile(
    r"\b(insert|update|delete|drop|alter|create|attach|detach|pragma|vacuum|reindex|truncate)\b",
    re.IGNORECASE,
)
_LIMIT_RE = re.compile(r"\blimit\s+\d+", re.IGNORECASE)
_LEADING_COMMENTS = re.compile(r"^\s*(--[^\n]*\n\s*)*")
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")


@dataclass
class AssistantAnswer:
    question: str
    sql: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    summary: str = ""
    chart_spec: Optional[dict] = None

    @property
    def frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows)


def ensure_read_only(sql: str) -> str:
    """The statement, if it is a single SELECT/WITH; else UnsafeQueryError."""
    stmt = _LEADING_COMMENTS.sub("", sql).strip().rstrip(";").strip()
    if not stmt:
        raise UnsafeQueryError("empty query")
    bare = _STRING_LITERAL.sub("''", stmt)
    if ";" in bare:
        raise UnsafeQueryError("only a single statement is allowed")
    first = stmt.split(None, 1)[0].lower()
    if first not in ("select", "with"):
        raise UnsafeQueryError(f"only SELECT queries are allowed, got {first.upper()}")
    if _FORBIDDEN.search(bare):
        raise UnsafeQueryError("query contains a data-modifying keyword")
    return stmt


def add_limit(sql: str, limit: int = DEFAULT_LIMIT) -> str:
    if _LIMIT_RE.search(sql):
        return sql
    return f"{sql}\nLIMIT {limit}"


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    out = []
    for rec in df.to_dict(orient="records"):
        out.append({k: (None if isinstance(v, float) and math.isnan(v) else v) for k, v in rec.items()})
    return out


def run_query(sql: str, engine: Engine) -> List[Dict[str, Any]]:
    with engine.connect() as conn:
        df = pd.read_sql_query(sql, conn)
    return _records(df)


def answer_question(question: str, engine: Engine, service: OllamaService) -> AssistantAnswer:
    sql = service.generate_sql(question, full_schema_context())
    safe = add_limit(ensure_read_only(sql))
    logger.info("assistant query: %s", safe.replace("\n", " "))
    rows = run_query(safe, engine)
    interpretation = service.interpret_results(safe, rows, question)
    return AssistantAnswer(
        question=question,
        sql=safe,
        rows=rows,
        summary=interpretation["summary"],
        chart_spec=interpretation["chart_spec"],
    )


def render_chart_spec(spec: Optional[dict]) -> Optional[Pie3D]:
    """Pie chart for a ``type == 'pie'`` spec; other chart types are drawn by the UI."""
    if not spec or spec.get("type") != "pie":
        return None
    labels, counts = chart_values(spec)
    return render_pie3d(spec.get("title", ""), labels, counts, colors=spec.get("colors") or None)
