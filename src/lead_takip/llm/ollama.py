# src/lead_takip/llm/ollama.py
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import httpx
from dotenv import load_dotenv
from openai import OpenAI, OpenAIError

from ..charts.colors import STANDARD_COLORS
from ..errors import LLMServiceError
from .prompts import TEMPLATE_INTERPRET, TEMPLATE_SQL, render_prompt

load_dotenv()
logger = logging.getLogger(__name__)

MAX_RESULT_ROWS_IN_PROMPT = 50

_FENCE_RE = re.compile(r"```(?:sql|json)?\s*(.*?)```", re.IGNORECASE | re.DOTALL)
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class OllamaConfig:
    model: str = "llama3.2:3b-instruct-q4_0"
    base_url: str = "http://localhost:11434"
    temperature: float = 0.1

    @classmethod
    def from_env(cls) -> "OllamaConfig":
        return cls(
            model=os.getenv("OLLAMA_MODEL", cls.model),
            base_url=os.getenv("OLLAMA_BASE_URL", cls.base_url).rstrip("/"),
            temperature=float(os.getenv("OLLAMA_TEMPERATURE", str(cls.temperature))),
        )


def clean_sql(text: str) -> str:
    """Model answer → one SQL statement (fences and trailing prose removed)."""
    m = _FENCE_RE.search(text)
    sql = m.group(1) if m else text
    sql = sql.strip()
    if sql.lower().startswith("sql\n"):
        sql = sql[4:]
    sql = sql.split(";")[0].strip()
    return sql


def parse_interpretation(text: str) -> dict:
    """``{summary, chart_spec}`` from the model's JSON; plain text becomes the summary."""
    candidates = []
    m = _FENCE_RE.search(text)
    if m:
        candidates.append(m.group(1))
    candidates.append(text)
    m = _JSON_OBJECT_RE.search(text)
    if m:
        candidates.append(m.group(0))

    for raw in candidates:
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(data, dict) and "summary" in data:
            spec = data.get("chartSpec", data.get("chart_spec"))
            return {"summary": str(data["summary"]), "chart_spec": spec if isinstance(spec, dict) else None}
    return {"summary": text.strip(), "chart_spec": None}


class OllamaService:
    """Ollama through its OpenAI-compatible ``/v1`` endpoint."""

    def __init__(self, config: Optional[OllamaConfig] = None, client: Optional[OpenAI] = None,
                 http: Optional[httpx.Client] = None):
        self.config = config or OllamaConfig.from_env()
        self.client = client or OpenAI(base_url=f"{self.config.base_url}/v1", api_key="ollama")
        self.http = http or httpx.Client(base_url=self.config.base_url, timeout=None)

    def ensure_model_available(self) -> bool:
        """True when the model is (now) present; False when Ollama is down."""
        family = self.config.model.split(":")[0]
        try:
            names = [m.id for m in self.client.models.list()]
            if any(family in n for n in names):
                return True
            logger.info("pulling model %s", self.config.model)
            resp = self.http.post("/api/pull", json={"model": self.config.model, "stream": False})
            resp.raise_for_status()
            logger.info("model %s pulled", self.config.model)
            return True
        except (OpenAIError, httpx.HTTPError) as e:
            logger.error("Ollama service not available: %s", e)
            return False

    def invoke(self, prompt: str, context: Optional[str] = None) -> str:
        full_prompt = f"{context}\n\nUser Question: {prompt}" if context else prompt
        try:
            resp = self.client.chat.completions.create(
                model=self.config.model,
                temperature=self.config.temperature,
                messages=[{"role": "user", "content": full_prompt}],
            )
        except OpenAIError as e:
            logger.error("error invoking Ollama: %s", e)
            raise LLMServiceError(f"AI service error: {e}") from e
        return resp.choices[0].message.content or ""

    def generate_sql(self, question: str, schema: str) -> str:
        prompt = render_prompt(TEMPLATE_SQL, schema=schema, question=question)
        sql = clean_sql(self.invoke(prompt))
        logger.debug("generated SQL for %r: %s", question, sql)
        return sql

    def interpret_results(self, sql: str, rows: Sequence[dict], question: str) -> dict:
        shown = list(rows)[:MAX_RESULT_ROWS_IN_PROMPT]
        brand = {k: STANDARD_COLORS.color_for("CUSTOMER_SOURCE", k) for k in ("Instagram", "Facebook", "Referans")}
        prompt = render_prompt(
            TEMPLATE_INTERPRET,
            question=question,
            sql=sql,
            results=json.dumps(shown, ensure_ascii=False, indent=2, default=str),
            brand_colors=brand,
        )
        return parse_interpretation(self.invoke(prompt))


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def chart_values(spec: dict) -> tuple[list[str], list[float]]:
    """Labels and numeric values of a chart spec; unusable values count as 0."""
    labels = [str(l) for l in spec.get("labels") or []]
    data = [_number(v) for v in spec.get("data") or []]
    return labels, data
