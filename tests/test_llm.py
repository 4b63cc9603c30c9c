"""Tests for the Ollama service wrapper, SQL guard and the assistant pipeline."""

from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from lead_takip.errors import LLMServiceError, UnsafeQueryError
from lead_takip.llm.assistant import add_limit, answer_question, ensure_read_only, render_chart_spec
from lead_takip.llm.ollama import OllamaConfig, OllamaService, clean_sql, parse_interpretation
from lead_takip.llm.schema_helper import full_schema_context, leads_table_schema
from lead_takip.services.leads import create_lead


class FakeCompletions:
    """Returns queued answers and records prompts."""

    def __init__(self, answers: list[str] | None = None, error: Exception | None = None) -> None:
        self.answers = list(answers or [])
        self.error = error
        self.prompts: list[str] = []

    def create(self, model, temperature, messages):
        self.prompts.append(messages[-1]["content"])
        if self.error:
            raise self.error
        content = self.answers.pop(0)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeModels:
    """Lists a fixed set of model ids."""

    def __init__(self, ids: list[str], error: Exception | None = None) -> None:
        self.ids = ids
        self.error = error

    def list(self):
        if self.error:
            raise self.error
        return [SimpleNamespace(id=i) for i in self.ids]


def _fake_client(answers=None, error=None, model_ids=(), models_error=None):
    return SimpleNamespace(
        chat=SimpleNamespace(completions=FakeCompletions(answers, error)),
        models=FakeModels(list(model_ids), models_error),
    )


def _service(client, http=None) -> OllamaService:
    config = OllamaConfig(model="llama3.2:3b-instruct-q4_0", base_url="http://ollama.test", temperature=0.1)
    http = http or httpx.Client(base_url=config.base_url, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    return OllamaService(config, client=client, http=http)


# ---------- unit ----------

@pytest.mark.unit
def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment variables override the defaults."""

    monkeypatch.setenv("OLLAMA_MODEL", "qwen2:7b")
    monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu:11434/")
    monkeypatch.delenv("OLLAMA_TEMPERATURE", raising=False)
    cfg = OllamaConfig.from_env()
    assert cfg.model == "qwen2:7b"
    assert cfg.base_url == "http://gpu:11434"
    assert cfg.temperature == 0.1


@pytest.mark.unit
def test_clean_sql_strips_fences_and_extra_statements() -> None:
    """Only the first statement inside a code fence is kept."""

    raw = "Here you go:\n```sql\nSELECT * FROM leads;\nDROP TABLE leads;\n```"
    assert clean_sql(raw) == "SELECT * FROM leads"
    assert clean_sql("SELECT 1") == "SELECT 1"


@pytest.mark.unit
def test_parse_interpretation_json_and_text() -> None:
    """JSON answers are parsed; anything else becomes the summary."""

    payload = {"summary": "Toplam 3 lead.", "chartSpec": {"type": "pie", "labels": ["A"], "data": [3]}}
    parsed = parse_interpretation("```json\n" + json.dumps(payload) + "\n```")
    assert parsed["summary"] == "Toplam 3 lead."
    assert parsed["chart_spec"]["type"] == "pie"

    plain = parse_interpretation("Sadece metin.")
    assert plain == {"summary": "Sadece metin.", "chart_spec": None}


@pytest.mark.unit
def test_ensure_read_only() -> None:
    """Only single SELECT/WITH statements pass."""

    assert ensure_read_only("-- count\nSELECT COUNT(*) FROM leads;") == "SELECT COUNT(*) FROM leads"
    assert ensure_read_only("WITH x AS (SELECT 1) SELECT * FROM x").startswith("WITH")
    for bad in ("DELETE FROM leads", "SELECT 1; DROP TABLE leads", "", "PRAGMA table_info(leads)",
                "SELECT * FROM leads WHERE 1; UPDATE leads SET status='x'"):
        with pytest.raises(UnsafeQueryError):
            ensure_read_only(bad)


@pytest.mark.unit
def test_add_limit() -> None:
    """A LIMIT is appended only when missing."""

    assert add_limit("SELECT * FROM leads").endswith("LIMIT 100")
    assert add_limit("SELECT * FROM leads LIMIT 5") == "SELECT * FROM leads LIMIT 5"


@pytest.mark.unit
def test_invoke_wraps_errors() -> None:
    """Client errors surface as LLMServiceError."""

    err = openai.APIConnectionError(request=httpx.Request("POST", "http://ollama.test/v1/chat/completions"))
    svc = _service(_fake_client(error=err))
    with pytest.raises(LLMServiceError):
        svc.invoke("merhaba")


@pytest.mark.unit
def test_invoke_prepends_context() -> None:
    """Context goes before the user question."""

    client = _fake_client(answers=["ok"])
    assert _service(client).invoke("soru", context="bağlam") == "ok"
    assert client.chat.completions.prompts[0] == "bağlam\n\nUser Question: soru"


@pytest.mark.unit
def test_ensure_model_available_pulls_missing_model() -> None:
    """A missing model is pulled through /api/pull."""

    pulled = []

    def handler(request: httpx.Request) -> httpx.Response:
        pulled.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"status": "success"})

    http = httpx.Client(base_url="http://ollama.test", transport=httpx.MockTransport(handler))
    svc = _service(_fake_client(model_ids=["mistral:latest"]), http=http)
    assert svc.ensure_model_available() is True
    assert pulled == [("/api/pull", {"model": "llama3.2:3b-instruct-q4_0", "stream": False})]

    present = _service(_fake_client(model_ids=["llama3.2:latest"]))
    assert present.ensure_model_available() is True


@pytest.mark.unit
def test_ensure_model_available_server_down() -> None:
    """Connection problems return False instead of raising."""

    err = openai.APIConnectionError(request=httpx.Request("GET", "http://ollama.test/v1/models"))
    assert _service(_fake_client(models_error=err)).ensure_model_available() is False


@pytest.mark.unit
def test_generate_sql_prompt_contains_schema_and_glossary() -> None:
    """The SQL prompt carries schema, glossary and the question."""

    client = _fake_client(answers=["```sql\nSELECT 1;\n```"])
    sql = _service(client).generate_sql("kaç lead var?", "CREATE TABLE leads (...)")
    prompt = client.chat.completions.prompts[0]
    assert sql == "SELECT 1"
    assert "CREATE TABLE leads (...)" in prompt
    assert "kiralama" in prompt
    assert "User Query: kaç lead var?" in prompt


@pytest.mark.unit
def test_schema_from_metadata() -> None:
    """The DDL comes from the table models."""

    ddl = leads_table_schema()
    assert "CREATE TABLE leads" in ddl
    assert "customer_name" in ddl
    assert "sales_reps" in full_schema_context()


@pytest.mark.unit
def test_render_chart_spec_only_for_pies() -> None:
    """Pie specs render, other types are left to the UI."""

    assert render_chart_spec({"type": "bar", "labels": ["A"], "data": [1]}) is None
    assert render_chart_spec(None) is None
    pie = render_chart_spec({"type": "pie", "title": "T", "labels": ["A", "B"], "data": [2, "x"]})
    try:
        assert [s.label for s in pie.segments] == ["A", "B"]
        assert len(pie.wedges) == 1
    finally:
        pie.close()


# ---------- integration ----------

@pytest.mark.integration
def test_answer_question_runs_generated_sql(engine, session) -> None:
    """Generated SQL is guarded, limited, executed and interpreted."""

    create_lead(session, {"customer_name": "Ali", "lead_type": "satis", "first_customer_source": "Instagram"})
    create_lead(session, {"customer_name": "Veli", "lead_type": "kiralama", "first_customer_source": "Instagram"})
    create_lead(session, {"customer_name": "Can", "lead_type": "satis", "first_customer_source": "Facebook"})

    answer_json = json.dumps({
        "summary": "Instagram 2, Facebook 1 lead.",
        "chartSpec": {"type": "pie", "title": "Kaynak", "labels": ["Instagram", "Facebook"], "data": [2, 1]},
    })
    client = _fake_client(answers=[
        "SELECT first_customer_source AS source, COUNT(*) AS n FROM leads GROUP BY source ORDER BY n DESC",
        answer_json,
    ])
    answer = answer_question("Kaynaklara göre lead sayısı?", engine, _service(client))

    assert answer.sql.endswith("LIMIT 100")
    assert answer.rows == [{"source": "Instagram", "n": 2}, {"source": "Facebook", "n": 1}]
    assert answer.summary.startswith("Instagram 2")
    assert answer.chart_spec["labels"] == ["Instagram", "Facebook"]
    assert '"source": "Instagram"' in client.chat.completions.prompts[1]


@pytest.mark.integration
def test_answer_question_rejects_writes(engine) -> None:
    """A generated DELETE never reaches the database."""

    client = _fake_client(answers=["DELETE FROM leads"])
    with pytest.raises(UnsafeQueryError):
        answer_question("hepsini sil", engine, _service(client))


@pytest.mark.unit
def test_ensure_read_only_ignores_keywords_inside_literals() -> None:
    """Keywords and semicolons inside quoted strings do not trip the guard."""

    sql = "SELECT * FROM leads WHERE status = 'Update' OR last_meeting_note = 'ara; sonra sil (delete)'"
    assert ensure_read_only(sql) == sql
    assert ensure_read_only("SELECT 'it''s' AS x") == "SELECT 'it''s' AS x"
    with pytest.raises(UnsafeQueryError):
        ensure_read_only("SELECT 'x'; DELETE FROM leads")
