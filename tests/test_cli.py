"""Integration tests for the command-line importer in scripts/."""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest
from sqlmodel import Session, select

from lead_takip.db import make_engine
from lead_takip.models import Lead

pytestmark = pytest.mark.integration

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "import_leads.py"


@pytest.fixture(scope="module")
def cli():
    """Load scripts/import_leads.py as a module."""

    spec = importlib.util.spec_from_file_location("import_leads_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_imports_csv_and_prints_json(cli, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """A CSV file lands in the given database and the report is printed as JSON."""

    csv_path = tmp_path / "leads.csv"
    csv_path.write_text(
        "Müşteri Adı Soyadı,Müşteri ID,Atanan Personel\nAli Veli,M-1,Ayşe Demir\nCan Er,M-2,\n",
        encoding="utf-8",
    )
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"

    assert cli.main([str(csv_path), "--db-url", db_url, "--json"]) == 0

    report = json.loads(capsys.readouterr().out)
    assert report["imported"] == 2
    assert report["created_reps"] == ["Ayşe Demir"]

    eng = make_engine(db_url)
    with Session(eng) as sess:
        assert sorted(l.customer_name for l in sess.exec(select(Lead)).all()) == ["Ali Veli", "Can Er"]
    eng.dispose()


def test_sample_flag(cli, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """--sample loads the demo leads."""

    assert cli.main(["--sample", "--db-url", f"sqlite:///{tmp_path / 's.db'}"]) == 0
    assert "örnek lead" in capsys.readouterr().out


def test_unsupported_file_returns_error_code(cli, tmp_path: Path) -> None:
    """Unsupported files exit with 1."""

    bad = tmp_path / "leads.pdf"
    bad.write_bytes(b"%PDF")
    assert cli.main([str(bad), "--db-url", f"sqlite:///{tmp_path / 'b.db'}"]) == 1


def test_malformed_json_returns_error_code(cli, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """A broken JSON upload prints a message and exits with 1."""

    bad = tmp_path / "leads.json"
    bad.write_bytes(b"{not json")
    assert cli.main([str(bad), "--db-url", f"sqlite:///{tmp_path / 'j.db'}"]) == 1
    assert "[Hata]" in capsys.readouterr().err
