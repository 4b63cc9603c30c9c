# src/lead_takip/db.py
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Iterator, Optional
from contextlib import contextmanager
from sqlmodel import SQLModel, create_engine, Session, select
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from dotenv import load_dotenv
import importlib, sys

load_dotenv()
logger = logging.getLogger(__name__)

# --- DB URL in one place (SQLite today, Postgres tomorrow) ---
DB_PATH = os.getenv("DB_PATH", "./data/leads.db")
DEFAULT_SQLITE_URL = f"sqlite:///{Path(DB_PATH)}"
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_SQLITE_URL)

DEFAULT_SETTINGS = {
    "companyName": "",
    "currency": "TRY",
    "language": "tr",
    "darkMode": "false",
    "notifications": "true",
    "autoSave": "true",
    "colors.success": "#4CAF50",
    "colors.error": "#F44336",
    "colors.primary": "#1976D2",
    "colors.warning": "#FF9800",
}


def make_engine(url: str = DATABASE_URL) -> Engine:
    """Engine; SQLite gets Streamlit-friendly threading and foreign keys."""
    engine_kwargs = {"echo": False}
    if url.startswith("sqlite"):
        if url == DEFAULT_SQLITE_URL:
            Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool  # one shared in-memory DB
    eng = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(eng, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cur = dbapi_connection.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

    return eng


engine = make_engine(DATABASE_URL)


def seed_default_settings(session: Session) -> int:
    from lead_takip.models import Setting

    existing = {s.key for s in session.exec(select(Setting)).all()}
    missing = [Setting(key=k, value=v) for k, v in DEFAULT_SETTINGS.items() if k not in existing]
    if missing:
        session.add_all(missing)
        session.commit()
    return len(missing)


def init_db(eng: Optional[Engine] = None) -> None:
    eng = eng or engine
    # make sure the models are loaded exactly ONCE under this name
    if "lead_takip.models" not in sys.modules:
        importlib.import_module("lead_takip.models")
    SQLModel.metadata.create_all(eng)
    with Session(eng) as session:
        n = seed_default_settings(session)
    if n:
        logger.info("seeded %d default settings", n)


@contextmanager
def get_session(eng: Optional[Engine] = None) -> Iterator[Session]:
    with Session(eng or engine) as session:
        yield session
